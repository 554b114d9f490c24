"""
API tests through the ASGI app with a SQLite store.
"""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from modules.registration.core.exceptions import SchemaCompilationError
from modules.registration.schema import FormSchema
from src.api.config import APISettings
from src.api.main import create_application
from src.api.v1.dependencies import rate_limit
from src.api.v1.dependencies.rate_limit import RateLimiter
from tests.conftest import VALID_STEP1, VALID_STEP2

API_KEY = "test-key-0001"


def build_app(session_maker, form_schema, issuer, **overrides):
    api_settings = APISettings(ENABLE_RATE_LIMIT=False, API_KEYS=[API_KEY], **overrides)
    return create_application(
        api_settings=api_settings,
        session_maker=session_maker,
        form_schema=form_schema,
        id_issuer=issuer,
    )


@pytest_asyncio.fixture
async def client(session_maker, form_schema, issuer):
    app = build_app(session_maker, form_schema, issuer)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def start(client, payload=VALID_STEP1):
    response = await client.post("/api/step1/initiate", json=payload)
    assert response.status_code == 200
    return response.json()


async def verify(client, registration_id, otp="123456"):
    return await client.post("/api/step1/verify-otp", json={"registrationId": registration_id, "otp": otp})


class TestStep1Endpoints:

    @pytest.mark.asyncio
    async def test_initiate(self, client):
        data = await start(client)

        assert data["message"] == "Registration initiated successfully"
        assert data["step"] == 1
        assert len(data["demoOTP"]) == 6
        assert "registrationId" in data

    @pytest.mark.asyncio
    async def test_initiate_validation_errors(self, client):
        response = await client.post("/api/step1/initiate", json={"aadhaarNumber": "12345", "mobileNumber": "1876543210"})

        assert response.status_code == 400
        assert response.json() == {
            "error": "Validation failed",
            "details": [
                {"field": "aadhaarNumber", "message": "Aadhaar Number must be exactly 12 characters"},
                {"field": "mobileNumber", "message": "Mobile number must start with 6-9 and be 10 digits"},
            ],
        }

    @pytest.mark.asyncio
    async def test_initiate_empty_body(self, client):
        response = await client.post("/api/step1/initiate", json={})

        assert response.status_code == 400
        assert [d["field"] for d in response.json()["details"]] == ["aadhaarNumber", "mobileNumber"]

    @pytest.mark.asyncio
    async def test_malformed_json_body(self, client):
        response = await client.post(
            "/api/step1/initiate",
            content="{not json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "Validation failed"

    @pytest.mark.asyncio
    async def test_reinitiate_returns_same_id(self, client):
        first = await start(client)
        second = await start(client, {**VALID_STEP1, "mobileNumber": "8123456789"})
        assert first["registrationId"] == second["registrationId"]

    @pytest.mark.asyncio
    async def test_duplicate_after_verification(self, client):
        data = await start(client)
        assert (await verify(client, data["registrationId"])).status_code == 200

        response = await client.post("/api/step1/initiate", json=VALID_STEP1)

        assert response.status_code == 400
        assert response.json() == {
            "error": "Registration already exists for this Aadhaar number",
            "registrationId": data["registrationId"],
        }

    @pytest.mark.asyncio
    async def test_verify(self, client):
        data = await start(client)
        response = await verify(client, data["registrationId"], data["demoOTP"])

        assert response.status_code == 200
        assert response.json() == {
            "message": "OTP verified successfully",
            "registrationId": data["registrationId"],
            "step1Completed": True,
            "canProceedToStep2": True,
        }

    @pytest.mark.asyncio
    async def test_verify_bad_format(self, client):
        data = await start(client)
        response = await verify(client, data["registrationId"], "12")

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid OTP format. OTP must be 6 digits."}

    @pytest.mark.asyncio
    async def test_verify_unknown_registration(self, client):
        response = await verify(client, "00000000-0000-0000-0000-000000000000")

        assert response.status_code == 404
        assert response.json() == {"error": "Registration not found"}

    @pytest.mark.asyncio
    async def test_verify_twice(self, client):
        data = await start(client)
        await verify(client, data["registrationId"])

        response = await verify(client, data["registrationId"])
        assert response.status_code == 400
        assert response.json() == {"error": "Step 1 already completed"}


class TestStep2Endpoints:

    @pytest.mark.asyncio
    async def test_full_flow(self, client):
        data = await start(client)
        await verify(client, data["registrationId"])

        response = await client.post("/api/step2/submit", json={"registrationId": data["registrationId"], **VALID_STEP2})

        assert response.status_code == 200
        assert response.json() == {
            "message": "Registration completed successfully",
            "registrationId": data["registrationId"],
            "udyamNumber": "UDYAM-TEST-0001",
            "step2Completed": True,
            "registrationStatus": "COMPLETED",
        }

        status = await client.get(f"/api/registration/{data['registrationId']}")
        body = status.json()
        assert status.status_code == 200
        assert body["progress"] == {"step1": True, "step2": True, "total": 100}
        assert body["registration"]["udyamNumber"] == "UDYAM-TEST-0001"
        assert "aadhaarNumber" not in body["registration"]
        assert "mobileNumber" not in body["registration"]

    @pytest.mark.asyncio
    async def test_before_verification(self, client):
        data = await start(client)
        response = await client.post("/api/step2/submit", json={"registrationId": data["registrationId"], **VALID_STEP2})

        assert response.status_code == 400
        assert response.json() == {"error": "Step 1 must be completed before proceeding to Step 2"}

    @pytest.mark.asyncio
    async def test_invalid_details(self, client):
        data = await start(client)
        await verify(client, data["registrationId"])

        response = await client.post(
            "/api/step2/submit",
            json={"registrationId": data["registrationId"], **VALID_STEP2, "panNumber": "ABCD12345", "gender": "X"},
        )

        assert response.status_code == 400
        assert [d["field"] for d in response.json()["details"]] == ["panNumber", "gender"]

    @pytest.mark.asyncio
    async def test_missing_registration_id(self, client):
        response = await client.post("/api/step2/submit", json=VALID_STEP2)

        assert response.status_code == 400
        assert response.json()["details"] == [{"field": "registrationId", "message": "Registration ID is required"}]

    @pytest.mark.asyncio
    async def test_second_submission(self, client):
        data = await start(client)
        await verify(client, data["registrationId"])
        payload = {"registrationId": data["registrationId"], **VALID_STEP2}
        await client.post("/api/step2/submit", json=payload)

        response = await client.post("/api/step2/submit", json=payload)
        assert response.status_code == 400
        assert response.json() == {"error": "Step 2 already completed"}


class TestQueryEndpoints:

    @pytest.mark.asyncio
    async def test_status_progress(self, client):
        data = await start(client)

        response = await client.get(f"/api/registration/{data['registrationId']}")
        assert response.json()["progress"] == {"step1": False, "step2": False, "total": 0}

        await verify(client, data["registrationId"])
        response = await client.get(f"/api/registration/{data['registrationId']}")
        assert response.json()["progress"]["total"] == 50

    @pytest.mark.asyncio
    async def test_status_unknown(self, client):
        response = await client.get("/api/registration/unknown")
        assert response.status_code == 404
        assert response.json() == {"error": "Registration not found"}

    @pytest.mark.asyncio
    async def test_admin_requires_key(self, client):
        response = await client.get("/api/admin/registrations")
        assert response.status_code == 401
        assert response.json() == {"error": "API key is required"}

        response = await client.get("/api/admin/registrations", headers={"X-API-Key": "wrong"})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_admin_list(self, client):
        await start(client)
        await start(client, {"aadhaarNumber": "210987654321", "mobileNumber": "7000000000"})

        response = await client.get("/api/admin/registrations", headers={"X-API-Key": API_KEY})

        assert response.status_code == 200
        rows = response.json()["registrations"]
        assert len(rows) == 2
        assert all("aadhaarNumber" not in row and "mobileNumber" not in row for row in rows)

        response = await client.get("/api/admin/registrations?limit=1", headers={"X-API-Key": API_KEY})
        assert len(response.json()["registrations"]) == 1

    @pytest.mark.asyncio
    async def test_form_schema(self, client, form_schema):
        response = await client.get("/api/forms/schema")
        assert response.status_code == 200
        assert response.json()["steps"][0]["fields"][0]["key"] == "aadhaarNumber"

        response = await client.get("/api/forms/schema/2")
        assert response.json()["stepNumber"] == 2
        assert response.json()["fields"][4]["options"] == ["Male", "Female", "Other"]

        response = await client.get("/api/forms/schema/9")
        assert response.status_code == 404
        assert response.json() == {"error": "Form step 9 not found"}


class TestApplication:

    @pytest.mark.asyncio
    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "OK"
        assert "X-Process-Time" in response.headers

    @pytest.mark.asyncio
    async def test_unknown_route(self, client):
        response = await client.get("/api/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"error": "Route not found"}

    @pytest.mark.asyncio
    async def test_rate_limit(self, session_maker, form_schema, issuer):
        app = build_app(session_maker, form_schema, issuer)
        app.state.rate_limiter.enabled = True
        app.state.rate_limiter.max_requests = 2

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            first = await client.get("/api/")
            assert first.status_code == 200
            assert first.headers["X-RateLimit-Limit"] == "2"
            assert first.headers["X-RateLimit-Remaining"] == "1"
            assert (await client.get("/api/")).status_code == 200
            response = await client.get("/api/")

        assert response.status_code == 429
        assert "Retry-After" in response.headers

    @pytest.mark.asyncio
    async def test_rate_limit_ignores_forwarded_for(self, session_maker, form_schema, issuer):
        app = build_app(session_maker, form_schema, issuer)
        app.state.rate_limiter.enabled = True
        app.state.rate_limiter.max_requests = 2

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            codes = [
                (await client.get("/api/", headers={"X-Forwarded-For": f"10.0.0.{i}"})).status_code
                for i in range(4)
            ]

        assert codes == [200, 200, 429, 429]
        assert len(app.state.rate_limiter.requests) == 1

    @pytest.mark.asyncio
    async def test_rate_limit_trusts_forwarded_for_when_enabled(self, session_maker, form_schema, issuer):
        app = build_app(session_maker, form_schema, issuer, TRUST_PROXY_HEADERS=True)
        app.state.rate_limiter.enabled = True
        app.state.rate_limiter.max_requests = 1

        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
            first = await client.get("/api/", headers={"X-Forwarded-For": "10.0.0.1, 172.16.0.1"})
            second = await client.get("/api/", headers={"X-Forwarded-For": "10.0.0.2"})
            repeat = await client.get("/api/", headers={"X-Forwarded-For": "10.0.0.1"})

        assert (first.status_code, second.status_code, repeat.status_code) == (200, 200, 429)
        assert set(app.state.rate_limiter.requests) == {"10.0.0.1", "10.0.0.2"}

    @pytest.mark.asyncio
    async def test_internal_error_is_opaque(self, session_maker, form_schema):
        class BrokenIssuer:
            def issue(self):
                raise RuntimeError("issuer backend unavailable")

        app = build_app(session_maker, form_schema, BrokenIssuer())
        transport = ASGITransport(app=app, raise_app_exceptions=False)

        async with AsyncClient(transport=transport, base_url="http://test") as client:
            data = await start(client)
            await verify(client, data["registrationId"])
            response = await client.post(
                "/api/step2/submit", json={"registrationId": data["registrationId"], **VALID_STEP2}
            )
            status = await client.get(f"/api/registration/{data['registrationId']}")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}
        # The submitted-state write rolled back with the failed assignment
        assert status.json()["progress"]["step2"] is False

    def test_invalid_schema_prevents_startup(self):
        broken = FormSchema.from_dict({"steps": [{"stepNumber": 1, "fields": [{"key": "a"}, {"key": "a"}]}]})
        with pytest.raises(SchemaCompilationError):
            create_application(form_schema=broken)


def test_rate_limiter_drops_idle_clients(monkeypatch):
    now = [1000.0]
    monkeypatch.setattr(rate_limit.time, "time", lambda: now[0])
    limiter = RateLimiter(max_requests=5, window_seconds=60)

    for i in range(3):
        assert limiter.is_allowed(f"10.0.0.{i}")
    assert len(limiter.requests) == 3

    now[0] += 61
    assert limiter.is_allowed("10.0.0.9")

    assert list(limiter.requests) == ["10.0.0.9"]
