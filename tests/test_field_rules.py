"""
Tests for the compiled Udyam field rules.

Covers the fixed government ID formats and the business detail bounds.
"""

import pytest

from tests.conftest import VALID_STEP1, VALID_STEP2


def errors_of(result):
    return {e.field: e.message for e in result.errors}


class TestAadhaarRule:

    @pytest.mark.parametrize("aadhaar", ["123456789012", "000000000000", "999999999999"])
    def test_accepts_twelve_digits(self, validators, aadhaar):
        result = validators.step1.validate({**VALID_STEP1, "aadhaarNumber": aadhaar})
        assert result.passed
        assert result.record["aadhaarNumber"] == aadhaar

    @pytest.mark.parametrize("aadhaar", ["12345678901", "1234567890123", "1"])
    def test_rejects_wrong_length(self, validators, aadhaar):
        result = validators.step1.validate({**VALID_STEP1, "aadhaarNumber": aadhaar})
        assert not result.passed
        assert errors_of(result)["aadhaarNumber"] == "Aadhaar Number must be exactly 12 characters"

    @pytest.mark.parametrize("aadhaar", ["12345678901a", "1234 5678 90", "abcdefghijkl"])
    def test_rejects_non_digits(self, validators, aadhaar):
        result = validators.step1.validate({**VALID_STEP1, "aadhaarNumber": aadhaar})
        assert errors_of(result)["aadhaarNumber"] == "Aadhaar number must contain only digits"

    def test_missing_is_required(self, validators):
        result = validators.step1.validate({"mobileNumber": "9876543210"})
        assert errors_of(result) == {"aadhaarNumber": "Aadhaar Number is required"}


class TestMobileRule:

    @pytest.mark.parametrize("mobile", ["6000000000", "7123456789", "8999999999", "9876543210"])
    def test_accepts_valid_numbers(self, validators, mobile):
        assert validators.step1.validate({**VALID_STEP1, "mobileNumber": mobile}).passed

    def test_rejects_leading_digit(self, validators):
        result = validators.step1.validate({**VALID_STEP1, "mobileNumber": "1876543210"})
        assert errors_of(result)["mobileNumber"] == "Mobile number must start with 6-9 and be 10 digits"

    def test_rejects_short_number(self, validators):
        result = validators.step1.validate({**VALID_STEP1, "mobileNumber": "98765"})
        assert errors_of(result)["mobileNumber"] == "Mobile Number must be exactly 10 characters"


class TestOtpRule:

    def test_accepts_six_digits(self, validators):
        assert validators.otp.validate({"otp": "123456"}).passed

    @pytest.mark.parametrize("otp", ["12345", "1234567", "12345a", "", None, 123456])
    def test_rejects_malformed(self, validators, otp):
        assert not validators.otp.validate({"otp": otp}).passed


class TestPanRule:

    def test_accepts_valid_pan(self, validators):
        assert validators.step2.validate(VALID_STEP2).passed

    def test_accepts_lowercase_pan(self, validators):
        assert validators.step2.validate({**VALID_STEP2, "panNumber": "abcde1234f"}).passed

    def test_rejects_wrong_shape(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "panNumber": "ABCD12345"})
        assert "panNumber" in errors_of(result)

    def test_rejects_wrong_order(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "panNumber": "ABCD1E234F"})
        assert errors_of(result)["panNumber"] == "Invalid PAN format. Expected format: ABCDE1234F"


class TestNameRules:

    @pytest.mark.parametrize("key", ["businessName", "ownerName"])
    def test_rejects_too_short(self, validators, key):
        result = validators.step2.validate({**VALID_STEP2, key: "AB"})
        assert "at least 3 characters" in errors_of(result)[key]

    @pytest.mark.parametrize("key", ["businessName", "ownerName"])
    def test_rejects_too_long(self, validators, key):
        result = validators.step2.validate({**VALID_STEP2, key: "A" * 101})
        assert "at most 100 characters" in errors_of(result)[key]

    @pytest.mark.parametrize("name", ["ABC", "A" * 50, "A" * 100])
    def test_accepts_bounds(self, validators, name):
        result = validators.step2.validate({**VALID_STEP2, "businessName": name, "ownerName": name})
        assert result.passed


class TestSelectAndFlags:

    def test_rejects_unknown_gender(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "gender": "Unknown"})
        assert errors_of(result)["gender"] == "Gender must be one of: Male, Female, Other"

    def test_rejects_unknown_category(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "socialCategory": "XYZ"})
        assert "socialCategory" in errors_of(result)

    def test_date_of_birth_required(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "dateOfBirth": ""})
        assert errors_of(result)["dateOfBirth"] == "Date of Birth is required"

    def test_flags_default_to_false(self, validators):
        payload = {k: v for k, v in VALID_STEP2.items() if k not in ("physicallyHandicapped", "exServiceman")}
        result = validators.step2.validate(payload)
        assert result.passed
        assert result.record["physicallyHandicapped"] is False
        assert result.record["exServiceman"] is False

    def test_flag_true_kept(self, validators):
        result = validators.step2.validate({**VALID_STEP2, "exServiceman": True})
        assert result.record["exServiceman"] is True


class TestErrorShape:

    def test_all_errors_in_declaration_order(self, validators):
        result = validators.step2.validate({})
        fields = [e.field for e in result.errors]
        assert fields == ["panNumber", "businessName", "ownerName", "dateOfBirth", "gender", "socialCategory"]

    def test_one_error_per_field(self, validators):
        result = validators.step1.validate({"aadhaarNumber": "12ab", "mobileNumber": "123"})
        assert len(result.errors) == 2

    def test_deterministic(self, validators):
        payload = {"aadhaarNumber": "bad", "mobileNumber": "1"}
        first = validators.step1.validate(payload)
        second = validators.step1.validate(payload)
        assert first == second

    def test_undeclared_keys_dropped(self, validators):
        result = validators.step1.validate({**VALID_STEP1, "extra": "value"})
        assert "extra" not in result.record
