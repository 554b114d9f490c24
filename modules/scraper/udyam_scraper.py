"""
Udyam portal form scraper.

One-shot extraction of the portal's registration form into the form
schema JSON the validators and the form renderer are built from.

The portal renders part of its form with JavaScript after the OTP step,
so the fetched HTML rarely holds every control. Controls found in the
page update the known baseline fields; baseline fields the page does not
show are kept as they are. Controls that do not map to a known field are
listed in the schema metadata and not added to a step, since nothing
stores them.
"""

import json
import re
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

import httpx
from bs4 import BeautifulSoup

from modules.registration.schema.descriptor import FieldDescriptor, FormSchema, FormStep
from shared.utils.config import settings
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)

USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

SKIPPED_INPUT_TYPES = {"hidden", "submit", "button", "image", "reset", "file"}

# Lowercased control id suffix -> record key
CONTROL_KEY_MAP: Dict[str, str] = {
    "txtadharno": "aadhaarNumber",
    "txtaadhaar": "aadhaarNumber",
    "txtaadhaarno": "aadhaarNumber",
    "txtmobile": "mobileNumber",
    "txtmobileno": "mobileNumber",
    "txtotp": "otp",
    "txtotp1": "otp",
    "txtpan": "panNumber",
    "txtpanno": "panNumber",
    "txtbusinessname": "businessName",
    "txtenterprisename": "businessName",
    "txtownername": "ownerName",
    "txtpanname": "ownerName",
    "txtdob": "dateOfBirth",
    "txtdobdoi": "dateOfBirth",
    "ddlgender": "gender",
    "rblgender": "gender",
    "ddlsocialcategory": "socialCategory",
    "rblcategory": "socialCategory",
    "chkphysicallyhandicapped": "physicallyHandicapped",
    "rblspecialabled": "physicallyHandicapped",
    "chkexserviceman": "exServiceman",
}

OPTION_PLACEHOLDERS = {"", "0", "-1", "select", "--select--"}


def _descriptor(key: str, type: str, label: str, required: bool, **extra: Any) -> FieldDescriptor:
    return FieldDescriptor(key=key, type=type, label=label, required=required, **extra)


BASELINE_STEPS: Tuple[FormStep, ...] = (
    FormStep(
        step_number=1,
        title="Aadhaar + OTP Validation",
        fields=(
            _descriptor("aadhaarNumber", "text", "Aadhaar Number", True,
                        pattern="^[0-9]{12}$", min_length=12, max_length=12,
                        message="Aadhaar number must contain only digits",
                        placeholder="Enter 12 digit Aadhaar Number"),
            _descriptor("mobileNumber", "text", "Mobile Number", True,
                        pattern="^[6-9][0-9]{9}$", min_length=10, max_length=10,
                        message="Mobile number must start with 6-9 and be 10 digits",
                        placeholder="Enter 10 digit Mobile Number"),
            _descriptor("otp", "text", "OTP", True,
                        pattern="^[0-9]{6}$", min_length=6, max_length=6,
                        message="OTP must be 6 digits",
                        placeholder="Enter OTP received on mobile"),
        ),
    ),
    FormStep(
        step_number=2,
        title="PAN Validation & Business Details",
        fields=(
            _descriptor("panNumber", "text", "PAN Number", True,
                        pattern="^[A-Za-z]{5}[0-9]{4}[A-Za-z]{1}$", min_length=10, max_length=10,
                        message="Invalid PAN format. Expected format: ABCDE1234F",
                        placeholder="Enter 10 digit PAN Number"),
            _descriptor("businessName", "text", "Business Name", True, min_length=3, max_length=100,
                        placeholder="Enter Business Name as per PAN"),
            _descriptor("ownerName", "text", "Owner Name", True, min_length=3, max_length=100,
                        placeholder="Enter Owner Name as per PAN"),
            _descriptor("dateOfBirth", "date", "Date of Birth", True),
            _descriptor("gender", "select", "Gender", True, options=("Male", "Female", "Other")),
            _descriptor("socialCategory", "select", "Social Category", True,
                        options=("General", "OBC", "SC", "ST", "EWS")),
            _descriptor("physicallyHandicapped", "checkbox", "Physically Handicapped", False),
            _descriptor("exServiceman", "checkbox", "Ex-Serviceman", False),
        ),
    ),
)


def control_key(control_id: str) -> Optional[str]:
    """
    Map an ASP.NET control id to a record key.

    ``ctl00_ContentPlaceHolder1_txtadharno`` and ``ctl00$ContentPlaceHolder1$txtadharno``
    both map through their last segment.
    """
    suffix = re.split(r"[_$]", control_id)[-1].lower()
    return CONTROL_KEY_MAP.get(suffix)


class UdyamFormScraper:
    """
    Extracts the registration form structure from the Udyam portal.

    Usage:
        scraper = UdyamFormScraper()
        schema = await scraper.scrape()
        scraper.save(schema, "config/forms/udyam_form_schema.json")
    """

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize scraper.

        Args:
            url: Portal page URL (defaults to UDYAM_PORTAL_URL)
            timeout: Request timeout in seconds
            client: Pre-built HTTP client (tests pass a mocked transport)
        """
        self.url = url or settings.UDYAM_PORTAL_URL
        self.timeout = timeout or settings.SCRAPER_TIMEOUT
        self._client = client

    async def fetch_html(self) -> str:
        """
        Fetch the portal page.

        Raises:
            httpx.HTTPError: On network failure or a non-2xx response
        """
        logger.info(f"Fetching form page: {self.url}")

        if self._client is not None:
            response = await self._client.get(self.url)
        else:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
                follow_redirects=True,
            ) as client:
                response = await client.get(self.url)

        response.raise_for_status()
        return response.text

    def parse_controls(self, html: str) -> List[Dict[str, Any]]:
        """
        Parse form controls from HTML.

        Radio buttons sharing a name collapse into one select-like control
        whose options are the radio labels.

        Returns:
            Raw control dicts: id, type, label, required, pattern, maxLength, options
        """
        soup = BeautifulSoup(html, "html.parser")
        controls: List[Dict[str, Any]] = []
        radio_groups: Dict[str, Dict[str, Any]] = {}

        for element in soup.find_all(["input", "select", "textarea"]):
            control_id = element.get("id") or element.get("name")
            if not control_id:
                continue

            input_type = (element.get("type") or "text").lower() if element.name == "input" else element.name
            if input_type in SKIPPED_INPUT_TYPES:
                continue

            label = self._label_for(soup, element)

            if input_type == "radio":
                group_name = element.get("name") or control_id
                group = radio_groups.get(group_name)
                if group is None:
                    group = {
                        "id": group_name,
                        "type": "select",
                        "label": self._group_label(soup, group_name),
                        "required": False,
                        "pattern": None,
                        "maxLength": None,
                        "options": [],
                    }
                    radio_groups[group_name] = group
                    controls.append(group)
                group["options"].append(label or element.get("value") or "")
                group["required"] = group["required"] or self._is_required(element)
                continue

            control = {
                "id": control_id,
                "type": self._semantic_type(input_type),
                "label": label or element.get("placeholder") or control_id,
                "required": self._is_required(element),
                "pattern": element.get("pattern"),
                "maxLength": self._max_length(element),
                "options": [],
            }
            if element.name == "select":
                control["options"] = [
                    option.get_text(strip=True)
                    for option in element.find_all("option")
                    if (option.get("value") or "").strip().lower() not in OPTION_PLACEHOLDERS
                ]
            controls.append(control)

        logger.info(f"Parsed {len(controls)} form controls")
        return controls

    def build_schema(self, controls: List[Dict[str, Any]]) -> FormSchema:
        """
        Merge parsed controls into the baseline steps.

        Scraped attributes (required, pattern, maxLength, options, label)
        override the baseline where present.
        """
        scraped: Dict[str, Dict[str, Any]] = {}
        unmapped: List[str] = []

        for control in controls:
            key = control_key(control["id"])
            if key is None:
                unmapped.append(control["id"])
            else:
                scraped[key] = control

        steps = []
        for step in BASELINE_STEPS:
            fields = tuple(self._merge(f, scraped.get(f.key)) for f in step.fields)
            steps.append(FormStep(step_number=step.step_number, title=step.title, fields=fields))

        if unmapped:
            logger.warning(f"Unmapped form controls: {', '.join(unmapped)}")

        return FormSchema(
            steps=tuple(steps),
            metadata={
                "url": self.url,
                "scrapedAt": datetime.now(timezone.utc).isoformat(),
                "totalFields": sum(len(s.fields) for s in steps),
                "scrapedFields": sorted(scraped),
                "unmappedFields": unmapped,
            },
        )

    async def scrape(self) -> FormSchema:
        """Fetch, parse and merge the portal form."""
        html = await self.fetch_html()
        return self.build_schema(self.parse_controls(html))

    def save(self, schema: FormSchema, output_path: Union[str, Path]) -> Path:
        """
        Write the schema JSON.

        Returns:
            Path written
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(schema.to_dict(), f, indent=2)
            f.write("\n")
        logger.info(f"Form schema saved to: {output_path}")
        return output_path

    @staticmethod
    def _merge(baseline: FieldDescriptor, control: Optional[Dict[str, Any]]) -> FieldDescriptor:
        if control is None:
            return baseline

        # Checkbox fields are submitted as booleans; only the label is taken from the page
        if baseline.type == "checkbox":
            label = control["label"] if control["label"] != control["id"] else baseline.label
            return replace(baseline, label=label)

        options = tuple(control["options"]) if control["options"] else baseline.options
        return FieldDescriptor(
            key=baseline.key,
            type=control["type"] if control["type"] != "text" else baseline.type,
            label=control["label"] if control["label"] != control["id"] else baseline.label,
            required=control["required"] or baseline.required,
            pattern=control["pattern"] or baseline.pattern,
            options=options,
            min_length=baseline.min_length,
            max_length=control["maxLength"] or baseline.max_length,
            message=baseline.message,
            placeholder=baseline.placeholder,
        )

    @staticmethod
    def _semantic_type(input_type: str) -> str:
        if input_type in ("select", "checkbox", "email", "date"):
            return input_type
        return "text"

    @staticmethod
    def _is_required(element) -> bool:
        return element.has_attr("required") or element.get("aria-required") == "true"

    @staticmethod
    def _max_length(element) -> Optional[int]:
        value = element.get("maxlength")
        if value and str(value).isdigit():
            return int(value)
        return None

    @staticmethod
    def _label_for(soup: BeautifulSoup, element) -> Optional[str]:
        element_id = element.get("id")
        if element_id:
            label = soup.find("label", attrs={"for": element_id})
            if label:
                return label.get_text(" ", strip=True)
        parent = element.find_parent("label")
        if parent:
            return parent.get_text(" ", strip=True)
        return None

    @staticmethod
    def _group_label(soup: BeautifulSoup, group_name: str) -> str:
        label = soup.find(attrs={"data-group": group_name})
        if label:
            return label.get_text(" ", strip=True)
        return group_name
