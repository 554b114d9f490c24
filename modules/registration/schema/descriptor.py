"""
Field descriptors and form schema loading.

A field descriptor is the declarative description of one form input as
scraped from the portal. The same descriptor list drives the server side
validator and the client side form renderer.

File format (one array of descriptors per step):

    {
      "metadata": {"url": "...", "scrapedAt": "...", "totalFields": 11},
      "steps": [
        {"stepNumber": 1, "title": "Aadhaar + OTP Validation",
         "fields": [{"key": "aadhaarNumber", "type": "text", ...}, ...]},
        ...
      ]
    }

A bare array of descriptors is accepted as a single step schema.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from modules.registration.core.exceptions import SchemaCompilationError
from shared.utils.logger import setup_logger

logger = setup_logger(__name__)


@dataclass(frozen=True)
class FieldDescriptor:
    """Declarative metadata for one form input."""
    key: str
    type: str = "text"
    label: str = ""
    required: bool = False
    pattern: Optional[str] = None
    options: Tuple[str, ...] = field(default_factory=tuple)
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    message: Optional[str] = None
    placeholder: Optional[str] = None

    @property
    def display_name(self) -> str:
        """Label used in error messages, falling back to the key."""
        return self.label or self.key

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "FieldDescriptor":
        """
        Build a descriptor from its JSON form.

        Accepts both the flat format and the scraper's nested
        ``validation`` block (pattern, minLength, maxLength, message).

        Raises:
            SchemaCompilationError: If the entry is not an object
        """
        if not isinstance(data, Mapping):
            raise SchemaCompilationError(f"Field descriptor must be an object, got {type(data).__name__}")

        validation = data.get("validation") or {}
        if not isinstance(validation, Mapping):
            validation = {}

        def pick(*names: str) -> Any:
            for name in names:
                if data.get(name) is not None:
                    return data[name]
                if validation.get(name) is not None:
                    return validation[name]
            return None

        options = data.get("options") or ()
        if isinstance(options, str) or not isinstance(options, Iterable):
            raise SchemaCompilationError(f"Field '{data.get('key')}' options must be a list")

        return cls(
            key=str(data.get("key") or "").strip(),
            type=str(data.get("type") or "text").strip().lower(),
            label=str(data.get("label") or ""),
            required=_required_flag(data.get("required", False), data.get("key")),
            pattern=pick("pattern"),
            options=tuple(str(o) for o in options),
            min_length=_optional_int(pick("minLength", "min_length"), data.get("key")),
            max_length=_optional_int(pick("maxLength", "max_length"), data.get("key")),
            message=pick("message"),
            placeholder=data.get("placeholder"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the renderer facing JSON form."""
        result: Dict[str, Any] = {
            "key": self.key,
            "type": self.type,
            "label": self.label,
            "required": self.required,
        }
        if self.pattern:
            result["pattern"] = self.pattern
        if self.options:
            result["options"] = list(self.options)
        if self.min_length is not None:
            result["minLength"] = self.min_length
        if self.max_length is not None:
            result["maxLength"] = self.max_length
        if self.message:
            result["message"] = self.message
        if self.placeholder:
            result["placeholder"] = self.placeholder
        return result


def _required_flag(value: Any, key: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise SchemaCompilationError(f"Field '{key}' required must be true or false, got {value!r}")
    return value


def _optional_int(value: Any, key: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise SchemaCompilationError(f"Field '{key}' length bound must be an integer, got {value!r}")


@dataclass(frozen=True)
class FormStep:
    """One step of the form: a title and its ordered fields."""
    step_number: int
    title: str
    fields: Tuple[FieldDescriptor, ...]

    @property
    def keys(self) -> List[str]:
        return [f.key for f in self.fields]

    def subset(self, keys: Iterable[str]) -> Tuple[FieldDescriptor, ...]:
        """
        Pick fields by key, keeping declaration order.

        Raises:
            SchemaCompilationError: If a requested key is not in this step
        """
        wanted = set(keys)
        missing = wanted - set(self.keys)
        if missing:
            raise SchemaCompilationError(
                f"Step {self.step_number} has no field(s): {', '.join(sorted(missing))}"
            )
        return tuple(f for f in self.fields if f.key in wanted)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "stepNumber": self.step_number,
            "title": self.title,
            "fields": [f.to_dict() for f in self.fields],
        }


@dataclass(frozen=True)
class FormSchema:
    """All steps of a scraped form."""
    steps: Tuple[FormStep, ...]
    metadata: Dict[str, Any] = field(default_factory=dict)

    def step(self, step_number: int) -> FormStep:
        """
        Get a step by number.

        Raises:
            KeyError: If the step does not exist
        """
        for step in self.steps:
            if step.step_number == step_number:
                return step
        raise KeyError(step_number)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "metadata": self.metadata,
            "steps": [s.to_dict() for s in self.steps],
        }

    @classmethod
    def from_dict(cls, data: Union[Mapping[str, Any], List[Any]]) -> "FormSchema":
        """
        Parse a schema document.

        Raises:
            SchemaCompilationError: If the document shape is not recognised
        """
        if isinstance(data, list):
            fields = tuple(FieldDescriptor.from_dict(d) for d in data)
            return cls(steps=(FormStep(step_number=1, title="", fields=fields),))

        if not isinstance(data, Mapping) or not isinstance(data.get("steps"), list):
            raise SchemaCompilationError("Form schema must be a list of fields or an object with 'steps'")

        steps = []
        for index, raw_step in enumerate(data["steps"], start=1):
            if not isinstance(raw_step, Mapping):
                raise SchemaCompilationError(f"Step #{index} must be an object")
            raw_fields = raw_step.get("fields") or []
            if not isinstance(raw_fields, list):
                raise SchemaCompilationError(f"Step #{index} fields must be a list")
            steps.append(FormStep(
                step_number=int(raw_step.get("stepNumber", index)),
                title=str(raw_step.get("title", "")),
                fields=tuple(FieldDescriptor.from_dict(d) for d in raw_fields),
            ))

        return cls(steps=tuple(steps), metadata=dict(data.get("metadata") or {}))


def load_form_schema(path: Union[str, Path]) -> FormSchema:
    """
    Load a form schema JSON file.

    Args:
        path: Path to the schema file

    Returns:
        Parsed FormSchema

    Raises:
        SchemaCompilationError: If the file is missing or not valid JSON
    """
    path = Path(path)
    if not path.exists():
        raise SchemaCompilationError(f"Form schema file not found: {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SchemaCompilationError(f"Form schema file is not valid JSON: {path}: {e}") from e

    schema = FormSchema.from_dict(data)
    logger.info(
        f"Loaded form schema from {path}: "
        f"{len(schema.steps)} steps, {sum(len(s.fields) for s in schema.steps)} fields"
    )
    return schema
