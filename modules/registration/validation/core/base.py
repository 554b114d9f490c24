"""
Base classes and data models for the field validation system.

This module provides the foundation for all field rules:
- FieldRule: Abstract base class for compiled per-field rules
- FieldError: One field scoped error message
- Accepted / Rejected: The two outcomes of validating a record
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field as dataclass_field
from typing import Any, Dict, List, Optional, Tuple, Union

from modules.registration.schema.descriptor import FieldDescriptor


def is_empty(value: Any) -> bool:
    """Absent, None, and blank strings all count as empty."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, dict)):
        return len(value) == 0
    return False


@dataclass(frozen=True)
class FieldError:
    """A validation error scoped to one field."""
    field: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class Accepted:
    """The record passed; ``record`` holds the normalized values."""
    record: Dict[str, Any] = dataclass_field(default_factory=dict)

    passed = True

    @property
    def errors(self) -> List[FieldError]:
        return []


@dataclass(frozen=True)
class Rejected:
    """The record failed; ``errors`` lists every failing field in declaration order."""
    errors: Tuple[FieldError, ...] = ()

    passed = False

    def to_list(self) -> List[Dict[str, str]]:
        return [e.to_dict() for e in self.errors]


ValidationResult = Union[Accepted, Rejected]


class FieldRule(ABC):
    """
    Abstract base class for compiled field rules.

    A rule is built once from a FieldDescriptor and is immutable afterwards,
    so one instance can be shared by concurrent requests.

    Subclasses implement ``check`` for non-empty values. Empty values are
    handled here: a required field reports the required message, and the
    optional case is handled by wrapping the rule in OptionalRule at
    compile time.

    Example:
        @register_rule("pincode")
        class PincodeRule(TextRule):
            def check(self, value):
                ...
    """

    #: Value used for an empty optional field after normalization
    default: Any = None

    def __init__(self, descriptor: FieldDescriptor):
        self.descriptor = descriptor
        self.key = descriptor.key
        self.label = descriptor.display_name

    def evaluate(self, value: Any) -> Tuple[Optional[str], Any]:
        """
        Validate and normalize one value.

        Returns:
            (error message or None, normalized value)
        """
        if is_empty(value):
            return f"{self.label} is required", value
        message = self.check(value)
        if message:
            return message, value
        return None, self.normalize(value)

    @abstractmethod
    def check(self, value: Any) -> Optional[str]:
        """
        Check a non-empty value.

        Returns:
            Error message naming the violated constraint, or None
        """
        pass

    def normalize(self, value: Any) -> Any:
        """Normalized form of an accepted value."""
        return value

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(key={self.key!r})>"


class OptionalRule(FieldRule):
    """
    Wraps a rule so an empty value is always valid.

    Pattern, length and enum checks of the inner rule only run when a value
    is present.
    """

    def __init__(self, inner: FieldRule):
        super().__init__(inner.descriptor)
        self.inner = inner
        self.default = inner.default

    def evaluate(self, value: Any) -> Tuple[Optional[str], Any]:
        if is_empty(value):
            return None, self.default
        return self.inner.evaluate(value)

    def check(self, value: Any) -> Optional[str]:
        return self.inner.check(value)

    def __repr__(self) -> str:
        return f"<OptionalRule({self.inner!r})>"
