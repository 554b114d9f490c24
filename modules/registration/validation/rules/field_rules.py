"""
Field rules module.

Contains the rule classes for each descriptor semantic type:
- TextRule: string type, length bounds, pattern (also the fallback rule)
- EmailRule: TextRule plus email well-formedness
- SelectRule: closed-enum membership when options are declared
- CheckboxRule: boolean flag, defaults to False
- DateRule: non-empty text, no calendar check
"""

import re
from typing import Any, Optional

from modules.registration.schema.descriptor import FieldDescriptor
from modules.registration.validation.core.base import FieldRule
from modules.registration.validation.core.registry import register_rule

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


@register_rule("text")
class TextRule(FieldRule):
    """
    Validate a string field.

    Checks run in order and the first failure is reported:
    string type, length bounds, pattern.

    Descriptor keys used:
        minLength / maxLength: inclusive character bounds
        pattern: regex the whole value must match
        message: custom message for a pattern mismatch

    Raises:
        re.error: If the descriptor pattern does not compile
    """

    def __init__(self, descriptor: FieldDescriptor):
        super().__init__(descriptor)
        self.min_length = descriptor.min_length
        self.max_length = descriptor.max_length
        self.pattern = re.compile(descriptor.pattern) if descriptor.pattern else None
        self.pattern_message = descriptor.message or f"{self.label} has an invalid format"

    def check(self, value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return f"{self.label} must be a string"

        message = self._check_length(value)
        if message:
            return message

        if self.pattern is not None and not self.pattern.fullmatch(value):
            return self.pattern_message

        return None

    def _check_length(self, value: str) -> Optional[str]:
        length = len(value)
        if self.min_length is not None and self.min_length == self.max_length:
            if length != self.min_length:
                return f"{self.label} must be exactly {self.min_length} characters"
            return None
        if self.min_length is not None and length < self.min_length:
            return f"{self.label} must be at least {self.min_length} characters"
        if self.max_length is not None and length > self.max_length:
            return f"{self.label} must be at most {self.max_length} characters"
        return None


@register_rule("email")
class EmailRule(TextRule):
    """Text rule plus an email syntax check."""

    def check(self, value: Any) -> Optional[str]:
        message = super().check(value)
        if message:
            return message
        if not EMAIL_PATTERN.fullmatch(value):
            return f"{self.label} must be a valid email address"
        return None


@register_rule("select")
class SelectRule(TextRule):
    """
    Closed-enum selection.

    With no declared options the rule behaves exactly like TextRule.
    """

    def __init__(self, descriptor: FieldDescriptor):
        super().__init__(descriptor)
        self.options = tuple(descriptor.options)

    def check(self, value: Any) -> Optional[str]:
        message = super().check(value)
        if message:
            return message
        if self.options and value not in self.options:
            return f"{self.label} must be one of: {', '.join(self.options)}"
        return None


@register_rule("checkbox")
class CheckboxRule(FieldRule):
    """Boolean flag. Empty optional values normalize to False."""

    default = False

    def check(self, value: Any) -> Optional[str]:
        if not isinstance(value, bool):
            return f"{self.label} must be true or false"
        if self.descriptor.required and value is False:
            return f"{self.label} must be checked"
        return None

    def normalize(self, value: Any) -> Any:
        return bool(value)


@register_rule("date")
class DateRule(TextRule):
    """Non-empty date string. Calendar validity is not checked."""
    pass
