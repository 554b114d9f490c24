"""
Validation core module.

Contains base classes and the rule registry for the field validation system.
"""

from modules.registration.validation.core.base import (
    FieldRule,
    OptionalRule,
    FieldError,
    Accepted,
    Rejected,
    ValidationResult,
    is_empty,
)
from modules.registration.validation.core.registry import RULE_REGISTRY, register_rule, get_rule, list_rules

__all__ = [
    'FieldRule',
    'OptionalRule',
    'FieldError',
    'Accepted',
    'Rejected',
    'ValidationResult',
    'is_empty',
    'RULE_REGISTRY',
    'register_rule',
    'get_rule',
    'list_rules',
]
