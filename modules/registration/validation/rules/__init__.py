"""
Rules module.

All built-in field rules, registered via decorators on import.
"""

# Import rules to trigger registration
from modules.registration.validation.rules import field_rules
from modules.registration.validation.rules.field_rules import (
    TextRule,
    EmailRule,
    SelectRule,
    CheckboxRule,
    DateRule,
)

__all__ = ['field_rules', 'TextRule', 'EmailRule', 'SelectRule', 'CheckboxRule', 'DateRule']
