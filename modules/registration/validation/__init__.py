"""
Validation module.

Compiles scraped field descriptors into per-step validators.

Main components:
- SchemaCompiler: Builds a Validator from an ordered descriptor list
- Validator: Validates a record, collecting every field error
- FieldRule: Base class for per-type rules, registered by semantic type

Usage:
    from modules.registration.validation import SchemaCompiler

    validator = SchemaCompiler().compile(descriptors, name="step2")
    result = validator.validate(payload)

    if not result.passed:
        for error in result.errors:
            print(f"{error.field}: {error.message}")
"""

from modules.registration.validation.compiler import (
    SchemaCompiler,
    Validator,
    StepValidators,
    compile_step_validators,
)
from modules.registration.validation.core.base import (
    FieldRule,
    OptionalRule,
    FieldError,
    Accepted,
    Rejected,
    ValidationResult,
)
from modules.registration.validation.core.registry import register_rule, RULE_REGISTRY

__all__ = [
    'SchemaCompiler',
    'Validator',
    'StepValidators',
    'compile_step_validators',
    'FieldRule',
    'OptionalRule',
    'FieldError',
    'Accepted',
    'Rejected',
    'ValidationResult',
    'register_rule',
    'RULE_REGISTRY',
]
