"""
SchemaCompiler - turns field descriptors into validators.

This is the entry point of the validation pipeline:

    schema = load_form_schema(path)
    validators = compile_step_validators(schema)
    result = validators.step2.validate(payload)

    if result.passed:
        save(result.record)
    else:
        for error in result.errors:
            print(f"{error.field}: {error.message}")

Unknown semantic types never fail compilation: they compile to the text
rule, so a change on the scraped portal loosens validation instead of
taking the service down. Only a malformed descriptor list (blank or
duplicate key, broken regex) raises SchemaCompilationError.
"""

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from modules.registration.core.exceptions import SchemaCompilationError
from modules.registration.schema.descriptor import FieldDescriptor, FormSchema
from modules.registration.validation.core.base import (
    Accepted,
    FieldError,
    FieldRule,
    OptionalRule,
    Rejected,
    ValidationResult,
)
from modules.registration.validation.core.registry import get_rule
from shared.utils.logger import setup_logger

# Import rules to trigger registration
from modules.registration.validation import rules  # noqa: F401
from modules.registration.validation.rules.field_rules import TextRule

logger = setup_logger(__name__)

STEP1_KEYS = ("aadhaarNumber", "mobileNumber")
OTP_KEY = "otp"


class Validator:
    """
    Compiled, read-only validator for one form step.

    Every rule is evaluated; errors come back in field declaration order
    with one message per failing field.
    """

    def __init__(self, rules: Sequence[FieldRule], name: str = ""):
        self._rules: Tuple[FieldRule, ...] = tuple(rules)
        self.name = name

    @property
    def keys(self) -> List[str]:
        return [rule.key for rule in self._rules]

    @property
    def rules(self) -> Tuple[FieldRule, ...]:
        return self._rules

    def validate(self, record: Optional[Mapping[str, Any]]) -> ValidationResult:
        """
        Validate a candidate record.

        Args:
            record: Mapping of field key to submitted value. Missing keys
                    count as empty. Undeclared keys are dropped.

        Returns:
            Accepted with the normalized record, or Rejected with all errors
        """
        record = record or {}
        normalized: Dict[str, Any] = {}
        errors: List[FieldError] = []

        for rule in self._rules:
            message, value = rule.evaluate(record.get(rule.key))
            if message:
                errors.append(FieldError(field=rule.key, message=message))
            else:
                normalized[rule.key] = value

        if errors:
            return Rejected(errors=tuple(errors))
        return Accepted(record=normalized)

    def __repr__(self) -> str:
        return f"<Validator(name={self.name!r}, keys={self.keys})>"


class SchemaCompiler:
    """
    Compiles field descriptor lists into Validators.

    Usage:
        compiler = SchemaCompiler()
        validator = compiler.compile(schema.step(2).fields, name="step2")
    """

    def __init__(self, fallback: type = TextRule):
        self.fallback = fallback

    def compile(self, descriptors: Sequence[FieldDescriptor], name: str = "") -> Validator:
        """
        Compile an ordered descriptor list.

        Raises:
            SchemaCompilationError: On a blank or duplicate key, or a bad pattern
        """
        seen = set()
        compiled: List[FieldRule] = []

        for descriptor in descriptors:
            if not descriptor.key:
                raise SchemaCompilationError(f"Field descriptor without key in '{name}': {descriptor}")
            if descriptor.key in seen:
                raise SchemaCompilationError(f"Duplicate field key '{descriptor.key}' in '{name}'")
            seen.add(descriptor.key)

            compiled.append(self._compile_field(descriptor))

        logger.info(f"Compiled validator '{name}' with {len(compiled)} rules")
        return Validator(compiled, name=name)

    def _compile_field(self, descriptor: FieldDescriptor) -> FieldRule:
        rule_cls = get_rule(descriptor.type)
        if rule_cls is None:
            logger.warning(
                f"Unknown field type '{descriptor.type}' for '{descriptor.key}', "
                f"falling back to {self.fallback.__name__}"
            )
            rule_cls = self.fallback

        if descriptor.options and descriptor.type != "select":
            logger.warning(f"Ignoring options on non-select field '{descriptor.key}'")

        try:
            rule = rule_cls(descriptor)
        except re.error as e:
            raise SchemaCompilationError(
                f"Invalid pattern for field '{descriptor.key}': {descriptor.pattern!r} ({e})"
            ) from e

        if not descriptor.required:
            rule = OptionalRule(rule)
        return rule


@dataclass(frozen=True)
class StepValidators:
    """Validators for each submission the registration flow accepts."""
    step1: Validator
    otp: Validator
    step2: Validator


def compile_step_validators(schema: FormSchema, compiler: Optional[SchemaCompiler] = None) -> StepValidators:
    """
    Compile the three validators used by the registration flow.

    Step 1 is split in two: the initiate request carries the Aadhaar and
    mobile numbers, the verification request carries the OTP.

    Raises:
        SchemaCompilationError: If a step is missing or any step is malformed
    """
    compiler = compiler or SchemaCompiler()

    try:
        step1 = schema.step(1)
        step2 = schema.step(2)
    except KeyError as e:
        raise SchemaCompilationError(f"Form schema has no step {e.args[0]}") from e

    # Duplicates are checked over the whole step before splitting
    compiler.compile(step1.fields, name="step1-all")

    return StepValidators(
        step1=compiler.compile(step1.subset(STEP1_KEYS), name="step1"),
        otp=compiler.compile(step1.subset([OTP_KEY]), name="otp"),
        step2=compiler.compile(step2.fields, name="step2"),
    )
