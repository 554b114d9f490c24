"""
Tests for SchemaCompiler and compile_step_validators.
"""

import pytest

from modules.registration.core.exceptions import SchemaCompilationError
from modules.registration.schema import FieldDescriptor, FormSchema, FormStep
from modules.registration.validation import (
    Accepted,
    OptionalRule,
    Rejected,
    SchemaCompiler,
    compile_step_validators,
)
from modules.registration.validation.core import list_rules
from modules.registration.validation.rules import TextRule


def field(key, **kwargs):
    return FieldDescriptor(key=key, label=kwargs.pop("label", key.title()), **kwargs)


def test_builtin_rules_registered():
    assert list_rules() == {
        "text": "TextRule",
        "email": "EmailRule",
        "select": "SelectRule",
        "checkbox": "CheckboxRule",
        "date": "DateRule",
    }


class TestCompile:

    def test_unknown_type_falls_back_to_text(self):
        validator = SchemaCompiler().compile([field("pincode", type="pincode", required=True, pattern=r"^\d{6}$")])

        assert isinstance(validator.rules[0], TextRule)
        assert validator.validate({"pincode": "560001"}).passed
        assert not validator.validate({"pincode": "56"}).passed

    def test_duplicate_key_is_fatal(self):
        with pytest.raises(SchemaCompilationError, match="Duplicate field key 'name'"):
            SchemaCompiler().compile([field("name"), field("name")])

    def test_blank_key_is_fatal(self):
        with pytest.raises(SchemaCompilationError):
            SchemaCompiler().compile([field("")])

    def test_bad_pattern_is_fatal(self):
        with pytest.raises(SchemaCompilationError, match="Invalid pattern"):
            SchemaCompiler().compile([field("code", pattern="[unclosed")])

    def test_optional_fields_are_wrapped(self):
        validator = SchemaCompiler().compile([field("a", required=True), field("b", required=False)])

        assert not isinstance(validator.rules[0], OptionalRule)
        assert isinstance(validator.rules[1], OptionalRule)

    def test_options_on_text_field_ignored(self):
        validator = SchemaCompiler().compile([field("city", required=True, options=("Delhi",))])
        assert validator.validate({"city": "Mumbai"}).passed

    def test_select_without_options_is_text(self):
        validator = SchemaCompiler().compile([field("choice", type="select", required=True)])

        assert validator.validate({"choice": "anything"}).passed
        assert not validator.validate({"choice": "  "}).passed

    def test_email_rule(self):
        validator = SchemaCompiler().compile([field("email", type="email", required=True)])

        assert validator.validate({"email": "owner@example.com"}).passed
        result = validator.validate({"email": "not-an-email"})
        assert result.errors[0].message == "Email must be a valid email address"

    @pytest.mark.parametrize("email", ["a@b.co\n", "a@b.co\nx", "a b@c.co"])
    def test_email_rejects_embedded_whitespace(self, email):
        validator = SchemaCompiler().compile([field("email", type="email", required=True)])
        assert not validator.validate({"email": email}).passed

    def test_required_checkbox_must_be_checked(self):
        validator = SchemaCompiler().compile([field("consent", type="checkbox", required=True)])

        assert validator.validate({"consent": True}).passed
        assert validator.validate({"consent": False}).errors[0].message == "Consent must be checked"


class TestOptionalFields:

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_missing_optional_value_accepted_despite_constraints(self, value):
        validator = SchemaCompiler().compile([
            field("code", required=False, pattern=r"^[A-Z]{3}$", min_length=3, max_length=3),
            field("tier", type="select", required=False, options=("gold", "silver")),
        ])

        result = validator.validate({"code": value, "tier": value})
        assert isinstance(result, Accepted)

    def test_present_optional_value_still_checked(self):
        validator = SchemaCompiler().compile([field("code", required=False, pattern=r"^[A-Z]{3}$")])

        result = validator.validate({"code": "abc"})
        assert isinstance(result, Rejected)
        assert result.to_list() == [{"field": "code", "message": "Code has an invalid format"}]


class TestStepValidators:

    def test_splits_step_one(self, form_schema):
        validators = compile_step_validators(form_schema)

        assert validators.step1.keys == ["aadhaarNumber", "mobileNumber"]
        assert validators.otp.keys == ["otp"]
        assert validators.step2.keys[0] == "panNumber"

    def test_missing_step_is_fatal(self):
        schema = FormSchema(steps=(FormStep(step_number=1, title="", fields=(field("aadhaarNumber"),)),))
        with pytest.raises(SchemaCompilationError, match="no step 2"):
            compile_step_validators(schema)

    def test_missing_step_one_field_is_fatal(self):
        step1 = FormStep(step_number=1, title="", fields=(field("aadhaarNumber"), field("mobileNumber")))
        step2 = FormStep(step_number=2, title="", fields=(field("panNumber"),))
        with pytest.raises(SchemaCompilationError, match="otp"):
            compile_step_validators(FormSchema(steps=(step1, step2)))

    def test_duplicate_across_step_one_is_fatal(self):
        step1 = FormStep(
            step_number=1,
            title="",
            fields=(field("aadhaarNumber"), field("mobileNumber"), field("otp"), field("otp")),
        )
        step2 = FormStep(step_number=2, title="", fields=(field("panNumber"),))
        with pytest.raises(SchemaCompilationError):
            compile_step_validators(FormSchema(steps=(step1, step2)))
