"""
Registration module.

Schema driven validation and the two step registration flow.

Main components:
- FieldDescriptor / FormSchema: scraped form structure (``schema``)
- SchemaCompiler / Validator: descriptor -> validator compilation (``validation``)
- StepOrchestrator: registration state machine (``orchestrator``)

The orchestrator depends on the database layer and is imported from
``modules.registration.orchestrator`` directly.

Usage:
    from modules.registration.schema import load_form_schema
    from modules.registration.validation import compile_step_validators
    from modules.registration.orchestrator import StepOrchestrator

    validators = compile_step_validators(load_form_schema(path))
    orchestrator = StepOrchestrator(session_maker, validators)
"""
