"""
Form schema module.

Field descriptors and the scraped form schema file they are loaded from.
"""

from modules.registration.schema.descriptor import (
    FieldDescriptor,
    FormStep,
    FormSchema,
    load_form_schema,
)

__all__ = [
    'FieldDescriptor',
    'FormStep',
    'FormSchema',
    'load_form_schema',
]
