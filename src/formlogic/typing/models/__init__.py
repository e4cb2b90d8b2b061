"""Core domain model exports."""

from formlogic.typing.models.results import (
    CalculationError,
    CalculationResult,
    EnabledResult,
    FieldError,
    FormState,
    OptionsVisibilityResult,
    PageState,
    ReadonlyResult,
    RequiredResult,
    ValidationResult,
    VisibilityResult,
)
from formlogic.typing.models.spec import (
    ArrayFieldDefinition,
    ComputedFieldDefinition,
    ComputedReferenceFieldDefinition,
    DisplayFieldDefinition,
    FieldDefinition,
    FormMeta,
    FormSchema,
    FormSpec,
    NumberFieldDefinition,
    ObjectFieldDefinition,
    PageDefinition,
    SelectionFieldDefinition,
    SelectOption,
    SimpleFieldDefinition,
    TextFieldDefinition,
    ValidationRule,
)

__all__ = [
    "ArrayFieldDefinition",
    "CalculationError",
    "CalculationResult",
    "ComputedFieldDefinition",
    "ComputedReferenceFieldDefinition",
    "DisplayFieldDefinition",
    "EnabledResult",
    "FieldDefinition",
    "FieldError",
    "FormMeta",
    "FormSchema",
    "FormSpec",
    "FormState",
    "NumberFieldDefinition",
    "ObjectFieldDefinition",
    "OptionsVisibilityResult",
    "PageDefinition",
    "PageState",
    "ReadonlyResult",
    "RequiredResult",
    "SelectOption",
    "SelectionFieldDefinition",
    "SimpleFieldDefinition",
    "TextFieldDefinition",
    "ValidationResult",
    "ValidationRule",
    "VisibilityResult",
]
