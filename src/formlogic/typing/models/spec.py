"""Form specification models.

Field definitions form a closed tagged union keyed by ``type``. Shared
attributes live on ``_FieldBase``; variant attributes are only reachable
after an ``isinstance`` check on the concrete class.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from formlogic.typing.enums import Severity


class _SpecModel(BaseModel):
    """Base for specification models (camelCase on the wire)."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ValidationRule(_SpecModel):
    """Custom rule: ``rule`` must evaluate to true for valid data."""

    rule: str
    message: str
    severity: Severity = Severity.ERROR


class SelectOption(_SpecModel):
    """Choice of a selection field."""

    value: Any
    label: str
    description: str | None = None
    visible_when: str | None = None


class _FieldBase(_SpecModel):
    """Attributes shared by every field variant."""

    label: str | None = None
    description: str | None = None
    placeholder: str | None = None
    visible_when: str | None = None
    required_when: str | None = None
    enabled_when: str | None = None
    readonly_when: str | None = None
    validations: list[ValidationRule] = Field(default_factory=list)
    default_value: Any = None

    @property
    def is_data_field(self) -> bool:
        """Return whether the field holds a value in form data."""
        return True


class _AdornableField(_FieldBase):
    prefix: str | None = None
    suffix: str | None = None


class TextFieldDefinition(_AdornableField):
    """Single-line text input (plain, email, url, password)."""

    type: Literal["text", "email", "url", "password"]


class NumberFieldDefinition(_AdornableField):
    """Numeric input."""

    type: Literal["number", "integer"]
    min: float | None = None
    max: float | None = None
    step: float | None = None


class SelectionFieldDefinition(_FieldBase):
    """Single or multiple choice among options."""

    type: Literal["select", "multiselect"]
    options: list[SelectOption] = Field(default_factory=list)


class SimpleFieldDefinition(_FieldBase):
    """Field with no variant-specific attributes."""

    type: Literal["boolean", "textarea", "date", "datetime"]


class ArrayFieldDefinition(_FieldBase):
    """Repeating group of items, each item shaped by ``item_fields``."""

    type: Literal["array"]
    item_fields: dict[str, FieldDefinition] = Field(default_factory=dict)
    min_items: int | None = Field(default=None, ge=0)
    max_items: int | None = Field(default=None, ge=0)


class ObjectFieldDefinition(_FieldBase):
    """Grouping of related fields."""

    type: Literal["object"]


class DisplayFieldDefinition(_FieldBase):
    """Presentation-only block: no data, only ``visible_when`` is honored."""

    type: Literal["display"]
    content: str | None = None

    @property
    def is_data_field(self) -> bool:
        """Return whether the field holds a value in form data."""
        return False


class ComputedReferenceFieldDefinition(_FieldBase):
    """Marker placing a computed value in the field layout."""

    type: Literal["computed"]
    source: str | None = None

    @property
    def is_data_field(self) -> bool:
        """Return whether the field holds a value in form data."""
        return False


FieldDefinition = Annotated[
    TextFieldDefinition
    | NumberFieldDefinition
    | SelectionFieldDefinition
    | SimpleFieldDefinition
    | ArrayFieldDefinition
    | ObjectFieldDefinition
    | DisplayFieldDefinition
    | ComputedReferenceFieldDefinition,
    Field(discriminator="type"),
]

ArrayFieldDefinition.model_rebuild()


class ComputedFieldDefinition(_SpecModel):
    """Derived value recomputed on every data change."""

    name: str
    expression: str
    label: str | None = None
    format: str | None = None
    display: bool | None = None


class PageDefinition(_SpecModel):
    """Step of a multi-page form."""

    id: str
    title: str
    description: str | None = None
    fields: list[str] = Field(default_factory=list)
    visible_when: str | None = None


class FormMeta(_SpecModel):
    """Identifier/title block."""

    id: str | None = None
    title: str
    description: str | None = None
    version: str | None = None


class FormSchema(_SpecModel):
    """JSON-Schema-like description of the data shape."""

    model_config = ConfigDict(extra="allow", frozen=True, populate_by_name=True)

    type: str = "object"
    properties: dict[str, dict[str, Any]] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)


class FormSpec(_SpecModel):
    """Complete declarative form specification."""

    model_config = ConfigDict(
        extra="ignore",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    version: str = "1.0"
    meta: FormMeta
    json_schema: FormSchema = Field(default_factory=FormSchema, alias="schema")
    fields: dict[str, FieldDefinition] = Field(default_factory=dict)
    field_order: list[str] = Field(default_factory=list)
    computed: list[ComputedFieldDefinition] = Field(default_factory=list)
    reference_data: dict[str, Any] | None = None
    pages: list[PageDefinition] | None = None

    @model_validator(mode="before")
    @classmethod
    def _normalize_payload(cls, payload: Any) -> Any:
        """Accept a name-keyed ``computed`` mapping and a missing field order.

        Args:
            payload (Any): Raw input.

        Returns:
            Any: Normalized input.
        """
        if not isinstance(payload, dict):
            return payload

        normalized = dict(payload)
        computed = normalized.get("computed")
        if isinstance(computed, dict):
            normalized["computed"] = [
                {"name": name, **definition} if isinstance(definition, dict) else definition
                for name, definition in computed.items()
            ]

        has_order = "fieldOrder" in normalized or "field_order" in normalized
        if not has_order and isinstance(normalized.get("fields"), dict):
            normalized["field_order"] = list(normalized["fields"])
        return normalized

    def get_field(self, path: str) -> FieldDefinition | None:
        """Return the top-level field definition for a path."""
        return self.fields.get(path)

    def get_computed(self, name: str) -> ComputedFieldDefinition | None:
        """Return a computed field definition by name."""
        for definition in self.computed:
            if definition.name == name:
                return definition
        return None

    def is_structurally_required(self, path: str) -> bool:
        """Return whether the schema lists the path as required."""
        return path in self.json_schema.required
