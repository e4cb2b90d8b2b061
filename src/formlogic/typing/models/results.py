"""Engine output models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from formlogic.typing.enums import Severity, ValidationRuleKind
from formlogic.typing.models.spec import SelectOption

VisibilityResult = dict[str, bool]
RequiredResult = dict[str, bool]
EnabledResult = dict[str, bool]
ReadonlyResult = dict[str, bool]
OptionsVisibilityResult = dict[str, list[SelectOption]]


class FieldError(BaseModel):
    """Validation finding attached to a field path."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    message: str
    severity: Severity = Severity.ERROR
    rule: ValidationRuleKind | None = None


class ValidationResult(BaseModel):
    """Aggregated validation outcome."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    valid: bool
    errors: list[FieldError] = Field(default_factory=list)

    @property
    def warnings(self) -> list[FieldError]:
        """Return warning-severity entries."""
        return [error for error in self.errors if error.severity == Severity.WARNING]


class CalculationError(BaseModel):
    """Computed field whose expression failed."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str
    message: str
    expression: str


class CalculationResult(BaseModel):
    """Computed values of one pass.

    ``values`` are formatted for display; ``raw_values`` are what conditions
    see through ``computed.<name>``.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    values: dict[str, Any] = Field(default_factory=dict)
    raw_values: dict[str, Any] = Field(default_factory=dict)
    errors: list[CalculationError] = Field(default_factory=list)


class PageState(BaseModel):
    """Derived state of one page of a multi-page form."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: str
    title: str
    description: str | None = None
    visible: bool
    fields: list[str]
    can_proceed: bool


class FormState(BaseModel):
    """Every derived state of a form for one data snapshot."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    computed: dict[str, Any]
    computed_raw: dict[str, Any]
    calculation_errors: list[CalculationError]
    visibility: VisibilityResult
    required: RequiredResult
    enabled: EnabledResult
    readonly: ReadonlyResult
    options: OptionsVisibilityResult
    pages: list[PageState]
    validation: ValidationResult
