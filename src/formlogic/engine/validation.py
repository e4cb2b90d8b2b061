"""Validation engine.

Per field, in order: the required-empty check (which ends validation of an
empty field), built-in checks for the field variant and its schema
property, then custom rules evaluated with ``value`` bound to the field's
value. Warnings never make the result invalid.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any
from urllib.parse import urlparse

from formlogic.context import EvaluationContext
from formlogic.engine.conditions import base_context, site_context
from formlogic.engine.required import is_field_required
from formlogic.engine.visibility import get_visibility
from formlogic.expressions import evaluate_boolean, values_equal
from formlogic.logging import get_logger
from formlogic.paths import FieldSite, iter_field_sites, iter_item_sites, parse_field_path, resolve_field_site
from formlogic.typing.enums import Severity, ValidationRuleKind
from formlogic.typing.models import (
    ArrayFieldDefinition,
    FieldError,
    FormSpec,
    NumberFieldDefinition,
    ObjectFieldDefinition,
    SelectionFieldDefinition,
    SimpleFieldDefinition,
    TextFieldDefinition,
    ValidationResult,
)

logger = get_logger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_UUID_RE = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$", re.IGNORECASE)
_MULTIPLE_OF_EPSILON = 1e-10


def is_empty(value: Any) -> bool:
    """Return whether a value counts as unanswered.

    ``None``, whitespace-only strings and empty lists are empty; ``0`` and
    ``False`` are not.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return isinstance(value, list) and not value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _show(number: float) -> str:
    """Render a bound without a spurious ``.0``."""
    return str(int(number)) if float(number).is_integer() else str(number)


class _Checker:
    """Collect built-in findings for one field value."""

    def __init__(self, site: FieldSite, schema_property: Mapping[str, Any]) -> None:
        self.site = site
        self.schema = schema_property
        self.label = site.definition.label or site.path
        self.errors: list[FieldError] = []

    def fail(self, rule: ValidationRuleKind, message: str) -> None:
        self.errors.append(FieldError(field=self.site.path, message=f"{self.label} {message}", rule=rule))

    def bound(self, field_value: float | None, schema_key: str) -> float | None:
        if field_value is not None:
            return field_value
        bound = self.schema.get(schema_key)
        return bound if _is_number(bound) else None

    def check(self, value: Any) -> list[FieldError]:
        definition = self.site.definition
        if isinstance(definition, NumberFieldDefinition):
            self.check_number(value, integer=definition.type == "integer")
        elif isinstance(definition, TextFieldDefinition):
            self.check_text(value, definition.type)
        elif isinstance(definition, SimpleFieldDefinition):
            self.check_simple(value, definition.type)
        elif isinstance(definition, SelectionFieldDefinition):
            if definition.type == "multiselect" and not isinstance(value, list):
                self.fail(ValidationRuleKind.TYPE, "must be a list")
            elif not isinstance(value, list):
                self.check_schema_value(value)
        elif isinstance(definition, ArrayFieldDefinition):
            self.check_array(value, definition)
        elif isinstance(definition, ObjectFieldDefinition) and not isinstance(value, Mapping):
            self.fail(ValidationRuleKind.TYPE, "must be an object")
        return self.errors

    def check_number(self, value: Any, *, integer: bool) -> None:
        if not _is_number(value):
            self.fail(ValidationRuleKind.TYPE, "must be a number")
            return
        if (integer or self.schema.get("type") == "integer") and not float(value).is_integer():
            self.fail(ValidationRuleKind.INTEGER, "must be a whole number")
            return
        definition = self.site.definition
        minimum = self.bound(getattr(definition, "min", None), "minimum")
        maximum = self.bound(getattr(definition, "max", None), "maximum")
        if minimum is not None and value < minimum:
            self.fail(ValidationRuleKind.MINIMUM, f"must be at least {_show(minimum)}")
        if maximum is not None and value > maximum:
            self.fail(ValidationRuleKind.MAXIMUM, f"must be no more than {_show(maximum)}")
        self.check_schema_value(value)

    def check_text(self, value: Any, kind: str) -> None:
        if not isinstance(value, str):
            self.fail(ValidationRuleKind.TYPE, "must be a string")
            return
        if kind == "email" and not _EMAIL_RE.match(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid email address")
            return
        if kind == "url" and not _is_uri(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid URL")
            return
        self.check_schema_value(value)

    def check_simple(self, value: Any, kind: str) -> None:
        if kind == "boolean":
            if not isinstance(value, bool):
                self.fail(ValidationRuleKind.TYPE, "must be true or false")
            return
        if not isinstance(value, str):
            self.fail(ValidationRuleKind.TYPE, "must be a string")
            return
        if kind == "date" and not _is_iso_date(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid date")
            return
        if kind == "datetime" and not _is_iso_datetime(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid date and time")
            return
        self.check_schema_value(value)

    def check_array(self, value: Any, definition: ArrayFieldDefinition) -> None:
        if not isinstance(value, list):
            self.fail(ValidationRuleKind.TYPE, "must be a list")
            return
        min_items = definition.min_items if definition.min_items is not None else self.schema.get("minItems")
        max_items = definition.max_items if definition.max_items is not None else self.schema.get("maxItems")
        if _is_number(min_items) and len(value) < min_items:
            self.fail(ValidationRuleKind.MIN_ITEMS, f"must have at least {_show(min_items)} items")
        if _is_number(max_items) and len(value) > max_items:
            self.fail(ValidationRuleKind.MAX_ITEMS, f"must have no more than {_show(max_items)} items")

    def check_schema_value(self, value: Any) -> None:
        """Apply the schema property keywords relevant to the value's type."""
        schema = self.schema
        enum = schema.get("enum")
        if isinstance(enum, list) and not any(values_equal(value, choice) for choice in enum):
            self.fail(ValidationRuleKind.ENUM, "must be one of: " + ", ".join(str(choice) for choice in enum))
            return
        if isinstance(value, str):
            self.check_schema_string(value)
        elif _is_number(value):
            self.check_schema_number(value)

    def check_schema_string(self, value: str) -> None:
        schema = self.schema
        min_length = schema.get("minLength")
        max_length = schema.get("maxLength")
        if _is_number(min_length) and len(value) < min_length:
            self.fail(ValidationRuleKind.LENGTH, f"must be at least {_show(min_length)} characters")
            return
        if _is_number(max_length) and len(value) > max_length:
            self.fail(ValidationRuleKind.LENGTH, f"must be no more than {_show(max_length)} characters")
            return
        pattern = schema.get("pattern")
        if isinstance(pattern, str) and pattern:
            try:
                matched = re.search(pattern, value) is not None
            except re.error:
                logger.warning("Invalid schema pattern ignored", extra={"field": self.site.path, "pattern": pattern})
                matched = True
            if not matched:
                self.fail(ValidationRuleKind.PATTERN, "format is invalid")
                return
        fmt = schema.get("format")
        if fmt:
            self.check_string_format(value, fmt)

    def check_string_format(self, value: str, fmt: str) -> None:
        if fmt == "email" and not _EMAIL_RE.match(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid email address")
        elif fmt == "date" and not _is_iso_date(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid date")
        elif fmt == "date-time" and not _is_iso_datetime(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid date and time")
        elif fmt == "uri" and not _is_uri(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid URL")
        elif fmt == "uuid" and not _UUID_RE.match(value):
            self.fail(ValidationRuleKind.FORMAT, "must be a valid UUID")

    def check_schema_number(self, value: float) -> None:
        schema = self.schema
        if self.site.definition.type not in ("number", "integer"):
            minimum = self.bound(None, "minimum")
            maximum = self.bound(None, "maximum")
            if minimum is not None and value < minimum:
                self.fail(ValidationRuleKind.MINIMUM, f"must be at least {_show(minimum)}")
            if maximum is not None and value > maximum:
                self.fail(ValidationRuleKind.MAXIMUM, f"must be no more than {_show(maximum)}")
        exclusive_minimum = schema.get("exclusiveMinimum")
        exclusive_maximum = schema.get("exclusiveMaximum")
        if _is_number(exclusive_minimum) and value <= exclusive_minimum:
            self.fail(ValidationRuleKind.MINIMUM, f"must be greater than {_show(exclusive_minimum)}")
        if _is_number(exclusive_maximum) and value >= exclusive_maximum:
            self.fail(ValidationRuleKind.MAXIMUM, f"must be less than {_show(exclusive_maximum)}")
        multiple_of = schema.get("multipleOf")
        if _is_number(multiple_of) and multiple_of > 0:
            remainder = abs(math.fmod(value, multiple_of))
            if remainder >= _MULTIPLE_OF_EPSILON and abs(remainder - multiple_of) >= _MULTIPLE_OF_EPSILON:
                self.fail(ValidationRuleKind.MULTIPLE_OF, f"must be a multiple of {_show(multiple_of)}")


def _is_iso_date(value: str) -> bool:
    if not _DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_iso_datetime(value: str) -> bool:
    try:
        datetime.fromisoformat(value)
    except ValueError:
        return False
    return True


def _is_uri(value: str) -> bool:
    parsed = urlparse(value)
    return bool(parsed.scheme) and bool(parsed.netloc or parsed.path)


def _schema_property(spec: FormSpec, site: FieldSite) -> Mapping[str, Any]:
    if not site.is_item:
        return spec.json_schema.properties.get(site.path, {})
    items_schema = spec.json_schema.properties.get(site.array_path or "", {}).get("items")
    if not isinstance(items_schema, Mapping):
        return {}
    properties = items_schema.get("properties")
    if not isinstance(properties, Mapping):
        return {}
    item_property = properties.get(parse_field_path(site.path).field)
    return item_property if isinstance(item_property, Mapping) else {}


def _required_error(site: FieldSite) -> FieldError:
    label = site.definition.label
    return FieldError(
        field=site.path,
        message=f"{label} is required" if label else "This field is required",
        rule=ValidationRuleKind.REQUIRED,
    )


def _custom_rule_errors(site: FieldSite, context: EvaluationContext) -> list[FieldError]:
    return [
        FieldError(field=site.path, message=rule.message, severity=rule.severity, rule=ValidationRuleKind.CUSTOM)
        for rule in site.definition.validations
        if not evaluate_boolean(rule.rule, context)
    ]


def validate_field(site: FieldSite, value: Any, spec: FormSpec, context: EvaluationContext) -> list[FieldError]:
    """Validate one field or item field value.

    Args:
        site (FieldSite): Field site.
        value (Any): Value to validate.
        spec (FormSpec): Form specification.
        context (EvaluationContext): Context of the site (item scoped for item fields).

    Returns:
        list[FieldError]: Findings for this site only; array items are not visited.
    """
    if not site.definition.is_data_field:
        return []
    if is_empty(value):
        return [_required_error(site)] if is_field_required(site, spec, context) else []
    errors = _Checker(site, _schema_property(spec, site)).check(value)
    errors.extend(_custom_rule_errors(site, context.with_value(value)))
    return errors


def _validate_items(
    site: FieldSite,
    items: list[Any],
    spec: FormSpec,
    context: EvaluationContext,
    visibility: Mapping[str, bool] | None,
) -> list[FieldError]:
    definition = site.definition
    if not isinstance(definition, ArrayFieldDefinition):
        return []
    errors: list[FieldError] = []
    for item_site in iter_item_sites(site.path, definition, {site.path: items}):
        if visibility is not None and visibility.get(item_site.path) is False:
            continue
        errors.extend(validate_field(item_site, item_site.value, spec, site_context(item_site, context)))
    return errors


def validate(
    data: Mapping[str, Any],
    spec: FormSpec,
    only_visible: bool = True,
    computed: Mapping[str, Any] | None = None,
    visibility: Mapping[str, bool] | None = None,
) -> ValidationResult:
    """Validate form data.

    Args:
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.
        only_visible (bool): Skip fields and item fields that are hidden.
        computed (Mapping[str, Any] | None): Raw computed values of the same snapshot.
        visibility (Mapping[str, bool] | None): Visibility of the same snapshot.

    Returns:
        ValidationResult: ``valid`` is false when any error-severity entry exists.
    """
    context = base_context(data, spec, computed)
    if only_visible and visibility is None:
        visibility = get_visibility(data, spec, context.computed)
    shown = visibility if only_visible else None

    errors: list[FieldError] = []
    for site, _item_sites in iter_field_sites(spec, data):
        if shown is not None and shown.get(site.path) is False:
            continue
        value = data.get(site.path)
        errors.extend(validate_field(site, value, spec, context))
        if isinstance(value, list) and site.definition.is_data_field:
            errors.extend(_validate_items(site, value, spec, context, shown))

    valid = not any(error.severity == Severity.ERROR for error in errors)
    logger.debug("Form validated", extra={"valid": valid, "errors": len(errors)})
    return ValidationResult(valid=valid, errors=errors)


def validate_single_field(path: str, value: Any, data: Mapping[str, Any], spec: FormSpec) -> list[FieldError]:
    """Validate a candidate value for one field or item field path.

    Conditions read ``data``; ``value`` replaces the stored value of the
    field for the checks and is bound to ``value`` in custom rules.

    Args:
        path (str): Field or item field path.
        value (Any): Candidate value.
        data (Mapping[str, Any]): Current form data.
        spec (FormSpec): Form specification.

    Returns:
        list[FieldError]: Findings; empty for unknown paths.
    """
    site = resolve_field_site(spec, data, path)
    if site is None:
        return []
    context = base_context(data, spec)
    if site.is_item:
        item = {**(site.item or {}), parse_field_path(path).field: value}
        site = site._replace(item=item)
        return validate_field(site, value, spec, site_context(site, context))

    errors = validate_field(site, value, spec, context)
    if isinstance(value, list):
        errors.extend(_validate_items(site, value, spec, context, None))
    return errors
