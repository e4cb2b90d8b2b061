"""Loading and checking of external form specifications."""

from __future__ import annotations

import json
from collections.abc import Iterator
from pathlib import Path
from typing import Any, cast

from pydantic import ValidationError

from formlogic.exceptions import SpecLoadError
from formlogic.expressions import validate_expression
from formlogic.formatting import is_valid_format
from formlogic.logging import get_logger
from formlogic.typing.models import (
    ArrayFieldDefinition,
    DisplayFieldDefinition,
    FieldDefinition,
    FormSpec,
    SelectionFieldDefinition,
)

logger = get_logger(__name__)

_DISPLAY_FORBIDDEN = ("required_when", "enabled_when", "readonly_when")


def read_json(path: Path, *, what: str = "JSON") -> object:
    """Read a JSON document from disk.

    Args:
        path (Path): File path.
        what (str): Document description used in error messages.

    Raises:
        SpecLoadError: If the file is missing or not valid JSON.

    Returns:
        object: Decoded payload.
    """
    if not path.is_file():
        raise SpecLoadError(message=f"{what} file not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SpecLoadError(message=f"{what} file is not valid JSON: {path}", problems=[str(exc)]) from exc


def _field_problems(path: str, definition: FieldDefinition) -> Iterator[str]:
    if isinstance(definition, DisplayFieldDefinition):
        for attribute in _DISPLAY_FORBIDDEN:
            if getattr(definition, attribute):
                yield f"display field '{path}' must not define {attribute}"
        if definition.validations:
            yield f"display field '{path}' must not define validations"

    expressions: list[tuple[str, str | None]] = [
        ("visibleWhen", definition.visible_when),
        ("requiredWhen", definition.required_when),
        ("enabledWhen", definition.enabled_when),
        ("readonlyWhen", definition.readonly_when),
    ]
    expressions.extend((f"validations[{i}]", rule.rule) for i, rule in enumerate(definition.validations))
    if isinstance(definition, SelectionFieldDefinition):
        expressions.extend(
            (f"options[{i}].visibleWhen", option.visible_when) for i, option in enumerate(definition.options)
        )
    for where, expression in expressions:
        if expression is None:
            continue
        error = validate_expression(expression)
        if error is not None:
            yield f"field '{path}' {where}: {error}"

    if isinstance(definition, ArrayFieldDefinition):
        for name, item_definition in definition.item_fields.items():
            yield from _field_problems(f"{path}[].{name}", item_definition)


def check_form_spec(spec: FormSpec) -> list[str]:
    """Return the invariant violations of a parsed specification.

    Args:
        spec (FormSpec): Parsed specification.

    Returns:
        list[str]: Human-readable problems, empty when the specification is sound.
    """
    problems: list[str] = []
    order = set(spec.field_order)

    problems.extend(
        f"fieldOrder entry '{path}' has no field definition" for path in spec.field_order if path not in spec.fields
    )
    for page in spec.pages or []:
        problems.extend(
            f"page '{page.id}' references '{path}' missing from fieldOrder" for path in page.fields if path not in order
        )
        if page.visible_when and (error := validate_expression(page.visible_when)) is not None:
            problems.append(f"page '{page.id}' visibleWhen: {error}")

    for path, definition in spec.fields.items():
        problems.extend(_field_problems(path, definition))

    seen: set[str] = set()
    for computed in spec.computed:
        if computed.name in seen:
            problems.append(f"computed field '{computed.name}' is declared more than once")
        seen.add(computed.name)
        if (error := validate_expression(computed.expression)) is not None:
            problems.append(f"computed field '{computed.name}': {error}")
        if computed.format and not is_valid_format(computed.format):
            logger.warning(
                "Unknown computed format, value will be left unformatted",
                extra={"field": computed.name, "format": computed.format},
            )
    return problems


def parse_form_spec(payload: object) -> FormSpec:
    """Validate a decoded specification payload.

    Args:
        payload (object): Decoded JSON (camelCase keys).

    Raises:
        SpecLoadError: If the payload is not an object, fails model
            validation, or breaks a specification invariant.

    Returns:
        FormSpec: Parsed specification.
    """
    if not isinstance(payload, dict):
        raise SpecLoadError(message="Form specification must be a JSON object")

    try:
        spec = FormSpec.model_validate(cast("dict[str, Any]", payload))
    except ValidationError as exc:
        problems = [f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()]
        raise SpecLoadError(message="Invalid form specification", problems=problems) from exc

    problems = check_form_spec(spec)
    if problems:
        logger.warning("Form specification rejected", extra={"problems": len(problems)})
        raise SpecLoadError(message="Invalid form specification", problems=problems)
    return spec


def load_form_spec(path: Path) -> FormSpec:
    """Load and validate a specification file.

    Args:
        path (Path): JSON specification path.

    Returns:
        FormSpec: Parsed specification.
    """
    spec = parse_form_spec(read_json(path, what="Form specification"))
    logger.info("Form specification loaded", extra={"spec_path": str(path), "fields": len(spec.fields)})
    return spec
