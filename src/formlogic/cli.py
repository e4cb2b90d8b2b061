"""CLI entry point for formlogic."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

from formlogic import __version__, logger
from formlogic.engine import evaluate_form
from formlogic.exceptions import PackageError, SpecLoadError
from formlogic.expressions import EvaluationFailure, evaluate
from formlogic.formatting import FormatOptions
from formlogic.logging import configure_logging
from formlogic.settings import get_settings
from formlogic.spec_loader import load_form_spec, read_json


def build_parser() -> argparse.ArgumentParser:
    """Create the command-line parser.

    Returns:
        argparse.ArgumentParser: The configured argument parser.
    """
    parser = argparse.ArgumentParser(prog="formlogic")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command")

    evaluate_parser = subparsers.add_parser("evaluate", help="Derive the state of a form for some data")
    evaluate_parser.add_argument("--spec", required=True, type=Path, dest="spec_path")
    evaluate_parser.add_argument("--data", type=Path, default=None, dest="data_path")
    evaluate_parser.add_argument("--output", type=Path, default=None, dest="output_path")
    evaluate_parser.add_argument(
        "--all-fields",
        action="store_true",
        dest="all_fields",
        help="Validate hidden fields too",
    )

    check_parser = subparsers.add_parser("check", help="Check a form specification")
    check_parser.add_argument("--spec", required=True, type=Path, dest="spec_path")

    expr_parser = subparsers.add_parser("expr", help="Evaluate a single expression")
    expr_parser.add_argument("expression")
    expr_parser.add_argument("--data", type=Path, default=None, dest="data_path")

    return parser


def _load_data(path: Path | None) -> dict[str, Any]:
    """Load form data from a JSON file.

    Args:
        path (Path | None): Data file, or ``None`` for empty data.

    Raises:
        SpecLoadError: If the file is not a JSON object.

    Returns:
        dict[str, Any]: Form data.
    """
    if path is None:
        return {}
    payload = read_json(path, what="Form data")
    if not isinstance(payload, dict):
        raise SpecLoadError(message=f"Form data must be a JSON object: {path}")
    return payload


def _write_json(payload: object, output_path: Path | None) -> None:
    text = json.dumps(payload, indent=2, ensure_ascii=False, default=str)
    if output_path is None:
        sys.stdout.write(text + "\n")
        return
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text + "\n", encoding="utf-8")
    logger.info("Form state written", extra={"output_path": str(output_path)})


def _run_evaluate(args: argparse.Namespace) -> int:
    settings = get_settings()
    spec = load_form_spec(args.spec_path)
    data = _load_data(args.data_path)
    state = evaluate_form(
        data,
        spec,
        only_visible=not args.all_fields,
        format_options=FormatOptions.from_settings(settings),
    )
    _write_json(state.model_dump(mode="json"), args.output_path)
    return 0


def _run_check(args: argparse.Namespace) -> int:
    spec = load_form_spec(args.spec_path)
    sys.stdout.write(f"OK: {spec.meta.title} ({len(spec.fields)} fields, {len(spec.computed)} computed)\n")
    return 0


def _run_expr(args: argparse.Namespace) -> int:
    result = evaluate(args.expression, _load_data(args.data_path))
    if isinstance(result, EvaluationFailure):
        _write_json({"success": False, "error": result.error}, None)
        return 1
    _write_json({"success": True, "value": result.value}, None)
    return 0


_COMMANDS = {
    "evaluate": _run_evaluate,
    "check": _run_check,
    "expr": _run_expr,
}


def main(argv: list[str] | None = None) -> int:
    """Run the CLI.

    Args:
        argv (list[str] | None): Arguments, defaults to ``sys.argv[1:]``.

    Returns:
        int: Exit code (0 for success, 1 for error).
    """
    settings = get_settings()
    configure_logging(settings=settings)

    parser = build_parser()
    args = parser.parse_args(argv)

    command = _COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return 0

    try:
        return command(args)
    except SpecLoadError as exc:
        logger.error("Form specification rejected", extra={"problems": exc.problems})  # noqa: TRY400
        sys.stderr.write(f"{exc}\n")
        return 1
    except PackageError:
        logger.exception("Command failed", extra={"command": args.command})
        return 1
    except KeyboardInterrupt:
        logger.info("Command aborted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(main())
