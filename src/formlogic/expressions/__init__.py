"""Form expression language: parser, evaluator and built-in functions."""

from formlogic.expressions.ast import computed_references
from formlogic.expressions.evaluator import (
    EvaluationFailure,
    EvaluationResult,
    EvaluationSuccess,
    evaluate,
    evaluate_boolean,
    evaluate_boolean_batch,
    evaluate_number,
    evaluate_string,
    is_valid_expression,
    validate_expression,
)
from formlogic.expressions.functions import FUNCTIONS, values_equal
from formlogic.expressions.parser import parse_expression

__all__ = [
    "FUNCTIONS",
    "EvaluationFailure",
    "EvaluationResult",
    "EvaluationSuccess",
    "computed_references",
    "evaluate",
    "evaluate_boolean",
    "evaluate_boolean_batch",
    "evaluate_number",
    "evaluate_string",
    "is_valid_expression",
    "parse_expression",
    "validate_expression",
    "values_equal",
]
