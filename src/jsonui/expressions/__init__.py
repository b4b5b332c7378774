"""Binding expression language and template interpolation."""

from .tokenizer import Token, TokenKind, tokenize, ExpressionTokenError
from .parser import parse_expression, ExpressionParseError
from .evaluator import evaluate, ExpressionEvalError, Scope, MappingScope
from .template import (
    TemplatePart,
    has_template,
    scan_template,
    interpolate,
    evaluate_source,
    evaluate_text,
)

__all__ = [
    "Token",
    "TokenKind",
    "tokenize",
    "ExpressionTokenError",
    "parse_expression",
    "ExpressionParseError",
    "evaluate",
    "ExpressionEvalError",
    "Scope",
    "MappingScope",
    "TemplatePart",
    "has_template",
    "scan_template",
    "interpolate",
    "evaluate_source",
    "evaluate_text",
]
