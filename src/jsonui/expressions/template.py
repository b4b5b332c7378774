"""Template strings: literal text with embedded `${expr}` segments."""

from dataclasses import dataclass
from functools import lru_cache

from ..core import get_logger
from ..value import NULL, Value
from .evaluator import ExpressionEvalError, Scope, evaluate
from .parser import ExpressionParseError, parse_expression

logger = get_logger(__name__)

TEMPLATE_OPEN = "${"


@dataclass(frozen=True)
class TemplatePart:
    """Either literal text or an expression source."""

    text: str
    is_expression: bool = False


def has_template(text: str) -> bool:
    return TEMPLATE_OPEN in text


@lru_cache(maxsize=512)
def scan_template(template: str) -> tuple[TemplatePart, ...]:
    """
    Split a template left-to-right into literal and expression parts.

    Braces nest and quoted strings inside a segment may contain braces.
    An unterminated `${` is kept as literal text.
    """
    parts: list[TemplatePart] = []
    literal_start = 0
    i = 0
    while True:
        start = template.find(TEMPLATE_OPEN, i)
        if start == -1:
            break
        end = _matching_brace(template, start + 2)
        if end == -1:
            break
        if start > literal_start:
            parts.append(TemplatePart(template[literal_start:start]))
        parts.append(TemplatePart(template[start + 2:end].strip(), is_expression=True))
        literal_start = i = end + 1
    if literal_start < len(template):
        parts.append(TemplatePart(template[literal_start:]))
    return tuple(parts)


def _matching_brace(text: str, pos: int) -> int:
    depth = 1
    quote: str | None = None
    while pos < len(text):
        c = text[pos]
        if quote:
            if c == "\\":
                pos += 1
            elif c == quote:
                quote = None
        elif c in ("'", '"'):
            quote = c
        elif c == "{":
            depth += 1
        elif c == "}":
            depth -= 1
            if depth == 0:
                return pos
        pos += 1
    return -1


def evaluate_source(source: str, scope: Scope) -> Value:
    """Evaluate one expression source; failures degrade to Null."""
    try:
        return evaluate(parse_expression(source), scope)
    except (ExpressionParseError, ExpressionEvalError) as e:
        logger.debug("expression_failed", expression=source, error=str(e))
        return NULL


def interpolate(template: str, scope: Scope) -> str:
    """
    Render a template string against a scope.

    A template without `${` segments is returned verbatim.
    """
    if not has_template(template):
        return template
    return "".join(
        evaluate_source(part.text, scope).stringify() if part.is_expression else part.text
        for part in scan_template(template)
    )


def evaluate_text(text: str, scope: Scope) -> Value:
    """
    Evaluate a `$expr` string.

    The whole text is parsed as one expression (`${count} + 1` is 2 when
    count is 1). Text that is not an expression but contains `${`
    segments is interpolated into a String; any other text is returned
    as a String unchanged.
    """
    try:
        expr = parse_expression(text)
    except ExpressionParseError:
        if has_template(text):
            return Value.of(interpolate(text, scope))
        return Value.of(text)

    try:
        return evaluate(expr, scope)
    except ExpressionEvalError as e:
        logger.debug("expression_failed", expression=text, error=str(e))
        return NULL
