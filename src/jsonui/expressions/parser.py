"""
Recursive descent parser for binding expressions.

Grammar (precedence low to high):
    expr        → coalesce ("?" expr ":" expr)?
    coalesce    → or_expr ("??" or_expr)*
    or_expr     → and_expr ("||" and_expr)*
    and_expr    → equality ("&&" equality)*
    equality    → comparison (("==" | "!=") comparison)*
    comparison  → additive (("<" | "<=" | ">" | ">=") additive)*
    additive    → multiply (("+" | "-") multiply)*
    multiply    → unary (("*" | "/" | "%") unary)*
    unary       → ("!" | "-") unary | postfix
    postfix     → primary ("." (IDENT | INT) call_args? | "[" expr "]")*
    call_args   → "(" (expr ("," expr)*)? ")"
    primary     → literal | IDENT | "(" expr ")" | "${" expr "}"
    literal     → INT | FLOAT | STRING | "true" | "false" | "null"
"""

from functools import lru_cache

from ..value import FALSE, NULL, TRUE, Value
from .ast import (
    Binary,
    BinaryOp,
    Conditional,
    Expr,
    Identifier,
    Index,
    Literal,
    Member,
    MethodCall,
    Unary,
    UnaryOp,
)
from .tokenizer import ExpressionTokenError, Token, TokenKind, tokenize


class ExpressionParseError(Exception):
    """Error during expression parsing."""

    def __init__(self, message: str, pos: int = 0) -> None:
        super().__init__(message)
        self.pos = pos


_LEFT_ASSOC_LEVELS: list[dict[TokenKind, BinaryOp]] = [
    {TokenKind.COALESCE: BinaryOp.COALESCE},
    {TokenKind.OR: BinaryOp.OR},
    {TokenKind.AND: BinaryOp.AND},
    {TokenKind.EQ: BinaryOp.EQ, TokenKind.NE: BinaryOp.NE},
    {
        TokenKind.LT: BinaryOp.LT,
        TokenKind.LE: BinaryOp.LE,
        TokenKind.GT: BinaryOp.GT,
        TokenKind.GE: BinaryOp.GE,
    },
    {TokenKind.PLUS: BinaryOp.ADD, TokenKind.MINUS: BinaryOp.SUB},
    {TokenKind.STAR: BinaryOp.MUL, TokenKind.SLASH: BinaryOp.DIV, TokenKind.PERCENT: BinaryOp.MOD},
]


MAX_NESTING = 32


class _Parser:
    """Recursive descent parser for expressions."""

    def __init__(self, tokens: list[Token]) -> None:
        self.tokens = tokens
        self.pos = 0
        self.depth = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.pos]

    def advance(self) -> Token:
        tok = self.tokens[self.pos]
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind) -> Token:
        tok = self.current
        if tok.kind != kind:
            raise ExpressionParseError(
                f"Expected {kind.value!r}, got {tok.kind.value!r} ({tok.value!r})",
                tok.pos,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    # -- Grammar rules --

    def enter(self) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise ExpressionParseError("Expression is nested too deeply", self.current.pos)

    def parse_expr(self) -> Expr:
        self.enter()
        condition = self.parse_binary(0)
        if self.match(TokenKind.QUESTION):
            then_expr = self.parse_expr()
            self.expect(TokenKind.COLON)
            else_expr = self.parse_expr()
            condition = Conditional(condition, then_expr, else_expr)
        self.depth -= 1
        return condition

    def parse_binary(self, level: int) -> Expr:
        """One precedence level of left-associative binary operators."""
        if level == len(_LEFT_ASSOC_LEVELS):
            return self.parse_unary()
        operators = _LEFT_ASSOC_LEVELS[level]
        left = self.parse_binary(level + 1)
        while self.current.kind in operators:
            op = operators[self.advance().kind]
            right = self.parse_binary(level + 1)
            left = Binary(op, left, right)
        return left

    def parse_unary(self) -> Expr:
        tok = self.match(TokenKind.NOT, TokenKind.MINUS)
        if tok is None:
            return self.parse_postfix()
        self.enter()
        operand = self.parse_unary()
        self.depth -= 1
        return Unary(UnaryOp.NOT if tok.kind == TokenKind.NOT else UnaryOp.NEG, operand)

    def parse_postfix(self) -> Expr:
        expr = self.parse_primary()
        while True:
            if self.match(TokenKind.DOT):
                tok = self.current
                if tok.kind == TokenKind.INT:
                    expr = Index(expr, self.parse_primary())
                    continue
                name = self.expect(TokenKind.IDENT).value
                if self.match(TokenKind.LPAREN):
                    expr = MethodCall(expr, name, self.parse_args())
                else:
                    expr = Member(expr, name)
            elif self.match(TokenKind.LBRACKET):
                index = self.parse_expr()
                self.expect(TokenKind.RBRACKET)
                expr = Index(expr, index)
            else:
                return expr

    def parse_args(self) -> tuple[Expr, ...]:
        args: list[Expr] = []
        if not self.match(TokenKind.RPAREN):
            args.append(self.parse_expr())
            while self.match(TokenKind.COMMA):
                args.append(self.parse_expr())
            self.expect(TokenKind.RPAREN)
        return tuple(args)

    def parse_primary(self) -> Expr:
        tok = self.current

        if tok.kind == TokenKind.INT:
            self.advance()
            try:
                return Literal(Value.of(int(tok.value)))
            except ValueError as e:
                raise ExpressionParseError(str(e), tok.pos) from e
        if tok.kind == TokenKind.FLOAT:
            self.advance()
            return Literal(Value.of(float(tok.value)))
        if tok.kind == TokenKind.STRING:
            self.advance()
            return Literal(Value.of(tok.value))
        if tok.kind == TokenKind.TRUE:
            self.advance()
            return Literal(TRUE)
        if tok.kind == TokenKind.FALSE:
            self.advance()
            return Literal(FALSE)
        if tok.kind == TokenKind.NULL:
            self.advance()
            return Literal(NULL)
        if tok.kind == TokenKind.IDENT:
            self.advance()
            return Identifier(tok.value)
        if self.match(TokenKind.LPAREN):
            inner = self.parse_expr()
            self.expect(TokenKind.RPAREN)
            return inner
        if self.match(TokenKind.TEMPLATE_OPEN):
            # `${a} + 1` inside an expression groups like parentheses
            inner = self.parse_expr()
            self.expect(TokenKind.RBRACE)
            return inner

        raise ExpressionParseError(f"Unexpected token {tok.value or tok.kind.value!r}", tok.pos)


@lru_cache(maxsize=512)
def parse_expression(source: str) -> Expr:
    """
    Parse an expression string into an AST.

    Raises:
        ExpressionParseError: On syntax errors (token errors are converted)
    """
    try:
        tokens = tokenize(source)
    except ExpressionTokenError as e:
        raise ExpressionParseError(str(e), e.pos) from e

    parser = _Parser(tokens)
    expr = parser.parse_expr()
    if parser.current.kind != TokenKind.EOF:
        raise ExpressionParseError(
            f"Unexpected trailing input {parser.current.value!r}", parser.current.pos
        )
    return expr
