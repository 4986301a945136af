"""Recursive-descent parser: token sequence in, statement list out. See lox/syntax/ast.py for the grammar.

Errors are reported through the error handler as they are found. A ParseError is only raised to unwind to the
enclosing declaration, where the parser synchronises (discards tokens up to the next statement boundary) and carries
on, so one pass reports as many syntax errors as it can. A declaration that failed to parse contributes no node.
"""

from lox.lang.error import ParseError, location
from lox.syntax import ast
from lox.syntax.scanner import scan
from lox.syntax.tokens import Token, TokenType


class Parser:
    """Single-use parser over one token sequence."""
    MAX_ARITY = 255
    # tokens that start a new declaration; synchronisation stops in front of them
    BOUNDARIES = {
        TokenType.CLASS,
        TokenType.FUN,
        TokenType.VAR,
        TokenType.FOR,
        TokenType.IF,
        TokenType.WHILE,
        TokenType.PRINT,
        TokenType.RETURN,
    }

    def __init__(self, tokens, error_handler):
        self.tokens = tokens
        self.error_handler = error_handler
        self.current = 0

    def parse(self):
        statements = []
        while not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        return statements

    # declarations and statements

    def declaration(self):
        try:
            if self.match(TokenType.CLASS):
                return self.class_declaration()
            if self.match(TokenType.VAR):
                return self.var_declaration()
            if self.check(TokenType.FUN) and self.check_next(TokenType.IDENTIFIER):
                self.advance()
                return self.function("function")
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect class name.")
        params = self.parameters() if self.match(TokenType.PAREN_LEFT) else []

        self.consume(TokenType.BRACE_LEFT, "Expect '{' before class body.")
        methods = []
        while not self.check(TokenType.BRACE_RIGHT) and not self.is_at_end():
            methods.append(self.function("method"))
        self.consume(TokenType.BRACE_RIGHT, "Expect '}' after class body.")

        return ast.Class(name, params, methods)

    def var_declaration(self):
        name = self.consume(TokenType.IDENTIFIER, "Expect variable name.")
        initializer = self.expression() if self.match(TokenType.EQUAL) else None
        self.consume(TokenType.SEMICOLON, "Expect ';' after variable declaration.")
        return ast.Var(name, initializer)

    def function(self, kind):
        name = self.consume(TokenType.IDENTIFIER, f"Expect {kind} name.")
        self.consume(TokenType.PAREN_LEFT, f"Expect '(' after {kind} name.")
        params = self.parameters()
        self.consume(TokenType.BRACE_LEFT, f"Expect '{{' before {kind} body.")
        return ast.Function(name, params, self.block())

    def parameters(self):
        """Parses a parameter list. Assumes the opening paren has been consumed."""
        params = []
        if not self.check(TokenType.PAREN_RIGHT):
            while True:
                if len(params) >= Parser.MAX_ARITY:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARITY} parameters.")
                params.append(self.consume(TokenType.IDENTIFIER, "Expect parameter name."))
                if not self.match(TokenType.COMMA):
                    break
        self.consume(TokenType.PAREN_RIGHT, "Expect ')' after parameters.")
        return params

    def statement(self):
        if self.match(TokenType.FOR):
            return self.for_statement()
        if self.match(TokenType.IF):
            return self.if_statement()
        if self.match(TokenType.PRINT):
            return self.print_statement()
        if self.match(TokenType.RETURN):
            return self.return_statement()
        if self.match(TokenType.WHILE):
            return self.while_statement()
        if self.match(TokenType.BRACE_LEFT):
            return ast.Block(self.block())
        return self.expression_statement()

    def for_statement(self):
        """for loops are desugared: { initializer; while (condition) { body; increment; } }"""
        self.consume(TokenType.PAREN_LEFT, "Expect '(' after 'for'.")

        if self.match(TokenType.SEMICOLON):
            initializer = None
        elif self.match(TokenType.VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        if self.check(TokenType.SEMICOLON):
            condition = ast.Literal(True)
        else:
            condition = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after loop condition.")

        increment = None if self.check(TokenType.PAREN_RIGHT) else self.expression()
        self.consume(TokenType.PAREN_RIGHT, "Expect ')' after for clauses.")

        body = self.statement()
        if increment is not None:
            body = ast.Block([body, ast.Expression(increment)])

        body = ast.While(condition, body)
        if initializer is not None:
            body = ast.Block([initializer, body])

        return body

    def if_statement(self):
        self.consume(TokenType.PAREN_LEFT, "Expect '(' after 'if'.")
        condition = self.expression()
        self.consume(TokenType.PAREN_RIGHT, "Expect ')' after if condition.")

        then_branch = self.statement()
        else_branch = self.statement() if self.match(TokenType.ELSE) else None
        return ast.If(condition, then_branch, else_branch)

    def print_statement(self):
        value = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after value.")
        return ast.Print(value)

    def return_statement(self):
        keyword = self.previous()
        value = None if self.check(TokenType.SEMICOLON) else self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after return value.")
        return ast.Return(keyword, value)

    def while_statement(self):
        self.consume(TokenType.PAREN_LEFT, "Expect '(' after 'while'.")
        condition = self.expression()
        self.consume(TokenType.PAREN_RIGHT, "Expect ')' after condition.")
        return ast.While(condition, self.statement())

    def block(self):
        """Parses the statements of a block. Assumes the opening brace has been consumed."""
        statements = []
        while not self.check(TokenType.BRACE_RIGHT) and not self.is_at_end():
            stmt = self.declaration()
            if stmt is not None:
                statements.append(stmt)
        self.consume(TokenType.BRACE_RIGHT, "Expect '}' after block.")
        return statements

    def expression_statement(self):
        expr = self.expression()
        self.consume(TokenType.SEMICOLON, "Expect ';' after expression.")
        return ast.Expression(expr)

    # expressions, lowest precedence first

    def expression(self):
        return self.assignment()

    def assignment(self):
        expr = self.ternary()

        if self.match(TokenType.EQUAL):
            equals = self.previous()
            value = self.assignment()

            if isinstance(expr, ast.Variable):
                return ast.Assign(expr.name, value)
            elif isinstance(expr, ast.Get):
                return ast.Set(expr.object, expr.name, value)

            self.error(equals, "Invalid assignment target.")  # reported, but no need to synchronise

        return expr

    def ternary(self):
        expr = self.logical_or()

        if self.match(TokenType.QUESTION):
            question = self.previous()
            then_branch = self.expression()
            colon = self.consume(TokenType.COLON, "Expect ':' after then branch of conditional expression.")
            else_branch = self.expression()
            expr = ast.Ternary(expr, question, then_branch, colon, else_branch)

        return expr

    def logical_or(self):
        return self._left_assoc(self.logical_and, ast.Logical, TokenType.OR)

    def logical_and(self):
        return self._left_assoc(self.equality, ast.Logical, TokenType.AND)

    def equality(self):
        return self._left_assoc(self.comparison, ast.Binary, TokenType.BANG_EQUAL, TokenType.EQUAL_EQUAL)

    def comparison(self):
        return self._left_assoc(self.term, ast.Binary, TokenType.GREATER, TokenType.GREATER_EQUAL,
                                TokenType.LESS, TokenType.LESS_EQUAL)

    def term(self):
        return self._left_assoc(self.factor, ast.Binary, TokenType.MINUS, TokenType.PLUS)

    def factor(self):
        return self._left_assoc(self.unary, ast.Binary, TokenType.SLASH, TokenType.STAR)

    def _left_assoc(self, operand, node_cls, *operators):
        """Parses `operand (operator operand)*` into a left-leaning tree of node_cls."""
        expr = operand()
        while self.match(*operators):
            operator = self.previous()
            expr = node_cls(expr, operator, operand())
        return expr

    def unary(self):
        if self.match(TokenType.BANG, TokenType.MINUS):
            operator = self.previous()
            return ast.Unary(operator, self.unary())

        if self.match(TokenType.PLUS):
            operator = self.previous()
            self.unary()
            raise self.error(operator, "Unary '+' is not supported.")

        return self.call()

    def call(self):
        expr = self.primary()

        while True:
            if self.match(TokenType.PAREN_LEFT):
                expr = self.finish_call(expr)
            elif self.match(TokenType.DOT):
                name = self.consume(TokenType.IDENTIFIER, "Expect property name after '.'.")
                expr = ast.Get(expr, name)
            else:
                break

        return expr

    def finish_call(self, callee):
        arguments = []
        if not self.check(TokenType.PAREN_RIGHT):
            while True:
                if len(arguments) >= Parser.MAX_ARITY:
                    self.error(self.peek(), f"Can't have more than {Parser.MAX_ARITY} arguments.")
                arguments.append(self.expression())
                if not self.match(TokenType.COMMA):
                    break

        paren = self.consume(TokenType.PAREN_RIGHT, "Expect ')' after arguments.")
        return ast.Call(callee, paren, arguments)

    def primary(self):
        if self.match(TokenType.FALSE):
            return ast.Literal(False)
        if self.match(TokenType.TRUE):
            return ast.Literal(True)
        if self.match(TokenType.NIL):
            return ast.Literal(None)
        if self.match(TokenType.NUMBER, TokenType.STRING):
            return ast.Literal(self.previous().literal)
        if self.match(TokenType.THIS):
            return ast.This(self.previous())
        if self.match(TokenType.IDENTIFIER):
            return ast.Variable(self.previous())
        if self.match(TokenType.FUN):
            return self.lambda_()
        if self.match(TokenType.PAREN_LEFT):
            expr = self.expression()
            self.consume(TokenType.PAREN_RIGHT, "Expect ')' after expression.")
            return ast.Grouping(expr)

        raise self.error(self.peek(), "Expect expression.")

    def lambda_(self):
        keyword = self.previous()
        self.consume(TokenType.PAREN_LEFT, "Expect '(' after 'fun'.")
        params = self.parameters()
        self.consume(TokenType.BRACE_LEFT, "Expect '{' before lambda body.")
        return ast.Lambda(keyword, params, self.block())

    # token helpers

    def match(self, *types):
        for token_type in types:
            if self.check(token_type):
                self.advance()
                return True
        return False

    def consume(self, token_type, message):
        if self.check(token_type):
            return self.advance()
        raise self.error(self.peek(), message)

    def check(self, token_type):
        return not self.is_at_end() and self.peek().type is token_type

    def check_next(self, token_type):
        if self.is_at_end() or self.current + 1 >= len(self.tokens):
            return False
        return self.tokens[self.current + 1].type is token_type

    def advance(self):
        if not self.is_at_end():
            self.current += 1
        return self.previous()

    def is_at_end(self):
        return self.peek().type is TokenType.EOF

    def peek(self):
        return self.tokens[self.current]

    def previous(self):
        return self.tokens[self.current - 1]

    def error(self, token, message):
        """Reports a syntax error at token and returns (does not raise) the ParseError to unwind with."""
        self.error_handler.error_at(token, message)
        return ParseError(token.line, message, where=location(token))

    def synchronize(self):
        """Discards tokens until a statement boundary: just past a ';', or in front of a declaration keyword."""
        self.advance()

        while not self.is_at_end():
            if self.previous().type is TokenType.SEMICOLON:
                return
            if self.peek().type in Parser.BOUNDARIES:
                return
            self.advance()


def parse(tokens, error_handler):
    """Returns the statements parsed from tokens. Syntax errors are reported through error_handler."""
    if not tokens or tokens[-1].type is not TokenType.EOF:
        tokens = list(tokens) + [Token(TokenType.EOF, "", None, tokens[-1].line if tokens else 1)]
    return Parser(tokens, error_handler).parse()


def scan_and_parse(source, error_handler):
    """Scans and parses source. Returns (statements, had_syntax_error); statements must not be resolved or run
    when had_syntax_error is set.
    """
    tokens = scan(source, error_handler)
    statements = parse(tokens, error_handler)
    return statements, error_handler.had_error
