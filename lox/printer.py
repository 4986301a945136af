"""Parenthesised rendering of the syntax tree, used by the shell's debug mode.

Format:
    expressions  (operator operand ...)        e.g. (+ 1 (* 2 3))
    statements   {keyword part; part; ...}     e.g. {block (print x); }
"""

from lox.syntax import ast


class AstPrinter:

    def print(self, statements):
        return "\n".join(self.stmt(stmt) for stmt in statements)

    def stmt(self, stmt):
        if isinstance(stmt, ast.Expression):
            return self.parenthesize("stmt", stmt.expression)
        elif isinstance(stmt, ast.Print):
            return self.parenthesize("print", stmt.expression)
        elif isinstance(stmt, ast.Var):
            if stmt.initializer is None:
                return f"(var {stmt.name.lexeme})"
            return self.parenthesize(f"var {stmt.name.lexeme}", stmt.initializer)
        elif isinstance(stmt, ast.Block):
            return self.block("block", stmt.statements)
        elif isinstance(stmt, ast.If):
            text = f"{{if {self.expr(stmt.condition)} then {self.stmt(stmt.then_branch)}"
            if stmt.else_branch is not None:
                text += f" else {self.stmt(stmt.else_branch)}"
            return text + "}"
        elif isinstance(stmt, ast.While):
            return f"{{while {self.expr(stmt.condition)} do {self.stmt(stmt.body)}}}"
        elif isinstance(stmt, ast.Function):
            return f"(fun {stmt.name.lexeme}({params(stmt.params)}) {self.block('body', stmt.body)})"
        elif isinstance(stmt, ast.Return):
            if stmt.value is None:
                return "(return)"
            return self.parenthesize("return", stmt.value)
        elif isinstance(stmt, ast.Class):
            return self.block(f"class {stmt.name.lexeme}({params(stmt.params)})", stmt.methods)

        raise TypeError(f"unknown statement type: {type(stmt).__name__}")

    def expr(self, expr):
        if isinstance(expr, ast.Literal):
            if expr.value is None:
                return "nil"
            if isinstance(expr.value, bool):
                return "true" if expr.value else "false"
            if isinstance(expr.value, str):
                return f'"{expr.value}"'
            return repr(expr.value)
        elif isinstance(expr, ast.Variable):
            return expr.name.lexeme
        elif isinstance(expr, ast.Assign):
            return self.parenthesize(f"= {expr.name.lexeme}", expr.value)
        elif isinstance(expr, (ast.Binary, ast.Logical)):
            return self.parenthesize(expr.operator.lexeme, expr.left, expr.right)
        elif isinstance(expr, ast.Unary):
            return self.parenthesize(expr.operator.lexeme, expr.right)
        elif isinstance(expr, ast.Ternary):
            return self.parenthesize("?:", expr.condition, expr.then_branch, expr.else_branch)
        elif isinstance(expr, ast.Grouping):
            return self.parenthesize("group", expr.expression)
        elif isinstance(expr, ast.Call):
            return self.parenthesize("call", expr.callee, *expr.arguments)
        elif isinstance(expr, ast.Get):
            return self.parenthesize(f"get {expr.name.lexeme}", expr.object)
        elif isinstance(expr, ast.Set):
            return self.parenthesize(f"set {expr.name.lexeme}", expr.object, expr.value)
        elif isinstance(expr, ast.This):
            return "this"
        elif isinstance(expr, ast.Lambda):
            return f"(lambda ({params(expr.params)}) {self.block('body', expr.body)})"

        raise TypeError(f"unknown expression type: {type(expr).__name__}")

    def parenthesize(self, name, *exprs):
        return "(" + " ".join([name] + [self.expr(expr) for expr in exprs]) + ")"

    def block(self, name, statements):
        return "{" + name + " " + "".join(f"{self.stmt(stmt)}; " for stmt in statements) + "}"


def params(tokens):
    return " ".join(token.lexeme for token in tokens)
