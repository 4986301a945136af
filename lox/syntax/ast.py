"""Abstract syntax tree for lox. Two closed sets of node variants, expressions (Expr) and statements (Stmt), built
once by the parser and shared read-only by the resolver and the interpreter. Each consuming stage dispatches over
the node's variant itself; nodes carry no behaviour.

Nodes compare and hash by identity (eq=False): the interpreter's binding table is keyed on the exact expression
node the resolver visited, so two structurally equal `x` references must never collide.

Grammar, lowest to highest precedence:

```
program     ::= declaration* EOF
declaration ::= classDecl | funDecl | varDecl | statement
classDecl   ::= "class" IDENTIFIER ( "(" parameters? ")" )? "{" function* "}"
funDecl     ::= "fun" function
function    ::= IDENTIFIER "(" parameters? ")" block
varDecl     ::= "var" IDENTIFIER ( "=" expression )? ";"
statement   ::= exprStmt | forStmt | ifStmt | printStmt | returnStmt | whileStmt | block

expression  ::= assignment
assignment  ::= ( call "." )? IDENTIFIER "=" assignment | ternary
ternary     ::= logic_or ( "?" expression ":" expression )?
logic_or    ::= logic_and ( "or" logic_and )*
logic_and   ::= equality ( "and" equality )*
equality    ::= comparison ( ( "!=" | "==" ) comparison )*
comparison  ::= term ( ( ">" | ">=" | "<" | "<=" ) term )*
term        ::= factor ( ( "-" | "+" ) factor )*
factor      ::= unary ( ( "/" | "*" ) unary )*
unary       ::= ( "!" | "-" ) unary | call
call        ::= primary ( "(" arguments? ")" | "." IDENTIFIER )*
primary     ::= "true" | "false" | "nil" | "this" | NUMBER | STRING | IDENTIFIER | lambda | "(" expression ")"
lambda      ::= "fun" "(" parameters? ")" block
```
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from lox.syntax.tokens import Token


class Expr:
    """Superclass for every expression node."""


class Stmt:
    """Superclass for every statement node."""


node = dataclass(frozen=True, eq=False)


# expressions

@node
class Literal(Expr):
    value: Any


@node
class Variable(Expr):
    name: Token


@node
class Assign(Expr):
    name: Token
    value: Expr


@node
class Unary(Expr):
    operator: Token
    right: Expr


@node
class Binary(Expr):
    left: Expr
    operator: Token
    right: Expr


@node
class Logical(Expr):
    """`and`/`or`: short-circuiting, kept apart from Binary so evaluation order stays explicit."""
    left: Expr
    operator: Token
    right: Expr


@node
class Ternary(Expr):
    condition: Expr
    question: Token
    then_branch: Expr
    colon: Token
    else_branch: Expr


@node
class Grouping(Expr):
    expression: Expr


@node
class Call(Expr):
    callee: Expr
    paren: Token  # closing paren, used to locate runtime errors
    arguments: List[Expr]


@node
class Get(Expr):
    object: Expr
    name: Token


@node
class Set(Expr):
    object: Expr
    name: Token
    value: Expr


@node
class This(Expr):
    keyword: Token


@node
class Lambda(Expr):
    keyword: Token
    params: List[Token]
    body: List[Stmt]


# statements

@node
class Expression(Stmt):
    expression: Expr


@node
class Print(Stmt):
    expression: Expr


@node
class Var(Stmt):
    name: Token
    initializer: Optional[Expr]


@node
class Block(Stmt):
    statements: List[Stmt]


@node
class If(Stmt):
    condition: Expr
    then_branch: Stmt
    else_branch: Optional[Stmt]


@node
class While(Stmt):
    condition: Expr
    body: Stmt


@node
class Function(Stmt):
    name: Token
    params: List[Token]
    body: List[Stmt]


@node
class Return(Stmt):
    keyword: Token
    value: Optional[Expr]


@node
class Class(Stmt):
    name: Token
    params: List[Token]  # constructor parameters, bound as instance fields
    methods: List[Function]
