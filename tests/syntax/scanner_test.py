import io
import unittest

from lox.lang.error import ErrorHandler
from lox.syntax.scanner import scan
from lox.syntax.tokens import TokenType


def quiet_handler():
    return ErrorHandler(color=False, stream=io.StringIO())


def types(source):
    return [token.type for token in scan(source, quiet_handler())]


class ScannerTestCase(unittest.TestCase):

    def test_punctuation(self):
        cases = {
            "(){},.-+;*/?:": [
                TokenType.PAREN_LEFT, TokenType.PAREN_RIGHT, TokenType.BRACE_LEFT, TokenType.BRACE_RIGHT,
                TokenType.COMMA, TokenType.DOT, TokenType.MINUS, TokenType.PLUS, TokenType.SEMICOLON,
                TokenType.STAR, TokenType.SLASH, TokenType.QUESTION, TokenType.COLON, TokenType.EOF
            ],
            "! != = == < <= > >=": [
                TokenType.BANG, TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EQUAL_EQUAL, TokenType.LESS,
                TokenType.LESS_EQUAL, TokenType.GREATER, TokenType.GREATER_EQUAL, TokenType.EOF
            ],
            "!==": [TokenType.BANG_EQUAL, TokenType.EQUAL, TokenType.EOF],
            "": [TokenType.EOF],
        }
        for case, expected in cases.items():
            self.assertEqual(expected, types(case), case)

    def test_keywords_and_identifiers(self):
        source = "and class else false for fun if nil or print return super this true var while"
        expected = [
            TokenType.AND, TokenType.CLASS, TokenType.ELSE, TokenType.FALSE, TokenType.FOR, TokenType.FUN,
            TokenType.IF, TokenType.NIL, TokenType.OR, TokenType.PRINT, TokenType.RETURN, TokenType.SUPER,
            TokenType.THIS, TokenType.TRUE, TokenType.VAR, TokenType.WHILE, TokenType.EOF
        ]
        self.assertEqual(expected, types(source))

        should_be_identifiers = ["orchid", "_private", "classy", "x1", "Var", "fun_"]
        for case in should_be_identifiers:
            self.assertEqual([TokenType.IDENTIFIER, TokenType.EOF], types(case), case)

    def test_numbers(self):
        cases = {"123": 123.0, "3.25": 3.25, "0": 0.0, "007": 7.0}
        for case, expected in cases.items():
            token = scan(case, quiet_handler())[0]
            self.assertEqual(TokenType.NUMBER, token.type, case)
            self.assertEqual(expected, token.literal, case)
            self.assertEqual(case, token.lexeme, case)

    def test_trailing_dot(self):
        tokens = scan("123.", quiet_handler())
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.EOF], [token.type for token in tokens])
        self.assertEqual(123.0, tokens[0].literal)

        tokens = scan("1.foo", quiet_handler())
        self.assertEqual([TokenType.NUMBER, TokenType.DOT, TokenType.IDENTIFIER, TokenType.EOF],
                         [token.type for token in tokens])

    def test_strings(self):
        token = scan('"hello world"', quiet_handler())[0]
        self.assertEqual(TokenType.STRING, token.type)
        self.assertEqual("hello world", token.literal)
        self.assertEqual('"hello world"', token.lexeme)

        tokens = scan('"multi\nline" x', quiet_handler())
        self.assertEqual("multi\nline", tokens[0].literal)
        self.assertEqual(2, tokens[1].line)

    def test_comments_and_lines(self):
        tokens = scan("// a comment\nvar x; // another\n\nprint x;", quiet_handler())
        self.assertEqual([TokenType.VAR, TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.PRINT,
                          TokenType.IDENTIFIER, TokenType.SEMICOLON, TokenType.EOF],
                         [token.type for token in tokens])
        self.assertEqual([2, 2, 2, 4, 4, 4, 4], [token.line for token in tokens])

    def test_errors_do_not_stop_scanning(self):
        error_handler = quiet_handler()
        tokens = scan("var @ x # = 1;", error_handler)

        self.assertTrue(error_handler.had_error)
        self.assertEqual(2, len(error_handler.diagnostics))
        self.assertIn("'@'", error_handler.diagnostics[0].message)
        self.assertIn("'#'", error_handler.diagnostics[1].message)
        self.assertEqual([TokenType.VAR, TokenType.IDENTIFIER, TokenType.EQUAL, TokenType.NUMBER,
                          TokenType.SEMICOLON, TokenType.EOF], [token.type for token in tokens])

    def test_unterminated_string(self):
        error_handler = quiet_handler()
        tokens = scan('print "oops\nmore', error_handler)

        self.assertTrue(error_handler.had_error)
        self.assertIn("Unterminated string.", error_handler.diagnostics[0].message)
        self.assertEqual([TokenType.PRINT, TokenType.EOF], [token.type for token in tokens])
        self.assertEqual(2, error_handler.diagnostics[0].line)

    def test_lexemes_reproduce_source(self):
        cases = {
            "var  x=1.5 ;": "var x = 1.5 ;",
            'print "a b" + 2; // trailing': 'print "a b" + 2 ;',
            "fun f(a,b){return a>=b;}": "fun f ( a , b ) { return a >= b ; }",
        }
        for case, expected in cases.items():
            lexemes = [token.lexeme for token in scan(case, quiet_handler())[:-1]]
            self.assertEqual(expected, " ".join(lexemes), case)


if __name__ == '__main__':
    unittest.main()
