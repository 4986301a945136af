import io
import os
import tempfile
import unittest

from lox.lang.error import ErrorHandler
from lox.lang.session import Session, is_unbalanced


class SessionTestCase(unittest.TestCase):

    def setUp(self):
        self.out = io.StringIO()
        self.stream = io.StringIO()
        self.error_handler = ErrorHandler(color=False, stream=self.stream)
        self.sess = Session(self.error_handler, out=self.out)

    def output(self):
        return self.out.getvalue().splitlines()

    def kinds(self):
        return [diagnostic.kind for diagnostic in self.error_handler.diagnostics]

    def test_globals_persist(self):
        self.assertTrue(self.sess.run_source("var greeting = \"hi\";"))
        self.assertTrue(self.sess.run_source("fun shout(s) { return s + \"!\"; }"))
        self.assertTrue(self.sess.run_source("print shout(greeting);"))
        self.assertEqual(["hi!"], self.output())

    def test_independent_inputs_redeclare(self):
        self.assertTrue(self.sess.run_source("var x = 1; print x;"))
        self.assertTrue(self.sess.run_source("var x = 2; print x;"))
        self.assertEqual(["1", "2"], self.output())

    def test_syntax_error_stops_before_running(self):
        self.assertFalse(self.sess.run_source("print 1;\nprint ;"))
        self.assertEqual([], self.output())
        self.assertEqual(["error"], self.kinds())

    def test_resolution_error_stops_before_running(self):
        self.assertFalse(self.sess.run_source("print 1;\n{ var a = a; }"))
        self.assertEqual([], self.output())
        self.assertIn("error", self.kinds())

    def test_runtime_error(self):
        self.assertFalse(self.sess.run_source("print 1;\nprint nil + 1;\nprint 2;"))
        self.assertEqual(["1"], self.output())
        self.assertEqual(["runtime error"], self.kinds())
        self.assertIn("<stdin>:2: runtime error: Operands must be two numbers or two strings.", self.stream.getvalue())

    def test_warnings_do_not_stop(self):
        self.assertTrue(self.sess.run_source("{ var unused = 1; print 3; }"))
        self.assertEqual(["3"], self.output())
        self.assertEqual(["warning"], self.kinds())

    def test_debug_traces(self):
        self.sess.debug = True
        self.assertTrue(self.sess.run_source("print 1 + 2;"))

        self.assertEqual(["3"], self.output())
        self.assertEqual(["print 1 + 2 ; EOF", "(print (+ 1.0 2.0))"], self.stream.getvalue().splitlines())

    def test_run_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "script.lox")
            with open(path, "w", encoding="utf-8") as file:
                file.write("var a = 40;\nprint a + 2;\n")

            sess = Session(self.error_handler, path, out=self.out)
            self.assertTrue(sess.run_file())
        self.assertEqual(["42"], self.output())

    def test_run_undecodable_file(self):
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, "latin1.lox")
            with open(path, "wb") as file:
                file.write(b'print "\xff";')

            sess = Session(self.error_handler, path, out=self.out)
            self.assertIsNone(sess.read_file())
            self.assertFalse(sess.run_file())

        self.assertEqual([], self.output())
        self.assertTrue(self.error_handler.had_error)
        self.assertIn("could not be decoded", self.error_handler.diagnostics[0].message)
        self.assertNotIn("[internal]", self.stream.getvalue())

    def test_globals_keep_earlier_bindings(self):
        self.assertTrue(self.sess.run_source("fun make() { var n = 1; return fun () { return n; }; }\nvar get = make();"))
        self.assertTrue(self.sess.run_source("print get();"))
        self.assertEqual(["1"], self.output())

    def test_run_missing_file(self):
        sess = Session(self.error_handler, os.path.join(tempfile.gettempdir(), "no", "such", "file.lox"), out=self.out)
        self.assertFalse(sess.run_file())
        self.assertTrue(self.error_handler.had_error)
        self.assertIn("could not be opened", self.error_handler.diagnostics[0].message)


class ContinuationTestCase(unittest.TestCase):

    def test_is_unbalanced(self):
        should_be_unbalanced = [
            "fun f() {",
            "if (a and (b",
            "{ { }",
            'print "open',
            "{ // comment }",
        ]
        for case in should_be_unbalanced:
            self.assertTrue(is_unbalanced(case), case)

        should_be_balanced = [
            "print 1;",
            "fun f() { return 1; }",
            'print "{";',
            "print 1; // {",
            "}",
            "",
        ]
        for case in should_be_balanced:
            self.assertFalse(is_unbalanced(case), case)

    def test_preprocess_line(self):
        line, more = Session.preprocess_line("fun f() {")
        self.assertEqual("fun f() {", line)
        self.assertTrue(more)

        line, more = Session.preprocess_line("return 1;", line)
        self.assertEqual("fun f() {\nreturn 1;", line)
        self.assertTrue(more)

        line, more = Session.preprocess_line("}", line)
        self.assertEqual("fun f() {\nreturn 1;\n}", line)
        self.assertFalse(more)


if __name__ == '__main__':
    unittest.main()
