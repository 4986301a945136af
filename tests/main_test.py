import contextlib
import io
import os
import tempfile
import unittest

from lox.main import main


class MainTestCase(unittest.TestCase):

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.stdout = io.StringIO()
        self.stderr = io.StringIO()

    def tearDown(self):
        self.directory.cleanup()

    def run_script(self, source, *flags):
        path = os.path.join(self.directory.name, "script.lox")
        with open(path, "w", encoding="utf-8") as file:
            file.write(source)

        with contextlib.redirect_stdout(self.stdout), contextlib.redirect_stderr(self.stderr):
            return main([path, "--no-color", *flags])

    def test_exit_codes(self):
        cases = {
            "print 1;": 0,
            "{ var unused; }": 0,
            "print 1": 65,
            "print #;": 65,
            "return 1;": 65,
            "print -nil;": 70,
        }
        for case, code in cases.items():
            self.assertEqual(code, self.run_script(case), case)

    def test_output(self):
        self.assertEqual(0, self.run_script("for (var i = 1; i <= 3; i = i + 1) print i * i;"))
        self.assertEqual(["1", "4", "9"], self.stdout.getvalue().splitlines())
        self.assertEqual("", self.stderr.getvalue())

    def test_missing_file(self):
        with contextlib.redirect_stderr(self.stderr):
            code = main([os.path.join(self.directory.name, "missing.lox"), "--no-color"])
        self.assertEqual(66, code)
        self.assertIn("could not be opened", self.stderr.getvalue())

    def test_unreadable_files(self):
        undecodable = os.path.join(self.directory.name, "latin1.lox")
        with open(undecodable, "wb") as file:
            file.write(b'print "\xff";')

        should_not_open = {
            undecodable: "could not be decoded",
            self.directory.name: "could not be opened",
        }
        for case, message in should_not_open.items():
            stderr = io.StringIO()
            with contextlib.redirect_stdout(self.stdout), contextlib.redirect_stderr(stderr):
                code = main([case, "--no-color"])
            self.assertEqual(66, code, case)
            self.assertIn(message, stderr.getvalue(), case)
            self.assertNotIn("[internal]", stderr.getvalue(), case)
        self.assertEqual("", self.stdout.getvalue())

    def test_debug(self):
        self.assertEqual(0, self.run_script("print 2;", "--debug"))
        self.assertEqual(["2"], self.stdout.getvalue().splitlines())
        self.assertIn("(print 2.0)", self.stderr.getvalue())


if __name__ == '__main__':
    unittest.main()
