"""Handles interactive/command-line mode for the lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """lox interpreter shell."""
    intro = "lox interpreter :: Python backend\nType 'help' for more information."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary lox source."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            line, add_to_prev = self.sess.preprocess_line(line, self._tmp_line)

            if add_to_prev:
                self._tmp_line = line
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                try:
                    self.sess.run_source(line)
                finally:
                    self.sess.error_handler.reset()  # an error only rejects the line it came from

    def parseline(self, line):
        """Only bare shell commands (no arguments) are dispatched as commands, and never in the middle of a
        continuation: `exit = 3;` is lox source, not the exit command.
        """
        if line == "EOF":
            return super().parseline(line)
        if self._tmp_line:
            return None, None, line

        cmd_name, arg, parsed = super().parseline(line)
        if cmd_name is None or arg or not hasattr(self, "do_" + cmd_name):
            return None, None, line
        return cmd_name, arg, parsed

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        print("Welcome to the lox interpreter!\n\n"
              "lox is a small dynamically-typed scripting language with closures and classes.\n"
              "Statements end with ';' and blocks that are left open continue on the next line.\n\n"
              "Try it out by typing 'var greeting = \"hi\";', then 'print greeting;'.\n\n"
              "Commands: 'debug' toggles printing of tokens and syntax trees, 'exit' quits.")

    def do_debug(self, arg):
        """Toggles tracing of tokens and syntax trees."""
        self.sess.debug = not self.sess.debug
        print(f"debug {'on' if self.sess.debug else 'off'}")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
