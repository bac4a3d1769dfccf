"""Handles interactive/command-line mode for the Lox interpreter. Uses cmd as backend."""

import cmd


class Shell(cmd.Cmd):
    """Lox interpreter shell."""
    intro = "Lox interpreter :: Python backend\nType 'help' for more information, 'exit' or 'quit' to leave."
    prompt = "> "
    secondary_prompt = ". "  # used for line continuations
    _tmp_prompt = "> "       # also used for prompt swapping in line continuations

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)

        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Executes arbitrary Lox source. Waits for more lines while braces, parens or a string are left open."""
        with self.sess.error_handler:  # needed because cmd.Cmd automatically exits on Exception
            source = self._tmp_line + line + "\n"

            if self.sess.needs_continuation(source):
                self._tmp_line = source
                self.prompt = self.secondary_prompt
                return

            self._tmp_line = ""
            self.prompt = self._tmp_prompt
            self.sess.execute(source, echo=True)

    def do_help(self, arg):
        """Doesnt return docs, but rather a short intro."""
        if arg:
            return self.default(self.lastcmd)

        print("Welcome to the Lox interpreter!\n\n"
              "Lox is a small dynamically-typed language with closures and classes. Every \n"
              "line you type is run against the same global scope, so declarations persist.\n\n"
              "Try it out by typing 'var a = 1;'. Next, type 'print a + 2;' or just 'a + 2;'.\n"
              "Blocks, functions and classes may span several lines.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        if self._tmp_line:
            return self.default("")
        return ""

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return True

    def do_exit(self, arg):
        """Exits interpreter. Anything after 'exit' is treated as Lox source (e.g. 'exit = 1;')."""
        if arg:
            return self.default(self.lastcmd)
        return True

    do_quit = do_exit
