"""Interactive sanskriti shell, built on cmd. Every line that isn't a shell command is run in the shell's session."""

import cmd


class Shell(cmd.Cmd):
    """Read-eval-print loop over a command-line Session. Variables survive from one line to the next."""
    intro = "sanskriti :: Lox, in Sanskrit\nType 'help' for more information, 'exit' to leave."
    prompt = "> "
    secondary_prompt = ". "  # shown while a brace, parenthesis or string is still open
    _tmp_prompt = "> "       # restored once the statement is complete

    def __init__(self, sess, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.sess = sess
        self._tmp_line = ""

    def default(self, line):
        """Runs line, or holds on to it until the statement it starts is complete."""
        with self.sess.error_handler:  # reports and suppresses, so a bad line doesn't end the loop
            line, add_to_prev = self.sess.preprocess_line(self._tmp_line + line)

            if add_to_prev:
                self._tmp_line = line + "\n"
                self.prompt = self.secondary_prompt
            else:
                self._tmp_line = ""
                self.prompt = self._tmp_prompt

                if line.strip():
                    self.sess.run(line)

    def do_help(self, arg):
        """Prints a short introduction to the language instead of the command list."""
        print("Welcome to the sanskriti interpreter!\n\n"
              "sanskriti is Lox with keywords that can be written in Sanskrit: 'चर' for 'var',\n"
              "'कथय' for 'print', 'यदि' for 'if', 'यावद' for 'while' and so on. Variables live\n"
              "for the whole session.\n\n"
              "Try it out by typing 'चर x = 2;'. Next, try typing 'कथय x * 21;'. This will\n"
              "print '42.0'.")

    def emptyline(self):
        """A blank line is a no-op; cmd would otherwise rerun the last line."""
        return ""

    def do_EOF(self, arg):
        """Ctrl-D leaves the shell."""
        print()
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Leaves the shell."""
        return True
