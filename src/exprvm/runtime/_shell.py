"""Interactive shell for exprvm.  Uses cmd as backend."""

from __future__ import annotations

import argparse
import cmd
import logging

from ._results import Success, format_result
from ._runtime import ENV_COMMAND, Runtime


class Shell(cmd.Cmd):
    """Line-based read-eval-print loop over one ``Runtime`` session."""

    intro = f"exprvm interactive shell\nType '{ENV_COMMAND}' to inspect the environment, 'exit' to quit."
    prompt = ">>> "
    commands = ("exit", "EOF")

    def __init__(self, runtime: Runtime | None = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.runtime = runtime or Runtime()

    def onecmd(self, line):
        """Evaluates every line that is not exactly one of the shell's own commands."""
        stripped = line.strip()
        if stripped in self.commands:
            return super().onecmd(stripped)
        if not stripped:
            return self.emptyline()
        self.default(line)
        return False

    def default(self, line):
        """Evaluates one submission."""
        result = self.runtime.evaluate(line)
        if isinstance(result, Success):
            for warning in result.warnings:
                self.stdout.write(f"warning: {warning.message}\n")
        text = format_result(result)
        if text is not None:
            self.stdout.write(text.rstrip("\n") + "\n")

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits the shell."""
        self.stdout.write("\n")
        return True

    def do_exit(self, arg):
        """Exits the shell."""
        return True


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="exprvm", description="exprvm interactive shell")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every executed instruction")
    parser.add_argument("--prompt", default=Shell.prompt, help="input prompt (default: %(default)r)")
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)

    shell = Shell()
    shell.prompt = args.prompt
    shell.cmdloop()
    return 0
