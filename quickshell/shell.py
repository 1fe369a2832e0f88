"""
Quickshell shell: registry, line processing, rendering and the interactive loop.

What this module provides
- Shell: a named registry of commands with
  • process(line) -> Outcome: resolve, tokenize, classify, bind and dispatch one line.
  • render(outcome): print results, grouped faults and contextual help with rich.
  • print_help(name=Unset): help for one command or for all of them.
  • run(source=Unset): the interactive read loop (console prompt or an iterable of lines).
  • built-in commands 'help [command]' and 'exit'.
- Outcome: the terminal state of one processed line.
- configure_logging(level): attach a RichHandler to the 'quickshell' logger.

Runtime options
- fancy: draw help and faults inside panels (default False).
- colorful: apply the palette (default True).
- debug: log at DEBUG and print tracebacks of failing handlers; defaults to True
  when the environment variable QUICKSHELL_ENV is 'dev'.
- A __styles__ mapping in __main__ overrides any palette entry.

Quick start
    from quickshell import Shell, Argument

    shell = Shell("demo", "a tiny shell")

    @shell.command("echo", Argument("text", mandatory=True))
    def echo(text) -> str:
        "print the text back"
        return text

    if __name__ == "__main__":
        raise SystemExit(shell.run())
"""
import logging
import os
import warnings
from collections import defaultdict
from typing import NamedTuple

from rich.box import ROUNDED
from rich.console import Console, Group
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .arguments import *
from .binding import *
from .commands import *
from .faults import *
from .tokens import *
from .utils import *

logger = logging.getLogger(__name__)

PADDING = "  "
SEPARATOR = "-" * 75

NOTES = (
    "Please use double quotes for argument and option values if they contain non alphabetical characters",
    "Option Flags can be combined together e.g. -a -b -c can be combined as -abc",
    "Options must start with double hyphen e.g. --details=value",
)


def configure_logging(level=logging.WARNING, /, *, console=Unset):
    """
    Route the 'quickshell' loggers through a single RichHandler.

    Calling it again replaces the handler installed by a previous call.
    """
    root = logging.getLogger("quickshell")
    for handler in [x for x in root.handlers if isinstance(x, RichHandler)]:
        root.removeHandler(handler)
    root.addHandler(RichHandler(
        console=coalesce(console, Console(stderr=True)),
        show_path=False,
        rich_tracebacks=True,
    ))
    root.setLevel(level)
    return root


def _innermost(exception):
    while (cause := exception.__cause__ or exception.__context__) is not None:
        exception = cause
    return exception


class Outcome(NamedTuple):
    """
    terminal result of one processed line.

    - stage: Stage.UNPARSED (blank line), Stage.FAILED or Stage.DISPATCHED.
    - command: the matched Command, or None.
    - faults: recorded CommandException instances, in order.
    - output: the handler's text result, or None.
    - reached: the furthest Stage the line completed before it stopped.
    """
    stage: Stage
    command: Command | None
    faults: tuple
    output: str | None
    reached: Stage = Stage.UNPARSED

    @property
    def failed(self):
        return self.stage is Stage.FAILED

    @property
    def errors(self):
        return tuple(map(str, self.faults))

    def check(self, **options):
        """
        Return the output, or raise CommandExit when the line failed.
        """
        if self.failed:
            raise CommandExit(self.faults, command=self.command, **options)
        return self.output


class Shell(metaclass=Introspective):
    """
    Named registry of commands and the engine that runs lines against it.

    Highlights
    - Command names are matched case-insensitively and must be unique.
    - 'help' and 'exit' are registered on construction.
    - process() never raises for parsing or validation problems; handler
      exceptions propagate to the caller (run() reports them).
    """

    __introspectable__ = (
        "name",
        "descr",
        "fancy",
        "colorful",
        "debug",
        "console",
    )

    __displayable__ = (
        "name",
        "descr",
        "fancy",
        "colorful",
        "debug",
    )

    def __init__(self, name, descr=Unset, /, *, fancy=Unset, colorful=Unset, debug=Unset, console=Unset):
        if not isinstance(name, str):
            raise TypeError(f"{type(self).__typename__} 'name' must be a string")
        elif not (name := name.strip()):
            raise ValueError(f"{type(self).__typename__} 'name' cannot be empty")
        if not isinstance(descr, str | Unset):
            raise TypeError(f"{type(self).__typename__} 'descr' must be a string")
        if not isinstance(console, Console | Unset):
            raise TypeError(f"{type(self).__typename__} 'console' must be a rich console")

        self._name = name
        self._descr = coalesce(descr) and descr.strip() or None
        self._fancy = bool(coalesce(fancy, False))
        self._colorful = bool(coalesce(colorful, True))
        self._debug = bool(coalesce(debug, os.environ.get("QUICKSHELL_ENV") == "dev"))
        self._console = coalesce(console, Console())
        self._commands = {}

        self.register(Command(
            "help",
            Argument("command", "The command name"),
            descr="prints help",
            handler=self._help,
            raw=True,
        ))
        self.register(Command(
            "exit",
            descr="terminates shell",
            handler=self._exit,
            raw=True,
        ))

    @property
    def prompt(self):
        return f"{self._name}>"

    @property
    def commands(self):
        return tuple(self._commands.values())

    def find(self, name, /):
        """
        Return the command registered under name (case-insensitive), or None.
        """
        return self._commands.get(name.casefold())

    def register(self, command, /):
        """
        Add a command to the registry and return it.

        Raises
        - TypeError: when command is not a Command or has no handler.
        - ValueError: when a command with the same name (any case) exists.
        """
        if not isinstance(command, Command):
            raise TypeError("register() argument must be a command")
        if command.handler is Unset:
            raise TypeError(f"command {command.name!r} has no handler")
        if command.name.casefold() in self._commands:
            raise ValueError(f"command {command.name!r} is already registered")
        self._commands[command.name.casefold()] = command
        logger.debug("registered command %r", command.name)
        return command

    def command(self, name, /, *parameters, descr=Unset, raw=False):
        """
        Decorator form of register(): build a Command around the handler and add it.
        """
        decorator = command(name, *parameters, descr=descr, raw=raw)

        @rename("command")
        def wrapper(handler, /):
            return self.register(decorator(handler))

        return wrapper

    def process(self, line, /):
        """
        Run one line through the engine.

        Returns
        - Outcome: UNPARSED for a blank line, FAILED with the recorded faults, or
          DISPATCHED with the handler output.
        """
        if not isinstance(line, str):
            raise TypeError("process() argument must be a string")
        if not (line := line.strip()):
            return Outcome(Stage.UNPARSED, None, (), None)

        name, _, remainder = line.partition(" ")
        if (command := self.find(name)) is None:
            logger.debug("no command matches %r", name)
            return Outcome(Stage.FAILED, None, (UnknownCommandError(
                "No command found : %s" % name,
                hint="type 'help' to list the available commands",
                name=name,
            ),), None)
        logger.debug("resolved command %r", command.name)

        try:
            tokens = tokenize(remainder.strip())
        except UnbalancedQuotingError as fault:
            logger.debug("tokenizing failed: %s", fault)
            return Outcome(Stage.FAILED, command, (fault,), None, Stage.COMMAND_RESOLVED)

        invocation = classify(command, tokens)
        if (call := bind(invocation)) is None:
            return Outcome(Stage.FAILED, command, tuple(invocation.faults), None, invocation.stage)

        return Outcome(Stage.DISPATCHED, command, (), dispatch(call), Stage.DISPATCHED)

    def _styles(self):
        return defaultdict(str, {
            "banner": "bold #FF4D94",
            "separator": "#4B5563",
            "command-name": "bold #FF4D94",
            "label": "bold #FFFFFF",
            "usage": "bold #36C5F0",
            "description": "italic #A3A3A3",
            "flag-name": "bold #22C55E",
            "option-name": "bold #00E6FF",
            "argument-name": "bold #FFD600",
            "argument-description": "#9CA3AF",
            "choice": "bold #FF4D94",
            "mandatory": "bold #EF4444",
            "notes-dot": "#00E6FF dim",
            "note": "#D1D5DB",
            "output": "",
        } | getattr(__import__("__main__"), "__styles__", {}))

    def _styler(self):
        styles = self._styles()

        def styler(style):
            return styles[style] if self._colorful else ""
        return styler

    def _rows(self, command, table, styler):
        """
        Append the help rows of one command to a three-column table.
        """
        table.add_row(
            Text(command.name, styler("command-name")),
            Text("description", styler("label")),
            Text(command.descr or "", styler("description")),
        )
        table.add_row("", Text("usage", styler("label")), Text(command.usage, styler("usage")))

        groups = (
            ("flag", command.flags),
            ("option", command.options),
            ("argument", command.arguments),
        )
        for group, parameters in groups:
            if not parameters:
                continue
            heading = group if len(parameters) == 1 else pluralize(group)
            table.add_row("", Text(heading + ":", styler("label")), "")

            for parameter in parameters:
                descr = Text(parameter.descr or "", styler("argument-description"))
                if isinstance(parameter, Flag):
                    name = Text("-" + parameter.name, styler("flag-name"))
                elif isinstance(parameter, Option):
                    name = Text("--" + parameter.name, styler("option-name"))
                    if parameter.choices:
                        descr.append(". valid values: " if descr else "valid values: ")
                        descr.append(Text(", ").join(Text(x, styler("choice")) for x in parameter.choices))
                        descr.append(". the default value is ")
                        descr.append(parameter.default, styler("choice"))
                else:
                    name = Text(parameter.name, styler("argument-name"))
                if parameter.mandatory:
                    descr.append(" (mandatory)", styler("mandatory"))
                table.add_row("", name, descr)

    def _table(self):
        table = Table(
            show_header=False,
            box=ROUNDED if self._fancy else None,
            padding=(0, 2) if self._fancy else (0, 2, 0, 0),
            pad_edge=self._fancy,
        )
        table.add_column(no_wrap=True)
        table.add_column(no_wrap=True)
        table.add_column(ratio=1)
        return table

    def _notes(self, styler):
        notes = Text()
        for note in NOTES:
            notes.append(" • ", styler("notes-dot")).append(note, styler("note")).append("\n")
        notes.rstrip()
        return notes

    def _print(self, *renderables, title=Unset):
        renderable = Group(*renderables)
        if self._fancy:
            renderable = Panel(
                renderable,
                title=Text.assemble("[ ", coalesce(title, self._name).upper(), " ]"),
                title_align="left",
            )
        self._console.print(renderable, highlight=False)

    def print_brief_help(self):
        """
        Print the list of valid commands and a pointer to 'help'.
        """
        styler = self._styler()
        self._print(
            Text.assemble(
                "valid commands: [",
                Text(", ").join(Text(x.name, styler("command-name")) for x in self.commands),
                "]",
            ),
            Text("please use 'help' command to view details"),
        )

    def print_help(self, name=Unset, /):
        """
        Print help for the named command, or for every command when name is Unset.

        An unknown name prints a notice followed by the full help.
        """
        styler = self._styler()
        renders = []
        command = Unset

        if name is not Unset and (command := self.find(name)) is None:
            renders.append(Text("No command found : %s" % name))

        table = self._table()
        for entry in (self.commands if not command else (command,)):
            self._rows(entry, table, styler)

        renders.append(table)
        renders.append(Text(SEPARATOR, styler("separator")))
        renders.append(self._notes(styler))
        self._print(*renders, title=f"{command.name} help" if command else "help")

    def render(self, outcome, /):
        """
        Print an outcome: the padded output, or the grouped faults followed by help.
        """
        if outcome.stage is Stage.UNPARSED:
            return
        if outcome.failed:
            self._console.print(
                CommandExit(outcome.faults, prog=self._name, colorful=self._colorful, fancy=self._fancy),
                highlight=False,
            )
            if outcome.command is None:
                self.print_brief_help()
            else:
                self.print_help(outcome.command.name)
            return
        if outcome.output is not None:
            self._console.print(
                Text("\n".join(PADDING + line for line in outcome.output.split("\n")), self._styler()("output")),
                highlight=False,
            )

    def _help(self, values):
        self.print_help(values.get("command") or Unset)

    def _exit(self, values):
        raise SystemExit(0)

    def _banner(self):
        styler = self._styler()
        self._console.print(Text(SEPARATOR, styler("separator")))
        self._console.print(Text(PADDING + self._name, styler("banner")))
        if self._descr:
            self._console.print(Text(PADDING + self._descr, styler("description")))
        self._console.print(Text(SEPARATOR, styler("separator")))
        self.print_brief_help()

    def _lines(self):
        while True:
            try:
                yield self._console.input(Text(self.prompt))
            except (EOFError, KeyboardInterrupt):
                self._console.print()
                return

    def _step(self, line):
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always", CommandWarning)
            outcome = self.process(line)
        for warning in caught:
            if isinstance(warning.message, CommandWarning):
                self._console.print(
                    warning.message.__replace__(prog=self._name, colorful=self._colorful, fancy=self._fancy),
                    highlight=False,
                )
            else:
                warnings.showwarning(warning.message, warning.category, warning.filename, warning.lineno)
        self.render(outcome)

    def run(self, source=Unset, /):
        """
        Read and process lines until end of input or 'exit'.

        Parameters
        - source: Unset to prompt on the console, or an iterable of lines.

        Returns
        - the exit status: the code passed to 'exit', or 0 at end of input.

        Notes
        - handlers run synchronously; a handler that never returns blocks the loop.
        """
        configure_logging(logging.DEBUG if self._debug else logging.WARNING)
        self._banner()

        for line in (self._lines() if source is Unset else source):
            try:
                self._step(line)
            except SystemExit as exception:
                logger.debug("exiting with %r", exception.code)
                return exception.code
            except Exception as exception:
                self._console.print(Text(f"{PADDING}Error: {_innermost(exception)}"), highlight=False)
                if self._debug:
                    self._console.print_exception()
        return 0


__all__ = (
    "PADDING",
    "NOTES",
    "Outcome",
    "Shell",
    "configure_logging",
)
