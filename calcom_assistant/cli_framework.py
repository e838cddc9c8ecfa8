"""Declarative argparse wiring for the Cal.com CLI.

Provides:
- Command registration via decorators, grouped to any depth
  (``avail override set``)
- Global flags (--json/--output, --timezone, --verbose) accepted before or
  after the subcommand
- Consistent error handling and exit codes
"""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

from .errors import ExitCode, handle_error
from .output import OutputConfig, OutputFormat, OutputWriter

CommandFunc = Callable[[argparse.Namespace], int]


@dataclass
class Argument:
    """Definition of a CLI argument."""
    name_or_flags: tuple
    kwargs: Dict[str, Any] = field(default_factory=dict)


@dataclass
class CommandDef:
    """Definition of a CLI command."""
    name: str
    func: CommandFunc
    help: str = ""
    description: str = ""
    arguments: List[Argument] = field(default_factory=list)


def _add_global_arguments(parser: argparse.ArgumentParser, *, suppress: bool) -> None:
    """Add flags every command accepts.

    Copies on subcommand parsers use SUPPRESS defaults so they never clobber a
    value given before the subcommand.
    """
    def default(value: Any) -> Any:
        return argparse.SUPPRESS if suppress else value

    parser.add_argument(
        "--json",
        dest="output",
        action="store_const",
        const=OutputFormat.JSON.value,
        default=default(OutputFormat.TEXT.value),
        help="Output machine-safe JSON (same as --output json)",
    )
    parser.add_argument(
        "--output", "-o",
        dest="output",
        choices=[f.value for f in OutputFormat],
        default=default(OutputFormat.TEXT.value),
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--timezone",
        default=default(None),
        help="Timezone override for this invocation",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=default(False),
        help="Log HTTP requests to stderr",
    )


class CommandGroup:
    """A group of related commands (e.g. ``booking`` containing ``list``, ``cancel``)."""

    def __init__(self, app: "CLIApp", name: str, *, help: str = "", description: str = ""):
        self.app = app
        self.name = name
        self.help = help
        self.description = description or help
        self._commands: Dict[str, CommandDef] = {}
        self._groups: Dict[str, CommandGroup] = {}

    def group(self, name: str, *, help: str = "", description: str = "") -> "CommandGroup":
        """Create a nested group (e.g. ``avail`` -> ``override``)."""
        sub = CommandGroup(self.app, name, help=help, description=description)
        self._groups[name] = sub
        return sub

    def command(self, name: str, *, help: str = "", description: str = "") -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to register a command in this group."""
        def decorator(func: CommandFunc) -> CommandFunc:
            arguments = list(reversed(self.app._pending_arguments))
            self.app._pending_arguments.clear()
            self._commands[name] = CommandDef(
                name=name,
                func=func,
                help=help,
                description=description or help,
                arguments=arguments,
            )
            return func
        return decorator

    def argument(self, *name_or_flags: str, **kwargs: Any) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to add an argument. Delegates to app."""
        return self.app.argument(*name_or_flags, **kwargs)

    def _build_subparsers(self, parser: argparse.ArgumentParser, path: str) -> None:
        subparsers = parser.add_subparsers(dest=f"{path}_cmd", metavar="<subcommand>")
        parser.set_defaults(_group_parser=parser)

        for group_name, group in self._groups.items():
            group_parser = subparsers.add_parser(group_name, help=group.help, description=group.description)
            group._build_subparsers(group_parser, f"{path}_{group_name}")

        for cmd_name, cmd_def in self._commands.items():
            cmd_parser = subparsers.add_parser(cmd_name, help=cmd_def.help, description=cmd_def.description)
            _add_global_arguments(cmd_parser, suppress=True)
            for arg in cmd_def.arguments:
                cmd_parser.add_argument(*arg.name_or_flags, **arg.kwargs)
            cmd_parser.set_defaults(_cmd_func=cmd_def.func)


class CLIApp:
    """Top-level CLI application.

    Example usage:
        app = CLIApp("calcom", "Cal.com CLI")
        booking = app.group("booking", help="Booking operations")

        @booking.command("list", help="List bookings")
        @booking.argument("--limit", type=int)
        def cmd_list(args):
            ...
            return 0
    """

    def __init__(self, name: str, description: str = "", *, version: Optional[str] = None):
        self.name = name
        self.description = description
        self.version = version
        self._groups: Dict[str, CommandGroup] = {}
        self._pending_arguments: List[Argument] = []
        self._parser: Optional[argparse.ArgumentParser] = None

    def group(self, name: str, *, help: str = "", description: str = "") -> CommandGroup:
        group = CommandGroup(self, name, help=help, description=description)
        self._groups[name] = group
        return group

    def argument(self, *name_or_flags: str, **kwargs: Any) -> Callable[[CommandFunc], CommandFunc]:
        """Decorator to add an argument to the next command.

        Must be used BELOW the @command decorator (decorators apply bottom-up).
        """
        def decorator(func: CommandFunc) -> CommandFunc:
            self._pending_arguments.append(Argument(name_or_flags, kwargs))
            return func
        return decorator

    def build_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog=self.name,
            description=self.description,
            formatter_class=argparse.RawDescriptionHelpFormatter,
        )
        if self.version:
            parser.add_argument("--version", "-V", action="version", version=f"%(prog)s {self.version}")
        _add_global_arguments(parser, suppress=False)

        subparsers = parser.add_subparsers(dest="command", metavar="<command>")
        for group_name, group in self._groups.items():
            group_parser = subparsers.add_parser(group_name, help=group.help, description=group.description)
            group._build_subparsers(group_parser, group_name)

        self._parser = parser
        return parser

    def run(self, argv: Optional[Sequence[str]] = None) -> int:
        """Parse ``argv``, run the selected command and return the exit code."""
        parser = self._parser or self.build_parser()
        args = parser.parse_args(argv)
        configure_logging(args.verbose)

        output_format = OutputFormat(args.output)
        args._output = OutputWriter(OutputConfig(format=output_format))

        cmd_func = getattr(args, "_cmd_func", None)
        if cmd_func is None:
            (getattr(args, "_group_parser", None) or parser).print_help()
            return ExitCode.USAGE

        json_mode = output_format != OutputFormat.TEXT
        try:
            return int(cmd_func(args))
        except KeyboardInterrupt as e:
            return handle_error(e)
        except Exception as e:
            return handle_error(e, json_mode=json_mode, verbose=args.verbose)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
