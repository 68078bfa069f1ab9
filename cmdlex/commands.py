"""Command-line interface handler for cmdlex."""

import sys
import json
import argparse
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from . import lexer
from . import sample

console = Console()
err_console = Console(stderr=True)


@dataclass
class LineError:
    """Represents a failure while checking a file of command lines."""

    message: str
    line_num: int
    path: str


def print_usage() -> None:
    """Print usage information."""
    print("""Usage: cmdlex [-h | --help] <command> [<args>]

Commands:
  tokens                   List the classified tokens of a command line
      -c, --line STR       The raw command line to tokenize
      --json               Print JSON lines instead of a table
      -- <words>...        Arguments re-joined into a command line when --line is absent

  sample                   Parse a command line with the sample grammar
      -c, --line STR       The raw command line to parse
      -s, --schema FILE    TOML file declaring the accepted options
      -- <words>...        Arguments re-joined into a command line when --line is absent

  check                    Parse every line of a file with the sample grammar
      -s, --schema FILE    TOML file declaring the accepted options
      <file>               File with one command line per line (# starts a comment)

  help                     Show this help message
  version                  Show program version
""")


def print_version() -> None:
    """Print version information."""
    print("1.0")


def invocation_line(argv: Optional[list[str]] = None) -> str:
    """
    Rebuild a command line from an argument vector.

    Args:
        argv: Arguments without the program name; sys.argv[1:] when omitted

    Returns:
        A command line the lexer reads back as the same arguments
    """
    if argv is None:
        argv = sys.argv[1:]
    return lexer.join(argv)


def source_line(args: argparse.Namespace) -> str:
    """Get the command line selected by --line or the trailing words."""
    if args.line is not None:
        return args.line
    return invocation_line(args.words)


def selected_schema(args: argparse.Namespace) -> dict[str, sample.OptionKind]:
    """Get the schema from --schema, or the default schema."""
    if not args.schema:
        return sample.DEFAULT_SCHEMA
    try:
        return sample.load_schema(args.schema)
    except sample.InvalidSchema as e:
        err_console.print(f"Error: {e}", style="red", markup=False)
        sys.exit(1)


def cmd_tokens(args: argparse.Namespace) -> None:
    """Execute the tokens command."""
    tokens = lexer.tokenize(source_line(args))

    if args.json:
        for token in tokens:
            row = {"text": token.text, "option": token.is_option, "quoted": token.is_quoted}
            print(json.dumps(row, separators=(",", ":")))
        return

    if not tokens:
        console.print("[yellow]Empty command line[/yellow]")
        return

    table = Table()
    table.add_column("#", justify="right", style="dim")
    table.add_column("Token")
    table.add_column("Kind")
    table.add_column("Quoted")
    for i, token in enumerate(tokens, 1):
        kind = "[magenta]option[/magenta]" if token.is_option else "[green]value[/green]"
        table.add_row(str(i), Text(token.text), kind, "yes" if token.is_quoted else "")
    console.print(table)


def cmd_sample(args: argparse.Namespace) -> None:
    """Execute the sample command."""
    schema = selected_schema(args)

    try:
        result = sample.parse_sample(lexer.CommandLineLexer(source_line(args)), schema)
    except lexer.CommandLineError as e:
        err_console.print(str(e), style="red", markup=False, highlight=False)
        sys.exit(1)

    if result.command is None:
        console.print("[yellow]Empty command line[/yellow]")
        return

    console.print(f"[magenta]┃[/magenta] command  {escape(result.command)}", highlight=False)
    for option, value in result.values.items():
        console.print(f"[magenta]┃[/magenta] {escape(option):<8} {escape(repr(value))}", highlight=False)


def check_file(path: str, schema: dict[str, sample.OptionKind]) -> tuple[int, list[LineError]]:
    """
    Parse every command line in a file.

    Args:
        path: File with one command line per line
        schema: Accepted options

    Returns:
        Tuple of (number of command lines checked, errors found)

    Raises:
        OSError: If the file cannot be read
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    checked = 0
    errors = []
    for line_num, line in enumerate(content.split("\n"), start=1):
        stripped = line.lstrip()
        # Skip comments and blank lines
        if len(stripped) == 0 or stripped[0] == "#":
            continue

        checked += 1
        try:
            sample.parse_sample(lexer.CommandLineLexer(line), schema)
        except lexer.CommandLineError as e:
            message = f"{type(e).__name__}: {e.message}"
            errors.append(LineError(message=message, line_num=line_num, path=path))

    return checked, errors


def cmd_check(args: argparse.Namespace) -> None:
    """Execute the check command."""
    if not args.file:
        print("Please specify a file to check\n", file=sys.stderr)
        print_usage()
        sys.exit(1)

    schema = selected_schema(args)

    try:
        checked, errors = check_file(args.file, schema)
    except OSError as e:
        err_console.print(f"Error: Cannot read '{args.file}': {e}", style="red", markup=False)
        sys.exit(1)

    if errors:
        for error in errors:
            print(f"{error.path}:{error.line_num}: error.{error.message}", file=sys.stderr)
        sys.exit(1)

    console.print(f"[green]✓ {checked} command lines OK[/green]")


def add_line_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the arguments that select the command line to read."""
    parser.add_argument("-c", "--line", type=str, help="Raw command line")
    parser.add_argument("words", nargs="*", help="Arguments to re-join, after --")


def main() -> None:
    """Main entry point for the CLI."""
    parser = argparse.ArgumentParser(description="Command-line lexer tool", add_help=False)

    # Add global help
    parser.add_argument("-h", "--help", action="store_true", help="Show help message")

    # Add subparsers for commands
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Tokens command
    tokens_parser = subparsers.add_parser("tokens", add_help=False)
    tokens_parser.add_argument("-h", "--help", action="store_true", help="Show help for tokens")
    tokens_parser.add_argument("--json", action="store_true", help="Print JSON lines")
    add_line_arguments(tokens_parser)

    # Sample command
    sample_parser = subparsers.add_parser("sample", add_help=False)
    sample_parser.add_argument("-h", "--help", action="store_true", help="Show help for sample")
    sample_parser.add_argument("-s", "--schema", type=str, help="TOML schema file")
    add_line_arguments(sample_parser)

    # Check command
    check_parser = subparsers.add_parser("check", add_help=False)
    check_parser.add_argument("-h", "--help", action="store_true", help="Show help for check")
    check_parser.add_argument("-s", "--schema", type=str, help="TOML schema file")
    check_parser.add_argument("file", nargs="?", help="File of command lines")

    # Help command
    subparsers.add_parser("help", add_help=False)

    # Version command
    subparsers.add_parser("version", add_help=False)

    # Parse arguments
    if len(sys.argv) < 2:
        print_usage()
        return

    args = parser.parse_args()

    # Handle global and command-specific help
    if args.help or args.command == "help":
        print_usage()
        return

    # Handle version
    if args.command == "version":
        print_version()
        return

    # Execute commands
    if args.command == "tokens":
        cmd_tokens(args)
    elif args.command == "sample":
        cmd_sample(args)
    elif args.command == "check":
        cmd_check(args)
    else:
        print_usage()
