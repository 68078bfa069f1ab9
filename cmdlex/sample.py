"""Sample command grammar built on the command-line lexer.

A command line is a command word followed by option/value pairs, for example:

    Convert -File "my photo.jpg" -Num 4 -Name thumbnail
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

import toml

from .lexer import CommandLineLexer


class OptionKind(Enum):
    """What follows an option on the command line."""

    VALUE = "value"
    INT = "int"
    FLAG = "flag"


class InvalidSchema(Exception):
    """Raised when a schema file cannot be used."""

    pass


DEFAULT_SCHEMA: dict[str, OptionKind] = {
    "-File": OptionKind.VALUE,
    "-Num": OptionKind.INT,
    "-Name": OptionKind.VALUE,
}


@dataclass
class SampleCommand:
    """The result of parsing one command line."""

    command: Optional[str]
    values: dict[str, Union[str, int, bool]] = field(default_factory=dict)


def load_schema(path: str) -> dict[str, OptionKind]:
    """
    Load the accepted options from a TOML file.

    The file holds an [options] table mapping option names to kinds:

        [options]
        "-File" = "value"
        "-Num" = "int"
        "-Verbose" = "flag"

    Args:
        path: Path to the TOML file

    Returns:
        Mapping of option name to OptionKind

    Raises:
        InvalidSchema: If the file is unreadable or malformed
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = toml.load(f)
    except (OSError, toml.TomlDecodeError) as e:
        raise InvalidSchema(f"Cannot read schema '{path}': {e}")

    options = content.get("options")
    if not isinstance(options, dict):
        raise InvalidSchema(f"Schema '{path}' has no [options] table")

    schema = {}
    for name, kind in options.items():
        if not name.startswith("-"):
            raise InvalidSchema(f"Option '{name}' must start with '-'")
        try:
            schema[name] = OptionKind(kind)
        except ValueError:
            raise InvalidSchema(f"Option '{name}' has unknown kind '{kind}'")
    return schema


def parse_sample(
    lexer: CommandLineLexer, schema: Optional[dict[str, OptionKind]] = None
) -> SampleCommand:
    """
    Parse a command word followed by options.

    Args:
        lexer: Lexer positioned before the command word
        schema: Accepted options; DEFAULT_SCHEMA when omitted

    Returns:
        The parsed command. command is None for an empty command line.

    Raises:
        CommandLineError: If the command line does not fit the schema
    """
    if schema is None:
        schema = DEFAULT_SCHEMA

    result = SampleCommand(command=lexer.read_next_arg())
    if result.command is None:
        return result
    lexer.assert_current_is_value()

    while lexer.advance():
        lexer.assert_current_is_option()
        option = lexer.current
        kind = schema.get(option)

        if kind is OptionKind.VALUE:
            result.values[option] = lexer.read_next_value()
        elif kind is OptionKind.INT:
            result.values[option] = lexer.read_next_value_as_int()
        elif kind is OptionKind.FLAG:
            result.values[option] = True
        else:
            lexer.throw_unexpected_argument()

    return result
