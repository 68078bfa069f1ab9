"""Quote-aware command-line lexer with typed read-ahead operations."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

OPTION_MARKER = "-"
QUOTE_MARKER = '"'

_INTEGER_PATTERN = re.compile(r"\s*[+-]?[0-9]+\s*")


# Custom exceptions
class CommandLineError(Exception):
    """Base exception for command-line errors.

    The message is always suitable for reporting to the user. When an option
    was in scope the message is prefixed with it.
    """

    def __init__(self, detail: str, option: Optional[str] = None):
        self.detail = detail
        self.option = option or ""
        super().__init__(str(self))

    @property
    def message(self) -> str:
        """The detail, prefixed with the governing option when there is one."""
        return option_error_prefix(self.option) + self.detail

    def __str__(self) -> str:
        return "Command Line Error: " + self.message


class GrammarViolation(CommandLineError):
    """Raised when a token is an option where a value was required, or vice versa."""

    def __init__(self, detail: str, found: str, expected: str, option: Optional[str] = None):
        self.found = found
        self.expected = expected
        super().__init__(detail, option)


class MissingValue(CommandLineError):
    """Raised when the arguments end while a value was expected."""

    pass


class TypeMismatch(CommandLineError):
    """Raised when a token is not an integer."""

    def __init__(self, found: str, option: Optional[str] = None):
        self.found = found
        super().__init__(f'Expected integer; found "{found}".', option)


class UnexpectedArgument(CommandLineError):
    """Raised by the caller for an argument it does not recognize."""

    def __init__(self, found: str, option: Optional[str] = None):
        self.found = found
        super().__init__(f"Unexpected argument: {found}", option)


class InvalidValue(CommandLineError):
    """Raised by the caller for a value it cannot accept."""

    pass


class LexerStateError(RuntimeError):
    """Raised when the current token is read before the first or after the last argument."""

    pass


def option_error_prefix(option: Optional[str]) -> str:
    """Return the error-message prefix for an option context."""
    if not option:
        return ""
    return f'Following Option "{option}" '


class LexerState(Enum):
    """Position of the cursor in the argument list."""

    INITIAL = "initial"
    POSITIONED = "positioned"
    EXHAUSTED = "exhausted"


@dataclass(frozen=True)
class Token:
    """A single classified argument."""

    text: str
    is_option: bool
    is_quoted: bool


def scan(line: str, pos: int) -> tuple[Optional[str], bool, int]:
    """
    Scan the next token starting at pos.

    Rules:
    - Whitespace separates tokens
    - Double quotes (") group a token, and the quotes are removed
    - Two consecutive double quotes inside a quoted token are a literal quote
    - An unterminated quote runs to the end of the line
    - A quoted token ends at its closing quote even if text follows it

    Args:
        line: The full command line
        pos: Index where scanning begins

    Returns:
        Tuple of (token or None at the end of the line, quoted flag, new position)
    """
    line_len = len(line)

    # Skip whitespace
    while pos < line_len and line[pos].isspace():
        pos += 1

    if pos >= line_len:
        return None, False, pos

    if line[pos] == QUOTE_MARKER:
        # Quoted token
        pos += 1
        token_chars = []

        while pos < line_len:
            if line[pos] == QUOTE_MARKER:
                pos += 1
                if pos < line_len and line[pos] == QUOTE_MARKER:
                    # Doubled quote
                    token_chars.append(QUOTE_MARKER)
                    pos += 1
                    continue
                break
            token_chars.append(line[pos])
            pos += 1

        return "".join(token_chars), True, pos

    # Unquoted token
    start = pos
    while pos < line_len and not line[pos].isspace():
        pos += 1

    return line[start:pos], False, pos


def parse_int(text: str) -> Optional[int]:
    """Parse a base-10 integer, returning None when text is not one."""
    if not _INTEGER_PATTERN.fullmatch(text):
        return None
    return int(text)


class CommandLineLexer:
    """
    Reads a command line one argument at a time.

    The application reads the options in sequence and states at each step
    whether it expects an option or a value. Errors name the option that was
    being processed, which keeps error reporting simple for the caller.

    The lexer is sensitive to quoting: -i is an option whereas "-i" is a
    value. This lets filenames that start with a dash be told apart from
    options, so the lexer takes the full command line rather than a list of
    already-split arguments.
    """

    def __init__(self, line: str):
        """
        Initialize the lexer.

        Args:
            line: The full command line. An empty string means no arguments.
        """
        self.line: str = line
        self.reset()

    def reset(self) -> None:
        """Return to the beginning of the command line."""
        self.position: int = 0
        self.state: LexerState = LexerState.INITIAL
        self._current: Optional[str] = None
        self._is_option: bool = False
        self._is_quoted: bool = False
        self._latest_option: str = ""
        self._is_empty = self.line.strip() == ""

    @property
    def is_empty_command_line(self) -> bool:
        """True when the command line holds no arguments at all."""
        return self._is_empty

    @property
    def current(self) -> str:
        """
        The current argument.

        Raises:
            LexerStateError: If called before advance() or after the last argument
        """
        if self.state is LexerState.INITIAL:
            raise LexerStateError("CommandLineLexer: Must call advance() before current.")
        if self.state is LexerState.EXHAUSTED:
            raise LexerStateError("CommandLineLexer: All arguments have been read.")
        return self._current

    @property
    def is_option(self) -> bool:
        """True when the current argument is an option (an unquoted leading dash)."""
        return self._is_option

    @property
    def is_quoted(self) -> bool:
        """True when the current argument was quoted on the command line."""
        return self._is_quoted

    @property
    def token(self) -> Token:
        """The current argument with its classification."""
        return Token(self.current, self._is_option, self._is_quoted)

    @property
    def latest_option(self) -> str:
        """
        The most recent argument that was read as an option.

        Used for error messages only. Assign None or "" to clear it, or any
        other string to report errors against a custom context.
        """
        return self._latest_option

    @latest_option.setter
    def latest_option(self, value: Optional[str]) -> None:
        self._latest_option = value or ""

    @property
    def current_as_int(self) -> int:
        """
        The current argument as an integer.

        Raises:
            TypeMismatch: If the current argument is not an integer
        """
        text = self.current
        value = parse_int(text)
        if value is None:
            raise TypeMismatch(text, self._latest_option)
        return value

    def advance(self) -> bool:
        """
        Move to the next argument.

        Returns:
            True if another argument was read, False at the end of the command line
        """
        self._is_option = False
        self._is_quoted = False

        token, quoted, self.position = scan(self.line, self.position)
        if token is None:
            self._current = None
            self.state = LexerState.EXHAUSTED
            return False

        self._current = token
        self._is_quoted = quoted
        self.state = LexerState.POSITIONED
        if not quoted and token[0] == OPTION_MARKER:
            self._is_option = True
            self._latest_option = token
        return True

    def __iter__(self):
        return self

    def __next__(self) -> str:
        if not self.advance():
            raise StopIteration
        return self._current

    def read_next_arg(self) -> Optional[str]:
        """
        Move to the next argument and return it, whether option or value.

        Returns:
            The next argument, or None at the end of the command line
        """
        if not self.advance():
            return None
        return self._current

    def read_next_option(self) -> Optional[str]:
        """
        Move to the next argument, which must be an option, and return it.

        Running out of arguments is not an error here, which supports
        `while lexer.read_next_option():` loops. Compare read_next_value().

        Returns:
            The next option, or None at the end of the command line

        Raises:
            GrammarViolation: If the next argument is a value
        """
        if not self.advance():
            return None
        if not self._is_option:
            raise GrammarViolation(
                f'Expected option but found argument "{self._current}".',
                found=self._current,
                expected="option",
                option=self._latest_option,
            )
        return self._current

    def read_next_value(self) -> str:
        """
        Move to the next argument, which must be a value, and return it.

        Returns:
            The next value

        Raises:
            MissingValue: If the end of the command line was reached
            GrammarViolation: If the next argument is an option
        """
        # Reading an option overwrites the latest option, so keep the context first
        latest_option = self._latest_option
        if not self.advance():
            raise MissingValue("Expected value but reached end of argument list.", latest_option)
        if self._is_option:
            raise GrammarViolation(
                f'Expected value but found option "{self._current}".',
                found=self._current,
                expected="value",
                option=latest_option,
            )
        return self._current

    def read_next_value_as_int(self) -> int:
        """
        Move to the next argument, which must be an integer value, and return it.

        Raises:
            MissingValue: If the end of the command line was reached
            GrammarViolation: If the next argument is an option
            TypeMismatch: If the next argument is not an integer
        """
        self.read_next_value()
        return self.current_as_int

    def assert_current_is_option(self) -> None:
        """
        Raise GrammarViolation unless the current argument is an option.

        Raises:
            LexerStateError: If there is no current argument
        """
        text = self.current
        if not self._is_option:
            raise GrammarViolation(
                f'Option expected. Found "{text}".',
                found=text,
                expected="option",
                option=self._latest_option,
            )

    def assert_current_is_value(self) -> None:
        """
        Raise GrammarViolation unless the current argument is a value.

        Raises:
            LexerStateError: If there is no current argument
        """
        text = self.current
        if self._is_option:
            raise GrammarViolation(
                f'Value expected. Found "{text}".',
                found=text,
                expected="value",
                option=self._latest_option,
            )

    def throw_unexpected_argument(self) -> None:
        """
        Raise UnexpectedArgument for the current argument.

        Raises:
            LexerStateError: If there is no current argument
        """
        raise UnexpectedArgument(self.current, self._latest_option)

    def throw_value_error(self, detail: str) -> None:
        """Raise InvalidValue with detail, attributed to the latest option."""
        raise InvalidValue(detail, self._latest_option)


def tokenize(line: str) -> list[Token]:
    """
    Split a command line into classified tokens.

    Args:
        line: The command line to split

    Returns:
        List of tokens in command-line order
    """
    lexer = CommandLineLexer(line)
    return [lexer.token for _ in lexer]


def quote(arg: str) -> str:
    """
    Quote an argument so the lexer reads it back as the same value.

    Arguments that contain whitespace, start with a quote or a dash, or are
    empty are wrapped in quotes with embedded quotes doubled.
    """
    if arg and arg[0] not in (QUOTE_MARKER, OPTION_MARKER) and not any(c.isspace() for c in arg):
        return arg
    return QUOTE_MARKER + arg.replace(QUOTE_MARKER, QUOTE_MARKER * 2) + QUOTE_MARKER


def join(args: Iterable[str]) -> str:
    """
    Join an argument vector into a command line.

    Arguments starting with a dash are kept as options; everything else is
    quoted where needed.
    """
    parts = []
    for arg in args:
        if arg[:1] == OPTION_MARKER and not any(c.isspace() for c in arg):
            parts.append(arg)
        else:
            parts.append(quote(arg))
    return " ".join(parts)
