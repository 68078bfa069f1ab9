"""Quote-aware command-line lexer."""

from .lexer import (
    CommandLineError,
    CommandLineLexer,
    GrammarViolation,
    InvalidValue,
    LexerState,
    LexerStateError,
    MissingValue,
    Token,
    TypeMismatch,
    UnexpectedArgument,
    join,
    quote,
    tokenize,
)
