"""Caret exception hierarchy.

All caret exceptions inherit from CaretError and support cause chaining.
Completion itself never raises for user input; these cover library misuse
and broken grammar definitions.
"""


class CaretError(Exception):
    """Base exception for all caret errors.

    Wraps original errors as __cause__ for proper exception chaining.
    """

    def __init__(self, message: str, cause: Exception | None = None):
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause


class GrammarError(CaretError):
    """Raised when a grammar definition cannot be compiled.

    Examples: reduce/reduce conflicts, undefined terminals,
    a missing grammar file.
    """

    def __init__(
        self,
        message: str,
        *,
        grammar: str = "",
        cause: Exception | None = None,
    ):
        super().__init__(message, cause=cause)
        self.grammar = grammar


class UnknownLanguageError(CaretError):
    """Raised when a language name or file extension has no registered support."""

    def __init__(self, message: str, *, name: str = "", cause: Exception | None = None):
        super().__init__(message, cause=cause)
        self.name = name
