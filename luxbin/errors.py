from typing import Any, Optional, Union


class LuxbinError(Exception):
    """Exception type used to propagate every error that ends a Luxbin run.

    `kind` names the failure class (``UndefinedVariable``, ``TypeError``,
    ``DivisionByZero``...). The message is the one-line text reported to
    the host.
    """
    def __init__(self, kind: str, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


class LexError(LuxbinError):
    def __init__(self, message: str, line: int, column: int):
        super().__init__('LexError', message)
        self.line = line
        self.column = column


class ParseError(LuxbinError):
    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        super().__init__('ParseError', message)
        self.line = line
        self.column = column


class ReturnSignal:
    """Carries a `return` value up through block execution to the enclosing call."""
    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"


class BreakSignal:
    def __repr__(self) -> str:
        return 'BREAK'


class ContinueSignal:
    def __repr__(self) -> str:
        return 'CONTINUE'


BREAK = BreakSignal()
CONTINUE = ContinueSignal()

Signal = Union[ReturnSignal, BreakSignal, ContinueSignal]
