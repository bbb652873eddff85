from dataclasses import dataclass

# Error kinds reported by the runtime.
UNDECLARED_VARIABLE = 'UndeclaredVariable'
DUPLICATE_DECLARATION = 'DuplicateDeclaration'
TYPE_MISMATCH = 'TypeMismatch'
UNDECLARED_FUNCTION = 'UndeclaredFunction'
ARITY_MISMATCH = 'ArityMismatch'
MISSING_RETURN = 'MissingReturn'
EMPTY_RETURN = 'EmptyReturn'
INVALID_OPERATION = 'InvalidOperation'
DIVISION_BY_ZERO = 'DivisionByZero'
OVERFLOW = 'Overflow'
STACK_OVERFLOW = 'StackOverflow'


@dataclass
class ErrorVal:
    """A runtime failure: the error kind plus a human readable message."""
    name: str
    message: str

    def __repr__(self) -> str:
        return f"Error(name={self.name!r}, message={self.message!r})"


class MiniError(Exception):
    """Exception type used to propagate MiniLang runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err

    @property
    def kind(self) -> str:
        return self.err.name


class ParseError(Exception):
    """Raised by the front end when the source text is not valid MiniLang."""
    def __init__(self, message: str, line: int = 0, column: int = 0):
        super().__init__(f"{message} at {line}:{column}" if line else message)
        self.line = line
        self.column = column
