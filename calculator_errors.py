from typing import Optional


# ==================== Exceptions ====================

class CalculatorError(Exception):
    """Base class for errors reported back to the menu"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(CalculatorError, ValueError):
    """Input is malformed or out of range; nothing was stored"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field

    def __repr__(self) -> str:
        return f"ValidationError(field={self.field!r}, message={self.message!r})"


class EmptyStateError(CalculatorError, LookupError):
    """Operation needs a stored record but none exists"""

    def __repr__(self) -> str:
        return f"EmptyStateError({self.message!r})"
