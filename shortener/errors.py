"""Exception types raised by the URL shortener service and its stores."""

from typing import Optional


class ShortenerError(Exception):
    """Base class for URL shortener errors."""


class ConflictError(ShortenerError):
    """A user-supplied alias is already taken."""

    def __init__(self, short_code: str):
        super().__init__(f"Alias '{short_code}' is already in use")
        self.short_code = short_code


class GenerationExhaustedError(ShortenerError):
    """Every generated candidate collided; the code space looks saturated."""

    def __init__(self, attempts: int):
        super().__init__(f"Failed to generate a unique short code after {attempts} attempts")
        self.attempts = attempts


class NotFoundError(ShortenerError):
    """No resolvable mapping exists for the short code.

    Unknown, disabled and expired codes all raise this error so callers
    cannot tell them apart.
    """

    def __init__(self, short_code: str):
        super().__init__(f"Short code '{short_code}' not found")
        self.short_code = short_code


class CodeGenerationError(ShortenerError):
    """The randomness source failed while generating a short code."""


class StoreError(ShortenerError):
    """A persistence operation failed."""


class UniqueViolationError(StoreError):
    """An insert violated a uniqueness constraint.

    Args:
        constraint_name: Name of the violated constraint, if the store reports it
    """

    def __init__(self, constraint_name: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"Unique constraint violated: {constraint_name}")
        self.constraint_name = constraint_name or ""
