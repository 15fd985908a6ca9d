"""Short code generation utilities."""

import secrets
import string

from .errors import CodeGenerationError


class ShortCodeGenerator:
    """Generate random short codes for URLs.

    Codes act as access tokens for unlisted URLs, so they are drawn from the
    OS CSPRNG and must not be predictable. Uniqueness is not checked here;
    the store's constraint enforces it.
    """

    # Base62 characters (digits, upper case, lower case)
    BASE62_CHARS = string.digits + string.ascii_uppercase + string.ascii_lowercase

    # Characters accepted in user-supplied aliases
    ALIAS_CHARS = frozenset(BASE62_CHARS + "-_")

    def __init__(self, length: int = 7):
        """Initialize short code generator.

        Args:
            length: Length of every generated code
        """
        if length < 1:
            raise ValueError("Short code length must be positive")
        self.length = length

    def generate(self) -> str:
        """Generate a random short code.

        Returns:
            Random code of exactly ``self.length`` base62 characters

        Raises:
            CodeGenerationError: If the randomness source fails
        """
        try:
            return "".join(secrets.choice(self.BASE62_CHARS) for _ in range(self.length))
        except OSError as e:
            raise CodeGenerationError(f"Randomness source failed: {e}") from e

    @classmethod
    def is_valid_format(cls, code: str) -> bool:
        """Check if code only uses alias characters (alphanumeric, '-', '_')."""
        return bool(code) and all(c in cls.ALIAS_CHARS for c in code)
