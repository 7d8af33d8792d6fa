"""Short code generation utilities."""

import random
import string
from typing import Optional


MIN_CODE_LENGTH = 6
MAX_CODE_LENGTH = 8


class ShortCodeGenerator:
    """Generate random short codes."""

    # Base62 characters (alphanumeric, case-sensitive)
    BASE62_CHARS = string.ascii_letters + string.digits  # a-zA-Z0-9

    def __init__(self, default_length: int = MIN_CODE_LENGTH, rng: Optional[random.Random] = None):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes (6-8)
            rng: Optional random source, mainly for deterministic tests
        """
        if not MIN_CODE_LENGTH <= default_length <= MAX_CODE_LENGTH:
            raise ValueError(
                f"Code length must be between {MIN_CODE_LENGTH} and {MAX_CODE_LENGTH}, got {default_length}"
            )
        self.default_length = default_length
        self._rng = rng or random.SystemRandom()

    def generate_random(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code
        """
        length = length or self.default_length
        return ''.join(self._rng.choices(self.BASE62_CHARS, k=length))

    @staticmethod
    def is_valid_format(code: str) -> bool:
        """Check if code has valid format (6-8 alphanumeric characters)."""
        return (
            MIN_CODE_LENGTH <= len(code) <= MAX_CODE_LENGTH
            and all(c in ShortCodeGenerator.BASE62_CHARS for c in code)
        )
