"""Short code generation utilities."""

import random
import secrets
import string
from typing import Optional


# Lowercase letters and digits, as shipped in the reference configuration
DEFAULT_ALPHABET = string.ascii_lowercase + string.digits
DEFAULT_LENGTH = 6


def _normalize_alphabet(alphabet: str) -> str:
    """Collapse duplicate characters, keeping first-seen order."""
    return "".join(dict.fromkeys(alphabet))


def generate_code(
    alphabet: str,
    length: int,
    rng: Optional[random.Random] = None,
) -> str:
    """Draw ``length`` characters uniformly, with replacement, from ``alphabet``.

    Args:
        alphabet: Characters to draw from
        length: Number of characters in the code
        rng: Optional random source (module-level ``random`` if not given)

    Returns:
        Random short code
    """
    chars = _normalize_alphabet(alphabet)
    if not chars:
        raise ValueError("Alphabet must contain at least one character")
    if length < 1:
        raise ValueError("Code length must be at least 1")

    source = rng or random
    return "".join(source.choices(chars, k=length))


class ShortCodeGenerator:
    """Generate fixed-length random short codes.

    The generator knows nothing about codes already in use; uniqueness is
    enforced by the caller against the link store.
    """

    def __init__(
        self,
        alphabet: str = DEFAULT_ALPHABET,
        length: int = DEFAULT_LENGTH,
        secure: bool = False,
        rng: Optional[random.Random] = None,
    ):
        """Initialize short code generator.

        Args:
            alphabet: Characters codes are drawn from
            length: Length of every generated code
            secure: Use the OS CSPRNG instead of the Mersenne Twister
            rng: Explicit random source (overrides ``secure``), mostly for tests
        """
        self.alphabet = _normalize_alphabet(alphabet)
        self.length = length

        if not self.alphabet:
            raise ValueError("Alphabet must contain at least one character")
        if self.length < 1:
            raise ValueError("Code length must be at least 1")

        if rng is not None:
            self._rng = rng
        elif secure:
            self._rng = secrets.SystemRandom()
        else:
            self._rng = random.Random()
        self.secure = secure and rng is None

    @property
    def code_space(self) -> int:
        """Number of distinct codes this generator can produce."""
        return len(self.alphabet) ** self.length

    def generate(self) -> str:
        """Generate a random short code.

        Returns:
            Random short code of exactly ``self.length`` characters
        """
        return generate_code(self.alphabet, self.length, rng=self._rng)

    def is_valid_format(self, code: str) -> bool:
        """Check if code could have been produced by this generator.

        Args:
            code: Code to validate

        Returns:
            True if length and every character match the configuration
        """
        if not isinstance(code, str) or len(code) != self.length:
            return False
        return all(c in self.alphabet for c in code)
