"""
Random numeric identifiers used as account numbers.
"""

import random
from typing import Optional

DIGITS = "0123456789"


def generate_numeric_id(length: int, rng: Optional[random.Random] = None) -> str:
    """
    Generate a string of random decimal digits.

    Each character is drawn independently and uniformly from DIGITS,
    so leading zeros are allowed.

    Args:
        length: Number of digits to generate
        rng: Optional random source (defaults to the module-level generator)

    Returns:
        String of exactly ``length`` digits
    """
    source = rng or random
    return "".join(source.choice(DIGITS) for _ in range(length))
