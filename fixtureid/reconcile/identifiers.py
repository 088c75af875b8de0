"""Fresh fixture identifier generation."""

from __future__ import annotations

import random
import string

FIXTURE_ID_ALPHABET = string.ascii_uppercase + string.digits
FIXTURE_ID_LENGTH = 10


def generate_fixture_id(
    length: int = FIXTURE_ID_LENGTH, rng: random.Random | None = None
) -> str:
    """Generate a random uppercase alphanumeric fixture id.

    Not cryptographically secure and not checked against existing ids; at
    36^10 combinations collisions within one store are negligible.

    Args:
        length: Number of characters (default 10)
        rng: Optional Random instance for reproducible ids

    Returns:
        Fixture id such as "7QK2M0ZB4X"
    """
    chooser = rng or random
    return "".join(chooser.choices(FIXTURE_ID_ALPHABET, k=length))
