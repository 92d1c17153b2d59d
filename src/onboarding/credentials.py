"""
One-time password for newly created student accounts.

The password is shown to the applicant once and then changed by them, so the
module only guarantees uniform draws from the alphabet, not secrecy.
"""

import random
import string
from typing import Optional

DEFAULT_LENGTH = 12
DEFAULT_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "!@#$%^&*"


def generate_password(
    length: int = DEFAULT_LENGTH,
    alphabet: str = DEFAULT_ALPHABET,
    rng: Optional[random.Random] = None,
) -> str:
    if length <= 0:
        raise ValueError("length must be positive")
    if not alphabet:
        raise ValueError("alphabet must not be empty")
    rng = rng or random
    return "".join(rng.choice(alphabet) for _ in range(length))
