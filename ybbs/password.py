"""Random string generation."""

from __future__ import annotations

import secrets
import string

LETTERS = string.ascii_lowercase + string.ascii_uppercase + string.digits


def rand_string(n: int) -> str:
    """Random string of ``n`` letters and digits; empty when ``n`` is not positive."""
    return "".join(secrets.choice(LETTERS) for _ in range(max(n, 0)))