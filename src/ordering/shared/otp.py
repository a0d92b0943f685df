"""One-time code generation.

Codes are numeric strings drawn from the operating system's CSPRNG. The
generator is stateless: callers store the code and its expiry on whatever
record the code protects, and compare against that record only.
"""

import secrets
from datetime import datetime, timedelta

from ordering.shared.policy import VERIFICATION_CODE_LENGTH
from ordering.utils import clock


def generate_code(length: int = VERIFICATION_CODE_LENGTH) -> str:
    """Return a uniformly distributed numeric code of exactly ``length`` digits.

    Leading zeros are kept, so "004211" is a valid six digit code.
    """
    if length <= 0:
        raise ValueError("Code length must be positive")
    return f"{secrets.randbelow(10**length):0{length}d}"


def expiry_at(minutes: int, now: datetime | None = None) -> datetime:
    """Return the absolute time ``minutes`` from ``now`` (defaults to the current time)."""
    return (now or clock.utc_now()) + timedelta(minutes=minutes)


def code_matches(stored: str | None, supplied: str | None) -> bool:
    """Constant-time, exact comparison of a stored code against user input.

    Any text is accepted; non-numeric or padded input simply fails to match.
    """
    if not stored or not supplied:
        return False
    return secrets.compare_digest(stored.encode("utf-8"), supplied.encode("utf-8"))
