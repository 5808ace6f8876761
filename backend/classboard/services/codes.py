"""
Code Generator Service - Produces identifiers for classrooms, students and sessions.

Implements:
1. Classroom ids derived from the classroom name (CLS-<SLUG>)
2. 4-digit student access codes, unique within one classroom
3. Opaque teacher tokens and prefixed random ids

Classroom ids are deterministic: two names that produce the same slug
collide, and the store rejects the second one instead of suffixing it.
Tokens and ids are random enough that collisions are not re-checked.
"""

import re
import secrets

from classboard.config import (
    CLASSROOM_ID_PREFIX, CLASSROOM_SLUG_MAX_LENGTH,
    ACCESS_CODE_MIN, ACCESS_CODE_MAX, ACCESS_CODE_MAX_ATTEMPTS
)
from classboard.errors import InvalidInput, CapacityExceeded
from classboard.logging_config import get_logger, log_with_context

logger = get_logger("store")

_WHITESPACE_RUN = re.compile(r"\s+")
_INVALID_SLUG_CHARS = re.compile(r"[^A-Z0-9-]")

ACCESS_CODE_SPACE = ACCESS_CODE_MAX - ACCESS_CODE_MIN + 1


def derive_classroom_id(name: str) -> str:
    """
    Derive the classroom id from its display name.

    Rules applied:
    1. Trim and convert to uppercase
    2. Replace each whitespace run with a single hyphen
    3. Drop every character outside [A-Z0-9-]
    4. Truncate to 25 characters and prefix with "CLS-"

    Example: "Math 4B" -> "CLS-MATH-4B"

    Raises:
        InvalidInput: if nothing is left after stripping
    """
    slug = _WHITESPACE_RUN.sub("-", (name or "").strip().upper())
    slug = _INVALID_SLUG_CHARS.sub("", slug)[:CLASSROOM_SLUG_MAX_LENGTH]
    if not slug:
        raise InvalidInput("The classroom name contains no usable characters.")
    return f"{CLASSROOM_ID_PREFIX}-{slug}"


def _random_access_code() -> str:
    return str(ACCESS_CODE_MIN + secrets.randbelow(ACCESS_CODE_SPACE))


def generate_access_code(existing_codes: set) -> str:
    """
    Draw a random 4-digit access code ("1000"-"9999") not in existing_codes.

    Random draws are retried up to ACCESS_CODE_MAX_ATTEMPTS times. A crowded
    classroom that exhausts the attempts gets a code picked uniformly among
    the remaining free ones, so the call always terminates.

    Raises:
        CapacityExceeded: if all 9000 codes are taken
    """
    taken = set(existing_codes)
    if len(taken & _all_codes()) >= ACCESS_CODE_SPACE:
        raise CapacityExceeded()

    for _ in range(ACCESS_CODE_MAX_ATTEMPTS):
        code = _random_access_code()
        if code not in taken:
            return code

    free_codes = sorted(_all_codes() - taken)
    log_with_context(logger, "WARNING",
        "Access code retries exhausted, picking among {} free codes".format(len(free_codes)),
        extra_data={"taken": len(taken)})
    return secrets.choice(free_codes)


def _all_codes() -> set:
    return {str(n) for n in range(ACCESS_CODE_MIN, ACCESS_CODE_MAX + 1)}


def generate_token() -> str:
    """Opaque teacher token: 16 random bytes as 32 hex characters."""
    return secrets.token_hex(16)


def generate_id(prefix: str) -> str:
    """Random id such as S-1A2B3C4D."""
    return f"{prefix}-{secrets.token_hex(4).upper()}"
