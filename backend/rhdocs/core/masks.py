"""Input masks for Brazilian document numbers and phone numbers.

Both masks drop every non-digit character and then re-insert the separators
by position, so partial input renders as a partial mask and already-masked
input comes back unchanged.
"""

from __future__ import annotations

import re

CPF_DIGITS = 11
PHONE_DIGITS = 11

_NON_DIGIT = re.compile(r"\D")


def digits_only(value: str) -> str:
    return _NON_DIGIT.sub("", value)


def format_cpf(value: str) -> str:
    """Render ``value`` as ``ddd.ddd.ddd-dd``."""
    digits = digits_only(value)[:CPF_DIGITS]
    masked = digits[:3]
    if len(digits) > 3:
        masked += "." + digits[3:6]
    if len(digits) > 6:
        masked += "." + digits[6:9]
    if len(digits) > 9:
        masked += "-" + digits[9:]
    return masked


def format_phone(value: str) -> str:
    """Render ``value`` as ``(dd) ddddd-dddd`` (area code + 9-digit mobile)."""
    digits = digits_only(value)[:PHONE_DIGITS]
    if not digits:
        return ""
    masked = "(" + digits[:2]
    if len(digits) > 2:
        masked += ") " + digits[2:7]
    if len(digits) > 7:
        masked += "-" + digits[7:]
    return masked
