"""Phone numbers — E.164 normalisation for outbound SMS."""

import re

_NON_DIGITS = re.compile(r"\D")


def normalize_e164(raw: str | None) -> str | None:
    """Return +<digits> or None when the input cannot be a dialable number.

    10 digits are taken as a North American number; 11 digits starting with 1
    already carry the country code; an explicit + accepts 8-15 digits.
    """
    if not raw:
        return None
    text = raw.strip()
    digits = _NON_DIGITS.sub("", text)
    if text.startswith("+"):
        return f"+{digits}" if 8 <= len(digits) <= 15 else None
    if len(digits) == 10:
        return f"+1{digits}"
    if len(digits) == 11 and digits.startswith("1"):
        return f"+{digits}"
    return None
