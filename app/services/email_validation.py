"""Conservative email address and display-name hardening."""

import re

EMAIL_MIN_LEN = 6
EMAIL_MAX_LEN = 254
DISPLAY_NAME_MAX_LEN = 120

_EMAIL_RE = re.compile(r"[A-Za-z0-9.!#$%&*+/=?^_`{|}~-]+@[A-Za-z0-9-]+(\.[A-Za-z0-9-]+)+")
_CRLF_RE = re.compile(r"[\r\n]")
# Quotes, angle brackets and whitespace make address parsing ambiguous.
_AMBIGUOUS_RE = re.compile(r"[<>\"'\s]")


def is_safe_email_address(value: object) -> bool:
    """
    Return True only for plain local@domain.tld addresses.

    Rejects non-strings, lengths outside 6..254, surrounding whitespace, CR/LF
    (header injection), quotes, angle brackets and any embedded whitespace.
    """
    if not isinstance(value, str):
        return False
    trimmed = value.strip()
    if len(trimmed) < EMAIL_MIN_LEN or len(trimmed) > EMAIL_MAX_LEN:
        return False
    if trimmed != value:
        return False
    if _CRLF_RE.search(value):
        return False
    if _AMBIGUOUS_RE.search(value):
        return False
    return _EMAIL_RE.fullmatch(value) is not None


def safe_display_name(value: object) -> str:
    """Strip CR/LF and angle brackets from a display name and cap its length."""
    text = "" if value is None else str(value)
    text = _CRLF_RE.sub(" ", text)
    text = text.replace("<", "").replace(">", "")
    return text.strip()[:DISPLAY_NAME_MAX_LEN]
