"""Text cleanup for the APD listing.

The upstream API returns part of its text as UTF-8 that was decoded as
cp1252/latin-1 somewhere along the way ("EducaciÃ³n" instead of "Educación").
The cleanup first tries to undo that with a real re-decode and only then falls
back to a substitution table for the fragments a re-decode cannot recover.
"""
import logging
import re
from typing import Any, List, Tuple

logger = logging.getLogger(__name__)

# Applied in order; later entries pick up leftovers of earlier partial matches
ENCODING_FIXES: List[Tuple[str, str]] = [
    ("Ã¡", "á"), ("Ã©", "é"), ("Ã­", "í"), ("Ã³", "ó"), ("Ãº", "ú"),
    ("ÃÀ", "Á"), ("ÃÉ", "É"), ("ÃÍ", "Í"), ("ÃÓ", "Ó"), ("ÃÚ", "Ú"),
    ("Ã±", "ñ"), ("ÃÑ", "Ñ"), ("ÂÑ", "Ñ"), ("Ãñ", "ñ"),
    ("Ãí", "í"), ("Ãá", "á"), ("ÃÁ", "Á"),
    ("Â¡", "¡"), ("Â¿", "¿"), ("Ã¼", "ü"), ("Ãœ", "Ü"),
    ("Â°", "°"), ("º", "°"), ("Ã°", "°"), ("Ã‚Â°", "°"), ("Ãº°", "°"),
    ("Ã", ""), ("Â", ""),
    ("â€¢", "•"), ("â€“", "–"), ("â€", "€"), ("â„¢", "™"),
]

MOJIBAKE_MARKERS = ("Ã", "Â", "â€")

REPLACEMENT_CHAR = "�"

# Printable ASCII, Spanish accented letters, ¡¿, degree sign and whitespace
DISALLOWED_CHARS = re.compile(r"[^\x20-\x7EáéíóúñÁÉÍÓÚÑ¡¿üÜ°\s]")

DIGITS_LETTER = re.compile(r"\A([0-9]+)([A-Za-z])\Z")


def _redecode(value: str) -> str:
    """Undo a UTF-8 → cp1252/latin-1 misdecode, or return the input unchanged"""
    if not any(marker in value for marker in MOJIBAKE_MARKERS):
        return value
    for charset in ("cp1252", "latin-1"):
        try:
            repaired = value.encode(charset).decode("utf-8")
        except (UnicodeEncodeError, UnicodeDecodeError):
            continue
        # Only trust a re-decode that lands inside the allowed alphabet
        if not DISALLOWED_CHARS.search(repaired):
            return repaired
    return value


def fix_encoding(value: Any) -> str:
    """Repair known mojibake and drop characters outside the allow-list"""
    if not value or not isinstance(value, str):
        return ""

    fixed = _redecode(value)
    for wrong, correct in ENCODING_FIXES:
        fixed = fixed.replace(wrong, correct)

    fixed = fixed.replace(REPLACEMENT_CHAR, "")
    fixed = DISALLOWED_CHARS.sub("", fixed)

    # Course/division codes: "5A" -> "5 A"
    fixed = DIGITS_LETTER.sub(r"\1 \2", fixed)

    if fixed != value:
        logger.debug(f"📝 Texto corregido: {value!r} -> {fixed!r}")
    return fixed


def clean_string(value: Any) -> str:
    """Trim and repair a free-text field from the API"""
    if not value or not isinstance(value, str):
        return ""
    return fix_encoding(value.strip())
