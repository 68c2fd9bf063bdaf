from __future__ import annotations

from unidecode import unidecode

# Typographic punctuation that unidecode renders differently from plain quotes
_PUNCTUATION = str.maketrans(
    {
        "–": "-",
        "—": "-",
        "„": '"',
        "“": '"',
        "”": '"',
        "‘": "'",
        "’": "'",
    }
)

UNTITLED = "Untitled"


def portable_title(text: str) -> str:
    """Map a bookmark title onto printable ASCII.

    Letters are transliterated (``"Žodynas"`` -> ``"Zodynas"``,
    ``"Глава"`` -> ``"Glava"``), characters with no ASCII equivalent are
    dropped, and whitespace runs collapse to a single space. The mapping is
    deterministic and idempotent.
    """
    transliterated = unidecode(text.translate(_PUNCTUATION))
    printable = "".join(ch if ch.isprintable() else " " for ch in transliterated)
    collapsed = " ".join(printable.split())
    return collapsed or UNTITLED


__all__ = ["UNTITLED", "portable_title"]
