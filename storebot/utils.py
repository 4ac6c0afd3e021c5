import re
import unicodedata
from typing import Iterable, List


def normalize_text(text: str) -> str:
    """Purpose: Normalize free-form Spanish text for stable keyword matching.
    Inputs/Outputs: Input is a raw string; output is a lowercase ASCII-only string with
        accents removed and whitespace collapsed.
    Side Effects / State: None; pure function.
    Dependencies: Uses unicodedata and regex; called by the image selector and name filters.
    Failure Modes: Returns an empty string when input is falsy; punctuation is dropped,
        which is intended for matching.
    If Removed: Keyword triggers miss accented forms ("muéstrame", "catálogo").
    Testing Notes: "¿Muéstrame el CATÁLOGO?" -> "muestrame el catalogo".
    """
    # Lowercase and strip diacritics so "fotografía" and "fotografia" match alike.
    if not text:
        return ""
    lowered = str(text).lower()
    decomposed = unicodedata.normalize("NFD", lowered)
    stripped = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    cleaned = re.sub(r"[^a-z0-9\s\-_/.]+", " ", stripped)
    return re.sub(r"\s+", " ", cleaned).strip()


def collapse_whitespace(text: str) -> str:
    """Collapse any run of whitespace into a single space and trim the ends."""
    if not text:
        return ""
    return re.sub(r"\s+", " ", text).strip()


def unique_in_order(values: Iterable[str]) -> List[str]:
    """Purpose: De-duplicate values while keeping first-seen order.
    Inputs/Outputs: Input is any iterable of strings; output is a new list.
    Side Effects / State: None.
    Dependencies: Used for image URL lists.
    Failure Modes: None.
    If Removed: Image responses repeat URLs shared between products.
    Testing Notes: ["a", "b", "a"] -> ["a", "b"].
    """
    seen = set()
    result: List[str] = []
    for value in values:
        if value in seen:
            continue
        seen.add(value)
        result.append(value)
    return result
