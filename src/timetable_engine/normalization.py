"""Token normalization for day names and enumerated course/classroom fields.

Input snapshots come from two naming schemes (English and Turkish), mixed
case and occasional stray whitespace. Everything is folded to a lookup key
before matching so that "Pazartesi", "PAZARTESİ" and " monday " all resolve
to the same value.
"""

import unicodedata

# Turkish dotted/dotless i do not round-trip through str.lower()
_TURKISH_FOLD = str.maketrans({"İ": "i", "I": "i", "ı": "i"})


def fold_token(value: object) -> str:
    """Fold a raw token to a case- and accent-insensitive lookup key.

    Args:
        value: Raw token (day name, type name, category...)

    Returns:
        Lowercase ASCII key with whitespace collapsed, or "" for empty input
    """
    if value is None:
        return ""

    cleaned = str(value).strip().translate(_TURKISH_FOLD).lower()
    decomposed = unicodedata.normalize("NFKD", cleaned)
    ascii_only = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(ascii_only.split())


def build_alias_lookup(aliases: dict[str, tuple[str, ...]]) -> dict[str, str]:
    """Build a folded alias -> canonical value lookup table.

    Args:
        aliases: Mapping of canonical value to its accepted spellings

    Returns:
        Dictionary mapping every folded spelling (canonical included) to
        the canonical value
    """
    lookup: dict[str, str] = {}
    for canonical, spellings in aliases.items():
        lookup[fold_token(canonical)] = canonical
        for spelling in spellings:
            lookup[fold_token(spelling)] = canonical
    return lookup


def normalize_token(value: object, lookup: dict[str, str]) -> str | None:
    """Resolve a raw token against an alias lookup table.

    Returns:
        Canonical value, or None if the token is unknown
    """
    return lookup.get(fold_token(value))
