"""Query text cleanup for provider searches.

Hey future me - track lists come from pasted show notes, so artist and track names
arrive wrapped in every quote style imaginable: "straight", “curly”, «guillemets»,
„low-nines“ and 「CJK brackets」. Both YouTube and Discogs choke on those (Discogs
treats them as phrase operators, YouTube just returns worse hits), so we strip them
all before building a query.

Examples:
    >>> clean_query_text('  “Bonobo”   ')
    'Bonobo'
    >>> normalize_artist_name("The Cinematic Orchestra feat. Fontella Bass")
    'Cinematic Orchestra'
"""

import re

# Straight, curly, low-nine, angle and CJK quote marks plus the backtick.
QUOTE_CHARACTERS = "\"'`“”„‟‘’‚‛«»‹›「」『』"

_QUOTE_PATTERN = re.compile(f"[{re.escape(QUOTE_CHARACTERS)}]")
_WHITESPACE_PATTERN = re.compile(r"\s+")
_LEADING_ARTICLE_PATTERN = re.compile(r"^(the|a|an)\s+", re.IGNORECASE)
_FEATURING_PATTERN = re.compile(
    r"\s+(feat\.?|featuring|ft\.?|with)\s+.+$", re.IGNORECASE
)
_REMIX_SUFFIX_PATTERN = re.compile(r"\s+\(.*(remix|mix|edit).*\)$", re.IGNORECASE)


def collapse_whitespace(value: str) -> str:
    """Collapse whitespace runs to single spaces and trim."""
    return _WHITESPACE_PATTERN.sub(" ", value).strip()


def clean_query_text(value: str | None) -> str:
    """Strip all quote variants, collapse whitespace, trim.

    Args:
        value: Raw artist or track text (None is treated as empty)

    Returns:
        Cleaned text, possibly empty
    """
    if not value:
        return ""
    return collapse_whitespace(_QUOTE_PATTERN.sub("", value))


def build_search_query(*parts: str | None) -> str:
    """Clean each part and join the non-empty ones with a space."""
    cleaned = (clean_query_text(part) for part in parts)
    return " ".join(part for part in cleaned if part)


def normalize_artist_name(name: str) -> str:
    """Reduce an artist credit to the main artist for Discogs lookups.

    Drops a leading article, any featuring/with credit and a trailing
    "(... Remix)" style parenthetical. Only used for single-track enhancement,
    batch runs key Discogs lookups on the lower-cased raw name.

    Args:
        name: Artist credit as written in the track list

    Returns:
        Normalized name (falls back to the cleaned input if everything was stripped)
    """
    cleaned = clean_query_text(name)
    normalized = _LEADING_ARTICLE_PATTERN.sub("", cleaned)
    normalized = _FEATURING_PATTERN.sub("", normalized)
    normalized = _REMIX_SUFFIX_PATTERN.sub("", normalized)
    normalized = collapse_whitespace(normalized)
    return normalized or cleaned


def artist_key(name: str) -> str:
    """Dedup key for artist lookups: trimmed and lower-cased."""
    return name.strip().lower()
