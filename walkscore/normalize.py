import re
from typing import Optional


def normalize_text(s: str) -> str:
    return " ".join(s.strip().split())


def normalize_origin(origin: Optional[str]) -> str:
    """Collapse whitespace in an origin address; None becomes ""."""
    if origin is None:
        return ""
    return normalize_text(origin)


TAG_SEPARATORS = re.compile(r"[\s\-]+")

# User-facing spellings of catalog tags
TAG_SYNS = {
    "grocery": "grocery_or_supermarket",
    "grocery_store": "grocery_or_supermarket",
    "mall": "shopping_mall",
    "cinema": "movie_theater",
    "movie_theatre": "movie_theater",
}


def normalize_tag(tag: str) -> str:
    t = TAG_SEPARATORS.sub("_", tag.strip().lower())
    return TAG_SYNS.get(t, t)
