import re
import unicodedata

SLUG_FALLBACK = "post"

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slug_stem(title: str) -> str:
    """Lowercase ASCII slug of ``title``; empty when nothing alphanumeric survives."""
    # Fold accents (é -> e) and drop whatever has no ASCII form
    folded = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", folded.lower()).strip("-")


def derive_slug(title: str, fallback: str = SLUG_FALLBACK) -> str:
    """
    Derive a URL-safe slug from a post title.

    "Hello World!" -> "hello-world". Titles with no letters or digits map to
    ``fallback`` so the result is never empty.
    """
    return slug_stem(title) or fallback
