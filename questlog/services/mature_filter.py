"""
Keyword based mature-content detection for catalog records.
Hidden by default on every browse and search path.
"""
import re

DEFAULT_MATURE_KEYWORDS = [
    "nsfw",
    "porn",
    "porno",
    "pornographic",
    "hentai",
    "ecchi",
    "sex",
    "sexual",
    "erotic",
    "erotica",
    "nude",
    "nudity",
    "naked",
    "xxx",
    "adult",
    "fetish",
    "bdsm",
    "pervert",
]

# Keywords up to this length only match whole tokens ("sex" must not hit "Sussex")
SHORT_KEYWORD_LENGTH = 4

_WHITESPACE_RE = re.compile(r"\s+")
_TOKEN_SPLIT_RE = re.compile(r"[^a-z0-9]+")


def normalize_text(value):
    if value is None:
        return ""
    return _WHITESPACE_RE.sub(" ", str(value).lower()).strip()


def contains_mature_keyword(text, keywords=None):
    haystack = normalize_text(text)
    if not haystack:
        return False

    tokens = {t for t in _TOKEN_SPLIT_RE.split(haystack) if t}

    for raw in keywords if keywords is not None else DEFAULT_MATURE_KEYWORDS:
        keyword = normalize_text(raw)
        if not keyword:
            continue

        if len(keyword) <= SHORT_KEYWORD_LENGTH:
            if keyword in tokens:
                return True
            continue

        if keyword in haystack:
            return True

    return False


def is_mature_game(game, keywords=None):
    """True when the name, summary or any tag of the record mentions a mature keyword"""
    title = game.get("name") or game.get("title") or ""
    summary = game.get("summary") or ""
    tags = game.get("tags")
    tag_text = " ".join(str(t) for t in tags) if isinstance(tags, list) else ""
    return (
        contains_mature_keyword(title, keywords)
        or contains_mature_keyword(summary, keywords)
        or contains_mature_keyword(tag_text, keywords)
    )
