import hashlib
from utils.text_cleaner import TextCleaner


def content_item_id(*parts: str) -> str:
    """Stable item id for rows whose board exposes no id of its own.

    Derived from the row's content only, so the same row scraped on a later
    run maps to the same follow-up.
    """
    joined = "|".join(TextCleaner.clean(p).lower() for p in parts if p)
    return "h" + hashlib.sha256(joined.encode()).hexdigest()[:16]


def make_follow_up_id(source: str, board_key: str, source_item_id: str) -> str:
    """Deterministic follow-up id: '<source>-<board>-<item>'"""
    return "-".join([
        TextCleaner.slugify(source),
        TextCleaner.slugify(board_key),
        TextCleaner.slugify(source_item_id),
    ])
