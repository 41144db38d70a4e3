import re
from typing import Optional


class TextCleaner:
    @staticmethod
    def clean(text: Optional[str]) -> str:
        """Collapse scraped cell text to a single trimmed line"""
        if not text:
            return ""

        # Remove zero-width characters board UIs sprinkle into cells
        text = re.sub("[\\u200b\\u200c\\u200d\\ufeff]", "", text)

        # Remove excessive whitespace
        text = re.sub(r"\s+", " ", text)

        # Normalize quotes
        text = text.replace("“", '"').replace("”", '"')
        text = text.replace("‘", "'").replace("’", "'")

        return text.strip()

    @staticmethod
    def slugify(text: str) -> str:
        """'Move-Out Inspections' -> 'move-out-inspections'"""
        slug = re.sub(r"[^a-z0-9]+", "-", text.lower())
        return slug.strip("-")
