"""
Keyword Categorizer Module

Fast description-to-category lookup using keyword lists.
"""

import logging
from pathlib import Path

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CATEGORY = "Other"

DEFAULT_KEYWORDS: dict[str, list[str]] = {
    "Food": ["restaurant", "cafe", "groceries", "food", "starbucks", "mcdonalds"],
    "Transportation": ["gas", "uber", "lyft", "taxi", "transport"],
    "Entertainment": ["movie", "concert", "netflix", "spotify", "hulu"],
    "Shopping": ["amazon", "walmart", "target", "shopping"],
    "Utilities": ["electricity", "water", "internet", "phone"],
    "Health": ["pharmacy", "doctor", "hospital", "health"],
}


class KeywordCategorizer:
    """Categorizes transactions by keywords found in the description."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize the categorizer.

        Args:
            config_dir: Path to configuration directory
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent.parent.parent / "config"
        self.default_category = DEFAULT_CATEGORY
        self._keywords: dict[str, list[str]] = {}
        self._load_keywords()

    def _load_keywords(self) -> None:
        """Load keyword lists from config file."""
        keywords_file = self.config_dir / "category_keywords.yaml"

        if not keywords_file.exists():
            logger.warning(f"Category keywords file not found: {keywords_file}, using defaults")
            self._keywords = {k: list(v) for k, v in DEFAULT_KEYWORDS.items()}
            return

        with open(keywords_file) as f:
            data = yaml.safe_load(f) or {}

        self.default_category = data.get("default_category", DEFAULT_CATEGORY)
        self._keywords = {
            category: [str(k).lower() for k in (keywords or [])]
            for category, keywords in data.get("categories", {}).items()
        }

        logger.info(f"Loaded keywords for {len(self._keywords)} categories")

    @property
    def categories(self) -> list[str]:
        """Known categories, including the fallback."""
        names = list(self._keywords)
        if self.default_category not in names:
            names.append(self.default_category)
        return names

    def categorize(self, description: str | None) -> str:
        """Pick a category for a transaction description.

        Args:
            description: Free-text description

        Returns:
            First category with a keyword contained in the description
        """
        if not description:
            return self.default_category

        text = description.lower()

        for category, keywords in self._keywords.items():
            for keyword in keywords:
                if keyword and keyword in text:
                    return category

        return self.default_category

    def add_keyword(self, category: str, keyword: str) -> None:
        """Add a keyword at runtime (not persisted)."""
        self._keywords.setdefault(category, []).append(keyword.lower())
        logger.info(f"Added keyword '{keyword}' for {category}")
