"""Keyword-bucket categorization shared by every statement parser."""
import logging
import re
from typing import List, Optional, Pattern, Tuple

from .config import TaxonomyLoader, get_taxonomy_loader
from .utils.text import strip_accents

logger = logging.getLogger(__name__)


class Categorizer:
    """
    Assign a category label to a transaction description.

    Buckets are checked in taxonomy order and the first match wins.
    Keywords match whole words; brand prefixes match at the start of a word
    even when the merchant name runs on ("UBERX"). Matching ignores case and
    accents, so "FARMÁCIA" and "farmacia" land in the same bucket. Unmatched
    text gets the default category.
    """

    def __init__(self, loader: Optional[TaxonomyLoader] = None):
        """
        Initialize categorizer.

        Args:
            loader: Taxonomy source (defaults to the packaged YAML)
        """
        self.loader = loader or get_taxonomy_loader()
        self.default_category = self.loader.default_category
        self._rules: List[Tuple[str, Pattern]] = [
            (rule.name, self._compile(rule.keywords, rule.prefixes))
            for rule in self.loader.category_rules
            if rule.keywords or rule.prefixes
        ]

    @staticmethod
    def _compile(keywords: List[str], prefixes: List[str]) -> Pattern:
        def alternatives(words: List[str]) -> str:
            return '|'.join(re.escape(strip_accents(word.lower())) for word in words)

        branches = []
        if keywords:
            branches.append(rf'(?:{alternatives(keywords)})(?![a-z0-9])')
        if prefixes:
            # Brand names also match run-together merchant strings ("UBERX")
            branches.append(rf'(?:{alternatives(prefixes)})')
        return re.compile(rf'(?<![a-z0-9])(?:{"|".join(branches)})')

    def categorize(self, description: str) -> str:
        """
        Categorize a description.

        Args:
            description: Transaction description

        Returns:
            Category label
        """
        if not description:
            return self.default_category

        normalized = strip_accents(description.lower())

        for name, pattern in self._rules:
            if pattern.search(normalized):
                return name

        return self.default_category

    def map_issuer_category(self, issuer_category: str, description: str = "") -> str:
        """
        Map an issuer-provided category onto the taxonomy.

        Falls back to keyword categorization of the description when the
        issuer label is unknown or generic.
        """
        key = strip_accents((issuer_category or "").strip().lower())
        mapped = self.loader.issuer_categories.get(key)
        if mapped:
            return mapped

        return self.categorize(description)


# Cached instance; compiled patterns are read-only
_categorizer: Optional[Categorizer] = None


def get_categorizer() -> Categorizer:
    """Get cached instance of Categorizer."""
    global _categorizer
    if _categorizer is None:
        _categorizer = Categorizer()
    return _categorizer
