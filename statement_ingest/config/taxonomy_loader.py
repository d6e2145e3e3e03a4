"""Load keyword taxonomies used for categorization and issuer detection."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional
import yaml

from .settings import CONFIG_DATA_DIR

logger = logging.getLogger(__name__)


@dataclass
class CategoryRule:
    """One keyword bucket of the category taxonomy."""
    name: str
    keywords: List[str] = field(default_factory=list)
    prefixes: List[str] = field(default_factory=list)


@dataclass
class BankIdentifier:
    """An issuer display name and the text fragments that identify it."""
    name: str
    identifiers: List[str] = field(default_factory=list)


class TaxonomyLoader:
    """Loads the category and issuer YAML files."""

    def __init__(self, config_dir: Path = CONFIG_DATA_DIR):
        """
        Initialize taxonomy loader.

        Args:
            config_dir: Directory containing categories.yaml and banks.yaml
        """
        self.config_dir = config_dir
        self.category_rules: List[CategoryRule] = []
        self.issuer_categories: Dict[str, str] = {}
        self.default_category = "Other"
        self.banks: List[BankIdentifier] = []
        self.unknown_bank = "Unknown Bank"
        self._load_categories()
        self._load_banks()

    def _read_yaml(self, filename: str) -> dict:
        path = self.config_dir / filename
        if not path.exists():
            logger.warning(f"Taxonomy file not found: {path}")
            return {}

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)

        return data or {}

    def _load_categories(self) -> None:
        data = self._read_yaml("categories.yaml")

        for entry in data.get('categories', []):
            keywords = [str(keyword) for keyword in entry.get('keywords', [])]
            prefixes = [str(prefix) for prefix in entry.get('prefixes', [])]
            self.category_rules.append(CategoryRule(name=entry['name'], keywords=keywords, prefixes=prefixes))

        self.issuer_categories = {
            str(key).lower(): value
            for key, value in (data.get('issuer_categories') or {}).items()
        }
        self.default_category = data.get('default_category', self.default_category)
        logger.debug(f"Loaded {len(self.category_rules)} category rules")

    def _load_banks(self) -> None:
        data = self._read_yaml("banks.yaml")

        for entry in data.get('banks', []):
            identifiers = [str(identifier).lower() for identifier in entry.get('identifiers', [])]
            self.banks.append(BankIdentifier(name=entry['name'], identifiers=identifiers))

        self.unknown_bank = data.get('unknown_bank', self.unknown_bank)
        logger.debug(f"Loaded {len(self.banks)} bank identifiers")

    def detect_bank(self, text: str) -> str:
        """
        Detect the issuer from statement text.

        Args:
            text: Recovered statement text

        Returns:
            Issuer display name, or the unknown-bank label
        """
        text_lower = text.lower()

        for bank in self.banks:
            if any(identifier in text_lower for identifier in bank.identifiers):
                return bank.name

        return self.unknown_bank


# Cached instance; the YAML files are read-only after load
_loader: Optional[TaxonomyLoader] = None


def get_taxonomy_loader() -> TaxonomyLoader:
    """Get cached instance of TaxonomyLoader."""
    global _loader
    if _loader is None:
        _loader = TaxonomyLoader()
    return _loader
