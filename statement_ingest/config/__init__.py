"""Configuration management."""
from .settings import *
from .taxonomy_loader import BankIdentifier, CategoryRule, TaxonomyLoader, get_taxonomy_loader

__all__ = ['BankIdentifier', 'CategoryRule', 'TaxonomyLoader', 'get_taxonomy_loader']
