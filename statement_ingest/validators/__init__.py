"""Validation of extracted transactions."""
from .plausibility import FilterOutcome, PlausibilityFilter, remove_duplicates

__all__ = ['FilterOutcome', 'PlausibilityFilter', 'remove_duplicates']
