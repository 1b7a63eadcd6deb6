"""
Contacts Service for ContactGraph.

Loads contact lists, fills in cached enrichment and ranks contacts for
list views.
"""

from .source import apply_cached_tags, load_contacts, parse_contacts
from .ranking import rank_contacts

__all__ = [
    "apply_cached_tags",
    "load_contacts",
    "parse_contacts",
    "rank_contacts",
]
