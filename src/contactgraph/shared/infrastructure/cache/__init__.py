"""
Contact cache for ContactGraph.
"""

from .contact_cache import CachedContactData, ContactCache, get_contact_cache

__all__ = ["CachedContactData", "ContactCache", "get_contact_cache"]
