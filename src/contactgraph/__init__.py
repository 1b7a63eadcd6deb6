"""
ContactGraph - relationship graph of contacts and their hashtags.
"""

__version__ = "1.0.0"
__author__ = "ContactGraph Team"

# Re-export main components for easy access
from .shared.config.settings import get_settings
from .shared.models.contact import Contact
from .shared.models.graph import GraphNode, GraphEdge, LayoutBounds
from .shared.exceptions import ContactGraphError, ConfigurationError
from .services.graph_view import GraphSession

__all__ = [
    "get_settings",
    "Contact",
    "GraphNode",
    "GraphEdge",
    "LayoutBounds",
    "ContactGraphError",
    "ConfigurationError",
    "GraphSession",
]
