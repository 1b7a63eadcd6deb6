"""
Shared data models for ContactGraph.
"""

from .base import BaseModel, FrozenModel
from .contact import Contact
from .graph import GraphNode, GraphEdge, LayoutBounds, NodeKind

__all__ = [
    # Contact model
    "Contact",
    # Graph models
    "GraphNode",
    "GraphEdge",
    "LayoutBounds",
    "NodeKind",
    # Base models
    "BaseModel",
    "FrozenModel",
]
