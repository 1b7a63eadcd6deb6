"""
Graph data models for ContactGraph.

These models represent the bipartite contact/hashtag graph used across:
- graph_model: creates nodes and edges from contacts
- layout: assigns positions and computes the bounds of the canvas
- viewport/selection: read positions to center and highlight nodes
- render: draws positioned nodes
"""

import math
from enum import Enum
from typing import Optional, Tuple
from pydantic import Field, field_validator, model_validator

from .base import FrozenModel
from .contact import Contact

CONTACT_PREFIX = "contact:"
TAG_PREFIX = "tag:"


class NodeKind(str, Enum):
    """The two sides of the bipartite graph."""
    CONTACT = "contact"
    TAG = "tag"


class GraphNode(FrozenModel):
    """
    Represents a node in the relationship graph.

    A node is either a contact or a hashtag. Its id is derived from the
    source data so rebuilding from the same contacts yields the same ids.
    """

    id: str = Field(..., description="Unique identifier for the node")
    kind: NodeKind = Field(..., description="Contact or tag")
    label: str = Field(..., description="Contact name or tag text")
    payload: Optional[Contact] = Field(default=None, description="Source contact for contact nodes")
    position: Optional[Tuple[float, float]] = Field(default=None, description="Layout-space (x, y)")

    @model_validator(mode='after')
    def validate_payload(self):
        """Contact nodes carry their contact, tag nodes carry nothing."""
        if self.kind == NodeKind.CONTACT and self.payload is None:
            raise ValueError("Contact nodes require a contact payload")
        if self.kind == NodeKind.TAG and self.payload is not None:
            raise ValueError("Tag nodes must not carry a payload")
        return self

    @classmethod
    def contact_node_id(cls, contact_id: str) -> str:
        return f"{CONTACT_PREFIX}{contact_id}"

    @classmethod
    def tag_node_id(cls, tag: str) -> str:
        return f"{TAG_PREFIX}{tag}"

    @classmethod
    def for_contact(cls, contact: Contact) -> "GraphNode":
        """Create the node representing a contact."""
        return cls(
            id=cls.contact_node_id(contact.id),
            kind=NodeKind.CONTACT,
            label=contact.name,
            payload=contact,
        )

    @classmethod
    def for_tag(cls, tag: str) -> "GraphNode":
        """Create the node representing a hashtag."""
        return cls(id=cls.tag_node_id(tag), kind=NodeKind.TAG, label=tag)

    @property
    def is_positioned(self) -> bool:
        """True when the node has a finite layout position."""
        if self.position is None:
            return False
        x, y = self.position
        return math.isfinite(x) and math.isfinite(y)

    @property
    def x(self) -> Optional[float]:
        return self.position[0] if self.position is not None else None

    @property
    def y(self) -> Optional[float]:
        return self.position[1] if self.position is not None else None

    def with_position(self, position: Optional[Tuple[float, float]]) -> "GraphNode":
        """Return a copy of this node at a new position."""
        return self.model_copy(update={'position': position})


class GraphEdge(FrozenModel):
    """
    Represents the link between a contact and one of its hashtags.

    Edges are unordered; by convention the source is the contact node and the
    target the tag node.
    """

    source_id: str = Field(..., description="Contact node id")
    target_id: str = Field(..., description="Tag node id")

    @model_validator(mode='after')
    def validate_endpoints(self):
        if self.source_id == self.target_id:
            raise ValueError("An edge must connect two distinct nodes")
        return self

    @property
    def pair(self) -> frozenset:
        """The unordered endpoint pair."""
        return frozenset((self.source_id, self.target_id))

    def touches(self, node_id: str) -> bool:
        return node_id in (self.source_id, self.target_id)


class LayoutBounds(FrozenModel):
    """
    Axis-aligned rectangle defining the coordinate space of the canvas.
    """

    min_x: float = Field(..., description="Left edge")
    min_y: float = Field(..., description="Top edge")
    max_x: float = Field(..., description="Right edge")
    max_y: float = Field(..., description="Bottom edge")

    @field_validator('min_x', 'min_y', 'max_x', 'max_y')
    @classmethod
    def validate_finite(cls, v):
        if not math.isfinite(v):
            raise ValueError("Bounds must be finite")
        return v

    @model_validator(mode='after')
    def validate_extent(self):
        if self.max_x < self.min_x or self.max_y < self.min_y:
            raise ValueError("Invalid bounds coordinates")
        return self

    @classmethod
    def default(cls, width: float, height: float) -> "LayoutBounds":
        """Screen-sized bounds used before any node has a position."""
        return cls(min_x=0.0, min_y=0.0, max_x=width, max_y=height)

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def center(self) -> Tuple[float, float]:
        """Geometric center, the pivot the viewport scales around."""
        return ((self.min_x + self.max_x) / 2, (self.min_y + self.max_y) / 2)

    def contains(self, x: float, y: float, margin: float = 0.0) -> bool:
        """Check whether a point lies inside the bounds shrunk by ``margin``."""
        return (self.min_x + margin <= x <= self.max_x - margin
                and self.min_y + margin <= y <= self.max_y - margin)
