"""
Service models for the relationship-graph engine.
"""

import math
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple
from pydantic import Field, field_validator, model_validator

from ...shared.config.settings import Settings, get_settings
from ...shared.models.base import BaseModel, FrozenModel
from ...shared.models.contact import Contact
from ...shared.models.graph import GraphEdge, GraphNode, LayoutBounds


class TagSelectionPolicy(str, Enum):
    """How a tag tap combines with an existing tag highlight."""
    REPLACE = "replace"
    ACCUMULATE = "accumulate"


class AnimatorKind(str, Enum):
    """Available centering animations."""
    SPRING = "spring"
    IMMEDIATE = "immediate"


class LayoutConfig(FrozenModel):
    """Parameters of the force simulation."""

    iterations: int = Field(default=300, ge=0, description="Fixed number of ticks")
    link_distance: float = Field(default=10.0, ge=0, description="Rest distance of a link")
    link_strength: float = Field(default=0.7, ge=0.0, le=1.0, description="Link force strength")
    charge_strength: float = Field(default=-10.0, description="Many-body strength")
    charge_distance_min: float = Field(default=1.0, gt=0, description="Distance below which charge is clamped")
    collision_radius: float = Field(default=45.0, ge=0, description="Node collision radius")
    collision_strength: float = Field(default=1.0, ge=0.0, le=1.0, description="Collision resolution strength")
    center_x: float = Field(default=195.0, description="Centering force x")
    center_y: float = Field(default=422.0, description="Centering force y")
    padding: float = Field(default=100.0, ge=0, description="Bounds padding")
    velocity_decay: float = Field(default=0.4, ge=0.0, le=1.0, description="Velocity friction")
    alpha_min: float = Field(default=0.001, gt=0.0, lt=1.0, description="Alpha at the last tick")
    initial_radius: float = Field(default=10.0, gt=0, description="Phyllotaxis start radius")
    seed: int = Field(default=42, description="Seed for coincident-point jiggle")
    default_width: float = Field(default=390.0, gt=0, description="Default bounds width")
    default_height: float = Field(default=844.0, gt=0, description="Default bounds height")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "LayoutConfig":
        settings = settings or get_settings()
        return cls(**settings.layout_config)

    @property
    def alpha_decay(self) -> float:
        """Per-tick cooling rate that brings alpha to ``alpha_min`` on the last tick."""
        if self.iterations == 0:
            return 0.0
        return 1 - self.alpha_min ** (1 / self.iterations)

    @property
    def default_bounds(self) -> LayoutBounds:
        return LayoutBounds.default(self.default_width, self.default_height)


class LayoutResult(FrozenModel):
    """Positioned nodes and the canvas they span."""

    nodes: Tuple[GraphNode, ...] = Field(default=(), description="Nodes with resolved positions")
    edges: Tuple[GraphEdge, ...] = Field(default=(), description="Edges, unchanged")
    bounds: LayoutBounds = Field(..., description="Padded bounds of positioned nodes")
    iterations: int = Field(default=0, ge=0, description="Ticks actually run")
    unpositioned_ids: Tuple[str, ...] = Field(default=(), description="Nodes left without a finite position")

    @property
    def positioned_nodes(self) -> List[GraphNode]:
        return [node for node in self.nodes if node.is_positioned]


class ScreenGeometry(FrozenModel):
    """Screen size and fixed chrome supplied by the presentation layer."""

    width: float = Field(..., gt=0, description="Screen width")
    height: float = Field(..., gt=0, description="Screen height")
    chrome_height: float = Field(default=0.0, ge=0, description="Header and search bar height")

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ScreenGeometry":
        settings = settings or get_settings()
        return cls(
            width=settings.screen_width,
            height=settings.screen_height,
            chrome_height=settings.chrome_height,
        )

    @property
    def content_height(self) -> float:
        return max(self.height - self.chrome_height, 0.0)

    @property
    def target_point(self) -> Tuple[float, float]:
        """Where a centered node lands: mid-width, middle of the area below the chrome."""
        return (self.width / 2, self.content_height / 2)


class ViewportConfig(FrozenModel):
    """Zoom limits and animation choice."""

    min_scale: float = Field(default=0.5, gt=0, description="Minimum zoom")
    max_scale: float = Field(default=3.0, gt=0, description="Maximum zoom")
    animator: AnimatorKind = Field(default=AnimatorKind.SPRING, description="Centering animation")
    seed: int = Field(default=42, description="Seed for picking the reset node")

    @model_validator(mode='after')
    def validate_scale_range(self):
        if self.min_scale > self.max_scale:
            raise ValueError("min_scale must not exceed max_scale")
        return self

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ViewportConfig":
        settings = settings or get_settings()
        return cls(**settings.viewport_config)

    def clamp(self, scale: float) -> float:
        return max(self.min_scale, min(scale, self.max_scale))


class ViewportTransform(FrozenModel):
    """
    Scale and translation mapping layout space onto the screen.

    Scaling pivots around the layout's geometric center, so a layout point
    ``p`` lands at ``pivot + scale * (p - pivot) + translate``.
    """

    scale: float = Field(default=1.0, gt=0, description="Zoom factor")
    translate_x: float = Field(default=0.0, description="Horizontal translation")
    translate_y: float = Field(default=0.0, description="Vertical translation")

    @field_validator('scale', 'translate_x', 'translate_y')
    @classmethod
    def validate_finite(cls, v):
        if not math.isfinite(v):
            raise ValueError("Transform components must be finite")
        return v

    @classmethod
    def identity(cls) -> "ViewportTransform":
        return cls()

    @property
    def translation(self) -> Tuple[float, float]:
        return (self.translate_x, self.translate_y)

    def to_screen(self, point: Tuple[float, float], pivot: Tuple[float, float]) -> Tuple[float, float]:
        """Map a layout-space point to screen space."""
        return (
            pivot[0] + self.scale * (point[0] - pivot[0]) + self.translate_x,
            pivot[1] + self.scale * (point[1] - pivot[1]) + self.translate_y,
        )

    def to_layout(self, point: Tuple[float, float], pivot: Tuple[float, float]) -> Tuple[float, float]:
        """Map a screen-space point back to layout space."""
        return (
            pivot[0] + (point[0] - self.translate_x - pivot[0]) / self.scale,
            pivot[1] + (point[1] - self.translate_y - pivot[1]) / self.scale,
        )

    def is_close(self, other: "ViewportTransform", tolerance: float = 1e-6) -> bool:
        return (abs(self.scale - other.scale) <= tolerance
                and abs(self.translate_x - other.translate_x) <= tolerance
                and abs(self.translate_y - other.translate_y) <= tolerance)


class SelectionMode(str, Enum):
    """Highlight state of the graph."""
    IDLE = "idle"
    CONTACT = "contact"
    TAG = "tag"


class SelectionEvent(str, Enum):
    """Outcome of a selection request."""
    HIGHLIGHTED = "highlighted"
    DETAIL_REQUESTED = "detail_requested"
    CLEARED = "cleared"
    UNCHANGED = "unchanged"


class SelectionState(FrozenModel):
    """Currently highlighted contacts and tags."""

    contact_ids: FrozenSet[str] = Field(default_factory=frozenset, description="Highlighted contact ids")
    tags: FrozenSet[str] = Field(default_factory=frozenset, description="Highlighted tags")
    mode: SelectionMode = Field(default=SelectionMode.IDLE, description="Highlight mode")

    @property
    def is_empty(self) -> bool:
        return not self.contact_ids and not self.tags

    def is_node_highlighted(self, node: GraphNode) -> bool:
        if node.payload is not None:
            return node.payload.id in self.contact_ids
        return node.label in self.tags


class TapResult(BaseModel):
    """What a node tap, background tap or search resolved to."""

    event: SelectionEvent = Field(..., description="Selection outcome")
    node_id: Optional[str] = Field(default=None, description="Node the interaction resolved to")
    contact: Optional[Contact] = Field(default=None, description="Contact to open for detail requests")
    centered: bool = Field(default=False, description="Whether the viewport accepted a centering request")

    @property
    def wants_detail(self) -> bool:
        return self.event == SelectionEvent.DETAIL_REQUESTED


class RenderPayload(BaseModel):
    """JSON-ready snapshot of a session for frontend rendering."""

    visualization_type: str = Field(default="contact_graph", description="Payload type")
    nodes: List[Dict[str, Any]] = Field(default_factory=list, description="Renderable nodes")
    edges: List[Dict[str, Any]] = Field(default_factory=list, description="Renderable edges")
    bounds: Dict[str, float] = Field(default_factory=dict, description="Layout bounds")
    transform: Dict[str, float] = Field(default_factory=dict, description="Current viewport transform")
    metadata: Dict[str, Any] = Field(default_factory=dict, description="Counts and hints")


class NodeStyle:
    """Colours and label rules shared by the render payload and PNG snapshots."""

    CONTACT_FILL = "#5AC8FA"
    TAG_FILL = "#D1D5DB"
    HIGHLIGHT_STROKE = "#FF0000"
    DEFAULT_STROKE = "#FFFFFF"
    EDGE_COLOR = "#999999"
    EDGE_OPACITY = 0.4
    MAX_LABEL_LENGTH = 15
    TRUNCATED_LABEL_LENGTH = 12

    @classmethod
    def fill_for(cls, node: GraphNode) -> str:
        return cls.CONTACT_FILL if node.payload is not None else cls.TAG_FILL

    @classmethod
    def stroke_for(cls, highlighted: bool) -> str:
        return cls.HIGHLIGHT_STROKE if highlighted else cls.DEFAULT_STROKE

    @classmethod
    def display_label(cls, node: GraphNode) -> str:
        """Contact names longer than the limit are shortened; tags are shown whole."""
        if node.payload is not None and len(node.label) > cls.MAX_LABEL_LENGTH:
            return node.label[:cls.TRUNCATED_LABEL_LENGTH] + "..."
        return node.label
