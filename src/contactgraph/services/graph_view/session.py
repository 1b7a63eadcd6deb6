"""
Interactive graph session.

Wires the graph model, layout engine, viewport controller and selection
index together behind the handlers a presentation layer calls: gestures,
taps, search text and reset requests. Nodes and edges are replaced as a
whole on every rebuild; viewport and selection never mutate them.
"""

import asyncio
from typing import Iterable, List, Optional, Tuple

from ...shared import get_logger, get_metrics
from ...shared.config.settings import Settings, get_settings
from ...shared.models.contact import Contact
from ...shared.models.graph import GraphEdge, GraphNode, LayoutBounds, NodeKind
from .animation import TransformAnimator
from .graph_model import ContactGraph, GraphModel
from .layout import LayoutEngine
from .models import (
    LayoutConfig, LayoutResult, NodeStyle, RenderPayload, ScreenGeometry,
    SelectionEvent, SelectionState, TagSelectionPolicy, TapResult,
    ViewportConfig, ViewportTransform
)
from .selection import SelectionIndex
from .viewport import ViewportController


class GraphSession:
    """
    One contact graph on screen.

    Usage:
        session = GraphSession()
        session.load_contacts(contacts)
        session.on_node_tap("tag:sf")
        payload = session.render_payload()
    """

    def __init__(self,
                 settings: Optional[Settings] = None,
                 screen: Optional[ScreenGeometry] = None,
                 layout_config: Optional[LayoutConfig] = None,
                 viewport_config: Optional[ViewportConfig] = None,
                 animator: Optional[TransformAnimator] = None,
                 tag_policy: Optional[TagSelectionPolicy] = None):
        """
        Initialize the session.

        Args:
            settings: Settings to derive defaults from, defaults to ``get_settings()``
            screen: Screen geometry supplied by the presentation layer
            layout_config: Force simulation parameters
            viewport_config: Zoom limits and animator choice
            animator: Explicit centering animator
            tag_policy: How tag taps combine with an existing tag highlight
        """
        settings = settings or get_settings()
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

        self.screen = screen or ScreenGeometry.from_settings(settings)
        self.graph_model = GraphModel()
        self.layout_engine = LayoutEngine(layout_config or LayoutConfig.from_settings(settings))
        self.viewport = ViewportController(viewport_config or ViewportConfig.from_settings(settings), animator)
        self.selection_index = SelectionIndex(
            tag_policy or TagSelectionPolicy(settings.tag_selection_policy),
            on_focus=self._center_on_node_id,
        )
        self.loading_delay = settings.loading_delay_ms / 1000

        self._graph = ContactGraph()
        self._contacts: List[Contact] = []
        self._bounds = self.layout_engine.config.default_bounds
        self._loading = False
        self.search_query = ""

    # ========== Read-only state ==========

    @property
    def contacts(self) -> List[Contact]:
        return list(self._contacts)

    @property
    def graph(self) -> ContactGraph:
        return self._graph

    @property
    def nodes(self) -> Tuple[GraphNode, ...]:
        return self._graph.nodes

    @property
    def edges(self) -> Tuple[GraphEdge, ...]:
        return self._graph.edges

    @property
    def layout_bounds(self) -> LayoutBounds:
        return self._bounds

    @property
    def transform(self) -> ViewportTransform:
        return self.viewport.transform

    @property
    def selection(self) -> SelectionState:
        return self.selection_index.state

    @property
    def is_loading(self) -> bool:
        return self._loading

    # ========== Rebuild ==========

    def load_contacts(self, contacts: Iterable[Contact]) -> LayoutResult:
        """
        Rebuild graph, layout and tag index from a contact list.

        The rebuild runs to completion before returning. Any highlight and
        search text are dropped and the view is centered on the first
        positioned node.
        """
        contacts = list(contacts)
        self.logger.info(f"Loading {len(contacts)} contacts into the graph")

        graph = self.graph_model.build(contacts)
        result = self.layout_engine.layout(graph.nodes, graph.edges)
        # Contacts whose id repeats an earlier one have no node; drop them everywhere
        contacts = [node.payload for node in graph.contact_nodes]

        self._contacts = contacts
        self._graph = graph.with_nodes(result.nodes)
        self._bounds = result.bounds
        self.selection_index.build_index(contacts)
        self.search_query = ""

        self.viewport.snap_to_identity()
        first = next((node for node in self._graph.nodes if node.is_positioned), None)
        if first is not None:
            self.viewport.center_on(first, self.screen, self._bounds)
        else:
            self.logger.info("No positioned nodes to center on")
        return result

    async def load_contacts_async(self, contacts: Iterable[Contact]) -> LayoutResult:
        """
        Rebuild on the running event loop after the loading delay.

        ``is_loading`` is True from the call until the rebuild finishes, so a
        loading indicator gets a chance to render first.
        """
        self._loading = True
        try:
            await asyncio.sleep(self.loading_delay)
            return self.load_contacts(contacts)
        finally:
            self._loading = False

    def update_screen(self, screen: ScreenGeometry) -> None:
        """Use new screen geometry for subsequent centering."""
        self.screen = screen

    # ========== Gesture handlers ==========

    def on_pinch(self, delta: float) -> ViewportTransform:
        return self.viewport.apply_pinch(delta)

    def on_pan(self, dx: float, dy: float) -> ViewportTransform:
        return self.viewport.apply_pan(dx, dy)

    def on_gesture_end(self) -> ViewportTransform:
        return self.viewport.commit_gesture()

    def tick(self, dt: float) -> ViewportTransform:
        """Advance the centering animation by ``dt`` seconds."""
        return self.viewport.tick(dt)

    # ========== Selection handlers ==========

    def on_node_tap(self, node_id: str) -> TapResult:
        """
        Handle a tap on a node.

        Tapping a contact highlights it (or requests its detail view when it
        is already the highlighted contact); tapping a tag highlights the
        tag and its contacts.
        """
        node = self._graph.get_node(node_id)
        if node is None:
            self.logger.warning(f"Tap on unknown node {node_id}")
            result = TapResult(event=SelectionEvent.UNCHANGED)
        elif node.kind == NodeKind.CONTACT:
            result = self.selection_index.select_contact(node.payload)
        else:
            result = self.selection_index.select_tag(node.label)

        self.metrics.record_interaction("tap", result.event.value)
        return result

    def on_background_tap(self) -> TapResult:
        """Clear all highlights; the viewport stays where it is."""
        result = self.selection_index.clear()
        self.metrics.record_interaction("background_tap", result.event.value)
        return result

    def on_search_text_change(self, query: str) -> TapResult:
        """Store the search text and highlight the best match."""
        self.search_query = query or ""
        result = self.selection_index.search(self.search_query)
        self.metrics.record_interaction("search", result.event.value)
        return result

    def on_reset_requested(self) -> bool:
        """
        Clear highlights and search text, then re-center at scale 1.

        Returns:
            False when there was no positioned node to center on
        """
        self.selection_index.clear()
        self.search_query = ""
        centered = self.viewport.reset(self._graph.nodes, self.screen, self._bounds)
        self.metrics.record_interaction("reset", "centered" if centered else "identity")
        return centered

    def _center_on_node_id(self, node_id: str) -> bool:
        return self.viewport.center_on_node_id(node_id, self._graph.nodes, self.screen, self._bounds)

    # ========== Rendering ==========

    def render_payload(self) -> dict:
        """
        JSON-ready snapshot for a frontend renderer.

        Only positioned nodes, and edges whose endpoints are both positioned,
        are included.
        """
        state = self.selection
        positioned = {}
        nodes = []
        for node in self._graph.nodes:
            if not node.is_positioned:
                continue
            positioned[node.id] = node
            highlighted = state.is_node_highlighted(node)
            nodes.append({
                'id': node.id,
                'kind': node.kind.value,
                'label': NodeStyle.display_label(node),
                'x': node.x,
                'y': node.y,
                'highlighted': highlighted,
                'color': NodeStyle.fill_for(node),
                'stroke': NodeStyle.stroke_for(highlighted),
                'initials': node.payload.initials if node.payload is not None else None,
            })

        edges = [
            {
                'source': edge.source_id,
                'target': edge.target_id,
                'color': NodeStyle.EDGE_COLOR,
                'opacity': NodeStyle.EDGE_OPACITY,
            }
            for edge in self._graph.edges
            if edge.source_id in positioned and edge.target_id in positioned
        ]

        bounds = self._bounds
        transform = self.transform
        payload = RenderPayload(
            nodes=nodes,
            edges=edges,
            bounds={
                'min_x': bounds.min_x,
                'min_y': bounds.min_y,
                'max_x': bounds.max_x,
                'max_y': bounds.max_y,
            },
            transform={
                'scale': transform.scale,
                'translate_x': transform.translate_x,
                'translate_y': transform.translate_y,
            },
            metadata={
                'contact_count': len(self._graph.contact_nodes),
                'tag_count': len(self._graph.tag_nodes),
                'edge_count': len(self._graph.edges),
                'selection_mode': state.mode.value,
                'search_query': self.search_query,
                'is_loading': self._loading,
                'layout': 'preset',
            },
        )
        return payload.model_dump()
