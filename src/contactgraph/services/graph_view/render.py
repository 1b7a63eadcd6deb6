"""
Static PNG snapshots of a laid-out contact graph.

Draws with NetworkX and Matplotlib at the positions computed by the layout
engine, using the same colours and highlight strokes as the interactive
view. Intended for the CLI and for debugging layouts, not for the
interactive canvas itself.
"""

from pathlib import Path
from typing import Dict, Tuple, Union

import matplotlib
matplotlib.use("Agg")
import matplotlib.patches as mpatches
import matplotlib.pyplot as plt
import networkx as nx

from ...shared import get_logger
from ...shared.exceptions import RenderError
from .models import NodeStyle
from .session import GraphSession


class GraphRenderer:
    """Renders a session's positioned nodes and edges to an image file."""

    # Configuration constants
    DEFAULT_FIGURE_SIZE = (8, 12)
    DEFAULT_DPI = 150
    CONTACT_NODE_SIZE = 900
    TAG_NODE_SIZE = 500
    HIGHLIGHT_LINEWIDTH = 3.0
    DEFAULT_LINEWIDTH = 1.0
    FONT_SIZE = 8
    TITLE_FONT_SIZE = 14

    def __init__(self, figure_size: Tuple[float, float] = DEFAULT_FIGURE_SIZE, dpi: int = DEFAULT_DPI):
        self.figure_size = figure_size
        self.dpi = dpi
        self.logger = get_logger(__name__)

    def render(self, session: GraphSession, output_path: Union[str, Path], title: str = "Contact graph") -> Path:
        """
        Draw the session graph to ``output_path``.

        Args:
            session: Session with a completed layout
            output_path: Destination image file (format taken from the suffix)
            title: Figure title

        Returns:
            Path of the written image

        Raises:
            RenderError: If there is nothing to draw or the image cannot be written
        """
        output_path = Path(output_path)
        positioned = [node for node in session.nodes if node.is_positioned]
        if not positioned:
            raise RenderError("No positioned nodes to render")

        graph = nx.Graph()
        pos: Dict[str, Tuple[float, float]] = {}
        for node in positioned:
            graph.add_node(node.id)
            # Screen y grows downwards; flip so the image matches the canvas
            pos[node.id] = (node.x, -node.y)

        edges_added = 0
        for edge in session.edges:
            if edge.source_id in pos and edge.target_id in pos:
                graph.add_edge(edge.source_id, edge.target_id)
                edges_added += 1
            else:
                self.logger.debug(f"Skipping edge {edge.source_id} -> {edge.target_id} (nodes not positioned)")

        state = session.selection
        fig, ax = plt.subplots(figsize=self.figure_size)
        try:
            ax.set_title(title, fontsize=self.TITLE_FONT_SIZE, fontweight='bold')
            nx.draw_networkx_edges(
                graph, pos, ax=ax,
                edge_color=NodeStyle.EDGE_COLOR, alpha=NodeStyle.EDGE_OPACITY, width=1.0,
            )

            for is_contact in (True, False):
                group = [node for node in positioned if (node.payload is not None) == is_contact]
                if not group:
                    continue
                highlighted = [state.is_node_highlighted(node) for node in group]
                nx.draw_networkx_nodes(
                    graph, pos, ax=ax,
                    nodelist=[node.id for node in group],
                    node_color=[NodeStyle.fill_for(node) for node in group],
                    node_shape='o' if is_contact else 's',
                    node_size=self.CONTACT_NODE_SIZE if is_contact else self.TAG_NODE_SIZE,
                    edgecolors=[NodeStyle.stroke_for(h) for h in highlighted],
                    linewidths=[self.HIGHLIGHT_LINEWIDTH if h else self.DEFAULT_LINEWIDTH for h in highlighted],
                )

            labels = {node.id: NodeStyle.display_label(node) for node in positioned}
            nx.draw_networkx_labels(graph, pos, labels, ax=ax, font_size=self.FONT_SIZE)

            ax.legend(handles=[
                mpatches.Patch(color=NodeStyle.CONTACT_FILL, label='contact'),
                mpatches.Patch(color=NodeStyle.TAG_FILL, label='tag'),
            ], loc='upper right')
            ax.axis('off')
            fig.tight_layout()

            output_path.parent.mkdir(parents=True, exist_ok=True)
            fig.savefig(output_path, dpi=self.dpi, bbox_inches='tight')
        except (OSError, ValueError) as e:
            raise RenderError(f"Failed to render graph to {output_path}: {e}")
        finally:
            plt.close(fig)

        self.logger.info(f"Rendered {len(positioned)} nodes and {edges_added} edges to {output_path}")
        return output_path
