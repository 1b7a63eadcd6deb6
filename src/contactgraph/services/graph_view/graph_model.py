"""
Bipartite graph construction.

Turns a contact list into one node per contact, one node per distinct
hashtag, and one edge per (contact, hashtag) pair. The result is a pure
function of the input: building twice from the same contacts yields the
same ids, kinds and connectivity.
"""

from functools import cached_property
from typing import Dict, Iterable, List, Optional, Tuple

import networkx as nx
from pydantic import Field

from ...shared import get_logger, get_metrics
from ...shared.models.base import FrozenModel
from ...shared.models.contact import Contact
from ...shared.models.graph import GraphEdge, GraphNode, NodeKind


class ContactGraph(FrozenModel):
    """
    Nodes and edges of one "contacts loaded" session.

    Contact nodes come first in input order, followed by tag nodes in the
    order their tags were first seen.
    """

    nodes: Tuple[GraphNode, ...] = Field(default=(), description="Contact and tag nodes")
    edges: Tuple[GraphEdge, ...] = Field(default=(), description="Contact-tag edges")

    @cached_property
    def node_index(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}

    @property
    def contact_nodes(self) -> List[GraphNode]:
        return [node for node in self.nodes if node.kind == NodeKind.CONTACT]

    @property
    def tag_nodes(self) -> List[GraphNode]:
        return [node for node in self.nodes if node.kind == NodeKind.TAG]

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        """Get a node by its id."""
        return self.node_index.get(node_id)

    def get_edges_for_node(self, node_id: str) -> List[GraphEdge]:
        """Get all edges touching a node."""
        return [edge for edge in self.edges if edge.touches(node_id)]

    def to_networkx(self) -> nx.Graph:
        """Convert to an undirected NetworkX graph with kind and label attributes."""
        graph = nx.Graph()
        for node in self.nodes:
            graph.add_node(node.id, kind=node.kind.value, label=node.label)
        graph.add_edges_from((edge.source_id, edge.target_id) for edge in self.edges)
        return graph

    def degrees(self) -> Dict[str, int]:
        """Number of incident edges per node id."""
        return dict(self.to_networkx().degree())

    def with_nodes(self, nodes: Iterable[GraphNode]) -> "ContactGraph":
        """Return a graph with the same edges and replaced (e.g. positioned) nodes."""
        return ContactGraph(nodes=tuple(nodes), edges=self.edges)


class GraphModel:
    """
    Builds the contact/hashtag graph.

    Stateless apart from its logger; one instance can serve every rebuild.
    """

    def __init__(self):
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

    def build(self, contacts: Iterable[Contact]) -> ContactGraph:
        """
        Build nodes and edges from contacts.

        Args:
            contacts: Contacts with their hashtags attached

        Returns:
            The bipartite contact graph
        """
        contacts = list(contacts)
        contact_nodes: List[GraphNode] = []
        tag_order: List[str] = []
        seen_tags = set()
        seen_contact_ids = set()
        edges: List[GraphEdge] = []

        for index, contact in enumerate(contacts, 1):
            node = GraphNode.for_contact(contact)
            if node.id in seen_contact_ids:
                self.logger.warning(f"Skipping duplicate contact id {contact.id!r}")
                continue
            seen_contact_ids.add(node.id)
            contact_nodes.append(node)

            # Contact.hashtags is already de-duplicated, so each pair yields one edge
            for tag in contact.hashtags:
                if tag not in seen_tags:
                    seen_tags.add(tag)
                    tag_order.append(tag)
                edges.append(GraphEdge(source_id=node.id, target_id=GraphNode.tag_node_id(tag)))

            if index % 100 == 0:
                self.logger.debug(f"Processed {index} contacts so far")

        tag_nodes = [GraphNode.for_tag(tag) for tag in tag_order]
        graph = ContactGraph(nodes=tuple(contact_nodes + tag_nodes), edges=tuple(edges))

        self.logger.info(
            f"Built graph: {len(contact_nodes)} contacts, {len(tag_nodes)} tags, {len(edges)} edges"
        )
        self.metrics.record_graph_build(len(contacts), len(graph.nodes), len(graph.edges))
        return graph
