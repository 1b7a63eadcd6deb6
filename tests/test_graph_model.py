"""
Graph construction tests.
"""

import networkx as nx
import pytest
from pydantic import ValidationError

from contactgraph.services.graph_view import ContactGraph, GraphModel
from contactgraph.shared import get_metrics
from contactgraph.shared.models import Contact, GraphEdge, GraphNode, NodeKind


@pytest.fixture
def model():
    return GraphModel()


# =============================================================================
# NODE AND EDGE CONSTRUCTION
# =============================================================================

class TestGraphBuild:

    def test_alice_bob_scenario(self, model, contacts):
        graph = model.build(contacts)

        assert [n.id for n in graph.contact_nodes] == ["contact:a", "contact:b"]
        assert [n.label for n in graph.tag_nodes] == ["sf", "pm"]
        assert {(e.source_id, e.target_id) for e in graph.edges} == {
            ("contact:a", "tag:sf"),
            ("contact:a", "tag:pm"),
            ("contact:b", "tag:sf"),
        }

    def test_one_node_per_contact_and_distinct_tag(self, model):
        contacts = [
            Contact(id=str(i), name=f"Person {i}", hashtags=["team", f"city{i % 3}"])
            for i in range(10)
        ]
        graph = model.build(contacts)

        assert len(graph.contact_nodes) == 10
        assert {n.label for n in graph.tag_nodes} == {"team", "city0", "city1", "city2"}
        assert len(graph.edges) == 20

    def test_every_tag_node_has_an_edge(self, model, contacts):
        graph = model.build(contacts)
        degrees = graph.degrees()

        for node in graph.tag_nodes:
            assert degrees[node.id] >= 1

    def test_edges_only_cross_kinds(self, model, contacts):
        graph = model.build(contacts)

        for edge in graph.edges:
            assert graph.get_node(edge.source_id).kind == NodeKind.CONTACT
            assert graph.get_node(edge.target_id).kind == NodeKind.TAG

    def test_contact_without_tags_is_isolated(self, model, alice):
        loner = Contact(id="z", name="Zed")
        graph = model.build([alice, loner])

        assert graph.get_node("contact:z") is not None
        assert graph.get_edges_for_node("contact:z") == []

    def test_duplicate_tags_on_a_contact_yield_one_edge(self, model):
        contact = Contact(id="c", name="Carol", hashtags=["sf", " sf ", "sf"])
        graph = model.build([contact])

        assert len(graph.tag_nodes) == 1
        assert len(graph.edges) == 1

    def test_duplicate_contact_ids_are_skipped(self, model, alice):
        twin = Contact(id="a", name="Alice Twin", hashtags=["ops"])
        graph = model.build([alice, twin])

        assert len(graph.contact_nodes) == 1
        assert graph.get_node("contact:a").label == "Alice"
        assert graph.get_node("tag:ops") is None

    def test_empty_input(self, model):
        graph = model.build([])

        assert graph.is_empty
        assert graph.edges == ()

    def test_build_is_idempotent(self, model, contacts):
        first = model.build(contacts)
        second = model.build(contacts)

        assert [(n.id, n.kind) for n in first.nodes] == [(n.id, n.kind) for n in second.nodes]
        assert {e.pair for e in first.edges} == {e.pair for e in second.edges}

    def test_tag_and_contact_with_same_text_do_not_collide(self, model):
        contact = Contact(id="sf", name="San Fran", hashtags=["sf"])
        graph = model.build([contact])

        assert len(graph.nodes) == 2
        assert graph.get_node("contact:sf").kind == NodeKind.CONTACT
        assert graph.get_node("tag:sf").kind == NodeKind.TAG

    def test_build_records_metrics(self, model, contacts):
        model.build(contacts)
        metrics = get_metrics()

        assert metrics.get_counter("graph_builds_total") == 1
        assert metrics.get_gauge("graph_nodes") == 4
        assert metrics.get_gauge("graph_edges") == 3


# =============================================================================
# GRAPH HELPERS
# =============================================================================

class TestContactGraph:

    def test_to_networkx_is_bipartite(self, model, contacts):
        graph = model.build(contacts).to_networkx()

        assert graph.number_of_nodes() == 4
        assert graph.number_of_edges() == 3
        assert nx.is_bipartite(graph)
        assert graph.nodes["tag:sf"]["kind"] == "tag"

    def test_with_nodes_keeps_edges(self, model, contacts):
        graph = model.build(contacts)
        moved = graph.with_nodes(n.with_position((1.0, 2.0)) for n in graph.nodes)

        assert moved.edges == graph.edges
        assert all(n.position == (1.0, 2.0) for n in moved.nodes)
        assert all(n.position is None for n in graph.nodes)

    def test_graph_is_frozen(self):
        graph = ContactGraph()
        with pytest.raises(ValidationError):
            graph.nodes = ()


# =============================================================================
# MODEL VALIDATION
# =============================================================================

class TestGraphModels:

    def test_contact_node_requires_payload(self):
        with pytest.raises(ValidationError):
            GraphNode(id="contact:x", kind=NodeKind.CONTACT, label="X")

    def test_tag_node_rejects_payload(self, alice):
        with pytest.raises(ValidationError):
            GraphNode(id="tag:x", kind=NodeKind.TAG, label="x", payload=alice)

    def test_edge_rejects_self_loop(self):
        with pytest.raises(ValidationError):
            GraphEdge(source_id="tag:x", target_id="tag:x")

    def test_non_finite_position_is_not_positioned(self):
        node = GraphNode.for_tag("x").with_position((float("nan"), 1.0))
        assert not node.is_positioned

    def test_contact_accepts_camel_case_fields(self):
        contact = Contact.model_validate({
            "id": "1", "name": "Dana", "phoneNumber": None, "imageUrl": "http://x/y.png",
            "hashtags": "sf, pm, ,sf", "unknownField": 1,
        })

        assert contact.phone_number == ""
        assert contact.image_url == "http://x/y.png"
        assert contact.hashtags == ("sf", "pm")

    def test_contact_rejects_blank_name(self):
        with pytest.raises(ValidationError):
            Contact(id="1", name="   ")

    def test_initials(self):
        assert Contact(id="1", name="alice smith").initials == "AS"
        assert Contact(id="2", name="Bo").initials == "BO"
