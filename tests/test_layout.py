"""
Force layout tests.
"""

import math

import pytest

from contactgraph.services.graph_view import GraphModel, LayoutConfig, LayoutEngine
from contactgraph.shared import get_metrics
from contactgraph.shared.models import Contact, GraphNode, LayoutBounds


@pytest.fixture
def engine(layout_config):
    return LayoutEngine(layout_config)


@pytest.fixture
def graph(contacts):
    return GraphModel().build(contacts)


def _larger_graph():
    contacts = [
        Contact(id=str(i), name=f"Person {i}", hashtags=[f"team{i % 4}", f"city{i % 5}"])
        for i in range(30)
    ]
    return GraphModel().build(contacts)


# =============================================================================
# SIMULATION
# =============================================================================

class TestLayoutRun:

    def test_runs_exact_iteration_count(self, engine, graph):
        result = engine.layout(graph.nodes, graph.edges)
        assert result.iterations == 300

    def test_custom_iteration_count(self, engine, graph, layout_config):
        config = layout_config.model_copy(update={"iterations": 17})
        result = engine.layout(graph.nodes, graph.edges, config)
        assert result.iterations == 17

    def test_every_node_gets_a_finite_position(self, engine, graph):
        result = engine.layout(graph.nodes, graph.edges)

        assert len(result.nodes) == len(graph.nodes)
        assert all(node.is_positioned for node in result.nodes)
        assert result.unpositioned_ids == ()

    def test_node_ids_and_order_are_preserved(self, engine, graph):
        result = engine.layout(graph.nodes, graph.edges)
        assert [n.id for n in result.nodes] == [n.id for n in graph.nodes]

    def test_input_nodes_are_not_mutated(self, engine, graph):
        engine.layout(graph.nodes, graph.edges)
        assert all(node.position is None for node in graph.nodes)

    def test_layout_is_deterministic(self, engine):
        graph = _larger_graph()
        first = engine.layout(graph.nodes, graph.edges)
        second = engine.layout(graph.nodes, graph.edges)

        assert [n.position for n in first.nodes] == [n.position for n in second.nodes]

    def test_nodes_are_spread_apart(self, engine):
        graph = _larger_graph()
        result = engine.layout(graph.nodes, graph.edges)
        points = [n.position for n in result.nodes]

        closest = min(
            math.dist(points[i], points[j])
            for i in range(len(points)) for j in range(i + 1, len(points))
        )
        assert closest > 1.0

    def test_layout_is_centered_on_configured_point(self, engine, graph, layout_config):
        result = engine.layout(graph.nodes, graph.edges)
        xs = [n.x for n in result.nodes]
        ys = [n.y for n in result.nodes]

        assert sum(xs) / len(xs) == pytest.approx(layout_config.center_x, abs=50)
        assert sum(ys) / len(ys) == pytest.approx(layout_config.center_y, abs=50)

    def test_isolated_node_is_positioned(self, engine, alice):
        graph = GraphModel().build([alice, Contact(id="z", name="Zed")])
        result = engine.layout(graph.nodes, graph.edges)

        loner = next(n for n in result.nodes if n.id == "contact:z")
        assert loner.is_positioned

    def test_single_node(self, engine):
        graph = GraphModel().build([Contact(id="z", name="Zed")])
        result = engine.layout(graph.nodes, graph.edges)

        assert len(result.nodes) == 1
        assert result.nodes[0].is_positioned

    def test_unknown_edges_are_ignored(self, engine, graph):
        from contactgraph.shared.models import GraphEdge

        edges = graph.edges + (GraphEdge(source_id="contact:a", target_id="tag:missing"),)
        result = engine.layout(graph.nodes, edges)
        assert all(node.is_positioned for node in result.nodes)

    def test_zero_iterations_keeps_start_positions(self, engine, graph, layout_config):
        config = layout_config.model_copy(update={"iterations": 0})
        result = engine.layout(graph.nodes, graph.edges, config)

        assert result.iterations == 0
        assert all(node.is_positioned for node in result.nodes)

    def test_records_layout_metrics(self, engine, graph):
        engine.layout(graph.nodes, graph.edges)
        stats = get_metrics().get_timer_stats("layout_duration")
        assert stats["count"] == 1
        assert get_metrics().get_gauge("layout_nodes") == len(graph.nodes)


# =============================================================================
# BOUNDS
# =============================================================================

class TestLayoutBounds:

    def test_bounds_contain_every_node_with_padding(self, engine):
        graph = _larger_graph()
        result = engine.layout(graph.nodes, graph.edges)
        padding = engine.config.padding

        for node in result.nodes:
            assert result.bounds.contains(node.x, node.y, margin=padding - 1e-9)

    def test_bounds_are_tight_plus_padding(self, engine, graph):
        result = engine.layout(graph.nodes, graph.edges)
        padding = engine.config.padding

        assert result.bounds.min_x == pytest.approx(min(n.x for n in result.nodes) - padding)
        assert result.bounds.max_y == pytest.approx(max(n.y for n in result.nodes) + padding)

    def test_empty_input_uses_default_bounds(self, engine):
        result = engine.layout([], [])

        assert result.nodes == ()
        assert result.bounds == LayoutBounds(min_x=0, min_y=0, max_x=400, max_y=600)
        assert result.bounds.area > 0

    def test_unpositioned_nodes_are_excluded_from_bounds(self, engine):
        nodes = [
            GraphNode.for_tag("a").with_position((0.0, 0.0)),
            GraphNode.for_tag("b").with_position((10.0, 20.0)),
            GraphNode.for_tag("c").with_position((float("inf"), 5.0)),
        ]
        bounds = engine.compute_bounds(nodes)

        assert bounds == LayoutBounds(min_x=-100, min_y=-100, max_x=110, max_y=120)

    def test_no_positioned_nodes_yields_default_bounds(self, engine):
        bounds = engine.compute_bounds([GraphNode.for_tag("a")])
        assert bounds == engine.config.default_bounds

    def test_single_node_bounds_have_positive_area(self, engine):
        graph = GraphModel().build([Contact(id="z", name="Zed")])
        result = engine.layout(graph.nodes, graph.edges)
        assert result.bounds.width == pytest.approx(2 * engine.config.padding)


class TestLayoutConfig:

    def test_alpha_decay_reaches_alpha_min(self):
        config = LayoutConfig(iterations=300, alpha_min=0.001)
        assert (1 - config.alpha_decay) ** 300 == pytest.approx(0.001)

    def test_defaults_follow_settings(self, settings):
        config = LayoutConfig.from_settings(settings)

        assert config.iterations == 300
        assert config.center_x == 200
        assert config.center_y == 300
        assert config.collision_radius == 45
