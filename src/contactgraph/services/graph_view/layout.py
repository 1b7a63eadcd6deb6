"""
Force-directed layout for the contact graph.

The layout is resolved synchronously before anything is displayed: a fixed
number of simulation ticks, each applying a link force, a many-body force,
a centering force and a collision force, followed by a bounds scan. A fixed
tick count keeps latency bounded; convergence is not checked.

Node positions and velocities live in numpy arrays for the duration of a
run. The many-body and collision terms are computed pairwise, which is
O(n^2) per tick and comfortable for contact books of a few hundred nodes;
larger graphs would need a spatial index (e.g. a Barnes-Hut quadtree).
"""

import math
import time
from typing import Iterable, List, Optional, Sequence

import numpy as np

from ...shared import get_logger, get_metrics
from ...shared.models.graph import GraphEdge, GraphNode, LayoutBounds
from .models import LayoutConfig, LayoutResult

# Golden-angle increment for phyllotaxis start positions
INITIAL_ANGLE = math.pi * (3 - math.sqrt(5))
JIGGLE_SCALE = 1e-6


class LayoutEngine:
    """
    Assigns 2-D coordinates to graph nodes.

    Runs are deterministic for a given node order, edge set and config:
    starting positions follow a phyllotaxis spiral and the jiggle used to
    separate coincident points comes from a seeded generator.
    """

    def __init__(self, config: Optional[LayoutConfig] = None):
        """
        Initialize the layout engine.

        Args:
            config: Simulation parameters, defaults to the configured settings
        """
        self.config = config or LayoutConfig.from_settings()
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

    def layout(self,
               nodes: Sequence[GraphNode],
               edges: Iterable[GraphEdge],
               config: Optional[LayoutConfig] = None) -> LayoutResult:
        """
        Position every node and compute the padded bounds.

        Args:
            nodes: Nodes to lay out; finite existing positions are used as starting points
            edges: Contact-tag edges pulling linked nodes together
            config: Optional override of the engine's config for this run

        Returns:
            Positioned nodes, bounds and the number of ticks run
        """
        config = config or self.config
        nodes = list(nodes)
        edges = tuple(edges)
        start_time = time.perf_counter()

        if not nodes:
            self.logger.info("No nodes to lay out, using default bounds")
            return LayoutResult(edges=edges, bounds=config.default_bounds, iterations=config.iterations)

        simulation = _ForceSimulation(nodes, edges, config, self.logger)
        self.logger.info(f"Calculating graph layout for {len(nodes)} nodes...")
        ticks = simulation.run()

        positioned, missing = self._collect_positions(nodes, simulation.positions)
        bounds = self.compute_bounds(positioned, config)

        duration = time.perf_counter() - start_time
        self.logger.info(
            f"Graph layout calculated in {duration * 1000:.1f} ms, bounds "
            f"({bounds.min_x:.1f}, {bounds.min_y:.1f}, {bounds.max_x:.1f}, {bounds.max_y:.1f})"
        )
        self.metrics.record_layout(len(nodes), ticks, duration)

        return LayoutResult(
            nodes=tuple(positioned),
            edges=edges,
            bounds=bounds,
            iterations=ticks,
            unpositioned_ids=tuple(missing),
        )

    def compute_bounds(self, nodes: Iterable[GraphNode], config: Optional[LayoutConfig] = None) -> LayoutBounds:
        """
        Minimal rectangle enclosing every positioned node, expanded by the padding.

        Nodes without a finite position are ignored; when none remain the
        configured default bounds are returned.
        """
        config = config or self.config
        points = [node.position for node in nodes if node.is_positioned]
        if not points:
            return config.default_bounds

        xs = [p[0] for p in points]
        ys = [p[1] for p in points]
        return LayoutBounds(
            min_x=min(xs) - config.padding,
            min_y=min(ys) - config.padding,
            max_x=max(xs) + config.padding,
            max_y=max(ys) + config.padding,
        )

    def _collect_positions(self, nodes: List[GraphNode], positions: np.ndarray):
        """Copy simulated positions onto the nodes, clearing any that are not finite."""
        positioned = []
        missing = []
        for node, (x, y) in zip(nodes, positions):
            if math.isfinite(x) and math.isfinite(y):
                positioned.append(node.with_position((float(x), float(y))))
            else:
                self.logger.warning(f"Node {node.id} has no finite position after layout, skipping it")
                positioned.append(node.with_position(None))
                missing.append(node.id)
        return positioned, missing


class _ForceSimulation:
    """One run of the force simulation over fixed arrays."""

    def __init__(self, nodes: List[GraphNode], edges: Sequence[GraphEdge], config: LayoutConfig, logger):
        self.config = config
        self.logger = logger
        self.n = len(nodes)
        self.rng = np.random.default_rng(config.seed)

        self.positions = self._initial_positions(nodes)
        self.velocities = np.zeros_like(self.positions)
        self.radii = np.full(self.n, config.collision_radius, dtype=float)

        self.sources, self.targets = self._link_indices(nodes, edges)
        counts = np.bincount(np.concatenate([self.sources, self.targets]), minlength=self.n)
        # Lower-degree endpoints move more; a tag shared by many contacts stays put
        if len(self.sources):
            self.bias = counts[self.sources] / (counts[self.sources] + counts[self.targets])
        else:
            self.bias = np.zeros(0)

        self.alpha = 1.0
        self.alpha_decay = config.alpha_decay

    def run(self) -> int:
        """Run exactly ``config.iterations`` ticks."""
        for _ in range(self.config.iterations):
            self.tick()
        return self.config.iterations

    def tick(self) -> None:
        """Cool alpha, apply the four forces and integrate velocities."""
        self.alpha += (0.0 - self.alpha) * self.alpha_decay

        self._apply_link_force()
        self._apply_many_body_force()
        self._apply_center_force()
        self._apply_collision_force()

        self.velocities *= 1 - self.config.velocity_decay
        self.positions += self.velocities

    # ========== Setup ==========

    def _initial_positions(self, nodes: List[GraphNode]) -> np.ndarray:
        """Keep finite positions; place the rest on a phyllotaxis spiral."""
        positions = np.empty((self.n, 2), dtype=float)
        for i, node in enumerate(nodes):
            if node.is_positioned:
                positions[i] = node.position
            else:
                radius = self.config.initial_radius * math.sqrt(0.5 + i)
                angle = i * INITIAL_ANGLE
                positions[i] = (radius * math.cos(angle), radius * math.sin(angle))
        return positions

    def _link_indices(self, nodes: List[GraphNode], edges: Sequence[GraphEdge]):
        index = {node.id: i for i, node in enumerate(nodes)}
        sources, targets = [], []
        for edge in edges:
            source = index.get(edge.source_id)
            target = index.get(edge.target_id)
            if source is None or target is None:
                self.logger.warning(f"Skipping edge {edge.source_id} -> {edge.target_id} (nodes not found)")
                continue
            sources.append(source)
            targets.append(target)
        return np.array(sources, dtype=int), np.array(targets, dtype=int)

    def _jiggle(self, size) -> np.ndarray:
        return (self.rng.random(size) - 0.5) * JIGGLE_SCALE

    def _jiggle_pairwise(self, diff: np.ndarray) -> None:
        """Replace zero pair offsets with tiny antisymmetric random offsets."""
        for axis in range(2):
            component = diff[:, :, axis]
            rows, cols = np.nonzero(np.triu(component == 0, k=1))
            if len(rows):
                values = self._jiggle(len(rows))
                component[rows, cols] = values
                component[cols, rows] = -values

    # ========== Forces ==========

    def _apply_link_force(self) -> None:
        """Pull each contact-tag pair towards the rest distance."""
        if not len(self.sources):
            return
        predicted = self.positions + self.velocities
        delta = predicted[self.targets] - predicted[self.sources]

        zero = delta == 0
        if zero.any():
            delta[zero] = self._jiggle(int(zero.sum()))

        length = np.hypot(delta[:, 0], delta[:, 1])
        factor = (length - self.config.link_distance) / length * self.alpha * self.config.link_strength
        delta *= factor[:, None]

        np.add.at(self.velocities, self.targets, -delta * self.bias[:, None])
        np.add.at(self.velocities, self.sources, delta * (1 - self.bias)[:, None])

    def _apply_many_body_force(self) -> None:
        """Push every pair apart with strength inversely proportional to distance."""
        if self.n < 2 or self.config.charge_strength == 0:
            return
        # diff[i, j] points from node i to node j
        diff = self.positions[None, :, :] - self.positions[:, None, :]
        self._jiggle_pairwise(diff)

        dist2 = np.einsum('ijk,ijk->ij', diff, diff)
        min2 = self.config.charge_distance_min ** 2
        close = dist2 < min2
        dist2[close] = np.sqrt(min2 * dist2[close])
        np.fill_diagonal(dist2, np.inf)

        weight = self.config.charge_strength * self.alpha / dist2
        self.velocities += np.einsum('ij,ijk->ik', weight, diff)

    def _apply_center_force(self) -> None:
        """Translate all nodes so their mean sits on the configured center."""
        shift = self.positions.mean(axis=0) - (self.config.center_x, self.config.center_y)
        self.positions -= shift

    def _apply_collision_force(self) -> None:
        """Separate nodes whose collision circles overlap."""
        if self.n < 2 or self.config.collision_radius == 0:
            return
        predicted = self.positions + self.velocities
        # diff[i, j] points from node j to node i
        diff = predicted[:, None, :] - predicted[None, :, :]
        self._jiggle_pairwise(diff)

        reach = self.radii[:, None] + self.radii[None, :]
        dist2 = np.einsum('ijk,ijk->ij', diff, diff)
        overlap = dist2 < reach ** 2
        np.fill_diagonal(overlap, False)
        if not overlap.any():
            return

        dist = np.sqrt(np.where(overlap, dist2, 1.0))
        push = np.where(overlap, (reach - dist) / dist * self.config.collision_strength, 0.0)

        r2 = self.radii ** 2
        # Share of the separation taken by node i; equal radii split it evenly
        share = r2[None, :] / (r2[:, None] + r2[None, :])
        self.velocities += np.einsum('ij,ijk->ik', push * share, diff)
