"""
Viewport state for the graph canvas.

The controller owns a live transform (what is on screen right now) and a
saved baseline that gestures are applied relative to. Pinch and pan
updates are always expressed against the baseline captured when the
gesture began; ``commit_gesture`` folds the live transform back into it.
"""

import math
import random
from typing import Iterable, Optional

from ...shared import get_logger
from ...shared.models.graph import GraphNode, LayoutBounds
from .animation import TransformAnimator, create_animator
from .models import ScreenGeometry, ViewportConfig, ViewportTransform


def centering_transform(node: GraphNode,
                        screen: ScreenGeometry,
                        bounds: LayoutBounds,
                        scale: float) -> Optional[ViewportTransform]:
    """
    Transform that puts ``node`` on the screen target point at ``scale``.

    Returns None when the node has no finite position.
    """
    if not node.is_positioned:
        return None
    target_x, target_y = screen.target_point
    center_x, center_y = bounds.center
    return ViewportTransform(
        scale=scale,
        translate_x=target_x - scale * (node.x - center_x) - center_x,
        translate_y=target_y - scale * (node.y - center_y) - center_y,
    )


class ViewportController:
    """
    Pinch, pan and programmatic centering of the graph canvas.

    Programmatic moves (``center_on``, ``reset``) set the baseline to their
    target straight away and let the animator carry the live transform
    there over subsequent ``tick`` calls. Starting a gesture while an
    animation is running stops it where it is.
    """

    def __init__(self,
                 config: Optional[ViewportConfig] = None,
                 animator: Optional[TransformAnimator] = None):
        """
        Initialize the viewport controller.

        Args:
            config: Zoom limits and animator choice, defaults to the configured settings
            animator: Explicit animator, overrides ``config.animator``
        """
        self.config = config or ViewportConfig.from_settings()
        self.animator = animator or create_animator(self.config.animator)
        self.logger = get_logger(__name__)

        self._rng = random.Random(self.config.seed)
        self._live = ViewportTransform.identity()
        self._saved = ViewportTransform.identity()
        self._in_gesture = False

    @property
    def transform(self) -> ViewportTransform:
        """Live transform to draw with."""
        return self._live

    @property
    def saved(self) -> ViewportTransform:
        """Baseline gestures are applied relative to."""
        return self._saved

    @property
    def is_animating(self) -> bool:
        return self.animator.is_running

    # ========== Gestures ==========

    def apply_pinch(self, delta: float) -> ViewportTransform:
        """
        Scale relative to the gesture-start scale, clamped to the zoom limits.

        Non-finite or non-positive deltas are ignored.
        """
        if not math.isfinite(delta) or delta <= 0:
            self.logger.debug(f"Ignoring pinch delta {delta}")
            return self._live
        self._begin_gesture()
        scale = self.config.clamp(self._saved.scale * delta)
        self._live = self._live.model_copy(update={'scale': scale})
        return self._live

    def apply_pan(self, dx: float, dy: float) -> ViewportTransform:
        """Translate relative to the gesture-start translation."""
        if not (math.isfinite(dx) and math.isfinite(dy)):
            self.logger.debug(f"Ignoring pan delta ({dx}, {dy})")
            return self._live
        self._begin_gesture()
        self._live = self._live.model_copy(update={
            'translate_x': self._saved.translate_x + dx,
            'translate_y': self._saved.translate_y + dy,
        })
        return self._live

    def commit_gesture(self) -> ViewportTransform:
        """Make the live transform the new baseline."""
        self._saved = self._live
        self._in_gesture = False
        return self._saved

    def _begin_gesture(self) -> None:
        if self._in_gesture:
            return
        self._in_gesture = True
        if self.animator.is_running:
            self.animator.cancel()
            self._saved = self._live
            self.logger.debug("Gesture interrupted centering animation")

    # ========== Programmatic moves ==========

    def center_on(self, node: GraphNode, screen: ScreenGeometry, bounds: LayoutBounds) -> bool:
        """
        Animate so that ``node`` ends up on the screen target point.

        Args:
            node: Node to center on
            screen: Current screen geometry
            bounds: Layout bounds whose center is the scaling pivot

        Returns:
            False (with no state change) when the node has no finite position
        """
        # A running animation keeps heading for its target scale
        scale = self._saved.scale if self.animator.is_running else self._live.scale
        target = centering_transform(node, screen, bounds, scale)
        if target is None:
            self.logger.warning(f"Cannot center on {node.id}: node has no position")
            return False
        self._animate_to(target)
        return True

    def center_on_node_id(self,
                          node_id: str,
                          nodes: Iterable[GraphNode],
                          screen: ScreenGeometry,
                          bounds: LayoutBounds) -> bool:
        """Center on a node looked up by id; unknown ids return False."""
        node = next((n for n in nodes if n.id == node_id), None)
        if node is None:
            self.logger.warning(f"Cannot center on {node_id}: node not found")
            return False
        return self.center_on(node, screen, bounds)

    def reset(self, nodes: Iterable[GraphNode], screen: ScreenGeometry, bounds: LayoutBounds) -> bool:
        """
        Return to scale 1 centered on a randomly chosen positioned node.

        With no positioned node the view animates back to the identity
        transform and False is returned.
        """
        candidates = [node for node in nodes if node.is_positioned]
        if not candidates:
            self.logger.info("No positioned nodes, resetting viewport to identity")
            self._animate_to(ViewportTransform.identity())
            return False

        node = self._rng.choice(candidates)
        self.logger.debug(f"Resetting viewport onto {node.id}")
        self._animate_to(centering_transform(node, screen, bounds, 1.0))
        return True

    def snap_to_identity(self) -> None:
        """Drop any animation and restore the identity transform."""
        self.animator.cancel()
        self._live = ViewportTransform.identity()
        self._saved = self._live
        self._in_gesture = False

    def tick(self, dt: float) -> ViewportTransform:
        """Advance a running animation by ``dt`` seconds."""
        if self.animator.is_running:
            self._live = self.animator.step(dt)
        return self._live

    def _animate_to(self, target: ViewportTransform) -> None:
        self._saved = target
        self._in_gesture = False
        self._live = self.animator.start(self._live, target)
