"""
Transform animators for programmatic viewport moves.

The viewport controller decides where the view should end up; an animator
decides how the live transform gets there over time. Starting a new
animation while one is running redirects it to the new target.
"""

from abc import ABC, abstractmethod
from typing import Optional

from .models import AnimatorKind, ViewportTransform

MIN_ANIMATED_SCALE = 1e-6


class TransformAnimator(ABC):
    """Abstract base class for transform animators."""

    @abstractmethod
    def start(self, current: ViewportTransform, target: ViewportTransform) -> ViewportTransform:
        """Begin (or redirect) an animation and return the live transform."""
        raise NotImplementedError("Subclasses must implement start()")

    @abstractmethod
    def step(self, dt: float) -> ViewportTransform:
        """Advance by ``dt`` seconds and return the live transform."""
        raise NotImplementedError("Subclasses must implement step()")

    @abstractmethod
    def cancel(self) -> None:
        """Stop animating, leaving the live transform where it is."""
        raise NotImplementedError("Subclasses must implement cancel()")

    @property
    @abstractmethod
    def is_running(self) -> bool:
        raise NotImplementedError("Subclasses must implement is_running")


class ImmediateAnimator(TransformAnimator):
    """Jumps straight to the target."""

    def __init__(self):
        self._current: Optional[ViewportTransform] = None

    def start(self, current: ViewportTransform, target: ViewportTransform) -> ViewportTransform:
        self._current = target
        return target

    def step(self, dt: float) -> ViewportTransform:
        return self._current or ViewportTransform.identity()

    def cancel(self) -> None:
        pass

    @property
    def is_running(self) -> bool:
        return False


class SpringAnimator(TransformAnimator):
    """
    Damped spring on each transform component.

    Velocity is kept when the target changes mid-flight, so redirected
    animations stay smooth. The animation settles once every component is
    within the rest thresholds, at which point it snaps onto the target.
    """

    # Default spring parameters
    DEFAULT_DAMPING = 15.0
    DEFAULT_STIFFNESS = 100.0
    DEFAULT_MASS = 1.0
    REST_DISPLACEMENT = 0.01
    REST_SPEED = 0.01
    MAX_SUBSTEP = 1 / 240

    def __init__(self,
                 damping: float = DEFAULT_DAMPING,
                 stiffness: float = DEFAULT_STIFFNESS,
                 mass: float = DEFAULT_MASS,
                 rest_displacement: float = REST_DISPLACEMENT,
                 rest_speed: float = REST_SPEED):
        self.damping = damping
        self.stiffness = stiffness
        self.mass = mass
        self.rest_displacement = rest_displacement
        self.rest_speed = rest_speed

        self._values = [1.0, 0.0, 0.0]
        self._velocities = [0.0, 0.0, 0.0]
        self._targets = [1.0, 0.0, 0.0]
        self._running = False

    def start(self, current: ViewportTransform, target: ViewportTransform) -> ViewportTransform:
        if not self._running:
            self._values = [current.scale, current.translate_x, current.translate_y]
            self._velocities = [0.0, 0.0, 0.0]
        self._targets = [target.scale, target.translate_x, target.translate_y]
        self._running = True
        return self._current()

    def step(self, dt: float) -> ViewportTransform:
        if not self._running or dt <= 0:
            return self._current()

        remaining = dt
        while remaining > 0 and self._running:
            h = min(remaining, self.MAX_SUBSTEP)
            self._integrate(h)
            remaining -= h
            if self._at_rest():
                self._values = list(self._targets)
                self._velocities = [0.0, 0.0, 0.0]
                self._running = False
        return self._current()

    def cancel(self) -> None:
        self._velocities = [0.0, 0.0, 0.0]
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def _integrate(self, h: float) -> None:
        # Semi-implicit Euler keeps the spring stable at small steps
        for i in range(3):
            displacement = self._values[i] - self._targets[i]
            acceleration = (-self.stiffness * displacement - self.damping * self._velocities[i]) / self.mass
            self._velocities[i] += acceleration * h
            self._values[i] += self._velocities[i] * h

    def _at_rest(self) -> bool:
        return all(
            abs(self._values[i] - self._targets[i]) < self.rest_displacement
            and abs(self._velocities[i]) < self.rest_speed
            for i in range(3)
        )

    def _current(self) -> ViewportTransform:
        return ViewportTransform(
            scale=max(self._values[0], MIN_ANIMATED_SCALE),
            translate_x=self._values[1],
            translate_y=self._values[2],
        )


def create_animator(kind: AnimatorKind) -> TransformAnimator:
    """Create the animator for a configured kind."""
    if kind == AnimatorKind.IMMEDIATE:
        return ImmediateAnimator()
    return SpringAnimator()
