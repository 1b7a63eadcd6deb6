"""
Graph View Service for ContactGraph.

Builds the contact/hashtag graph, lays it out with a force simulation and
manages the interactive viewport and highlight state on top of it.
"""

from .graph_model import ContactGraph, GraphModel
from .layout import LayoutEngine
from .viewport import ViewportController, centering_transform
from .selection import SelectionIndex
from .session import GraphSession
from .animation import ImmediateAnimator, SpringAnimator, TransformAnimator
from .models import (
    AnimatorKind, LayoutConfig, LayoutResult, RenderPayload, ScreenGeometry,
    SelectionEvent, SelectionMode, SelectionState, TagSelectionPolicy,
    TapResult, ViewportConfig, ViewportTransform
)

__all__ = [
    "ContactGraph",
    "GraphModel",
    "LayoutEngine",
    "ViewportController",
    "centering_transform",
    "SelectionIndex",
    "GraphSession",
    "ImmediateAnimator",
    "SpringAnimator",
    "TransformAnimator",
    "AnimatorKind",
    "LayoutConfig",
    "LayoutResult",
    "RenderPayload",
    "ScreenGeometry",
    "SelectionEvent",
    "SelectionMode",
    "SelectionState",
    "TagSelectionPolicy",
    "TapResult",
    "ViewportConfig",
    "ViewportTransform",
]
