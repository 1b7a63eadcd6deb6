"""
Shared components for ContactGraph.

Contains common models, configuration, exceptions and infrastructure used
by the graph engine and the outer layers:

- Contact and graph data models
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (logging, metrics, contact cache)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "FrozenModel", "Contact",
    "GraphNode", "GraphEdge", "LayoutBounds", "NodeKind",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "ContactGraphError", "ConfigurationError",
    "ContactSourceError", "CacheError", "RenderError",

    # From infrastructure
    "CachedContactData", "ContactCache", "get_contact_cache",
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics", "timed_operation",
]
