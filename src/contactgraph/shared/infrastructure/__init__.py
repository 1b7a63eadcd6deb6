"""
Shared infrastructure components for ContactGraph.

Provides:
- Centralized logging setup
- Metrics collection for graph builds, layouts and interactions
- Persistent contact cache behind a process-wide instance
"""

from .cache.contact_cache import CachedContactData, ContactCache, get_contact_cache
from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics, timed_operation

__all__ = [
    # Cache
    "CachedContactData",
    "ContactCache",
    "get_contact_cache",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
    "timed_operation",
]
