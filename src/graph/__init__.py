"""Graph module for component dependency management.

This module provides the dependency graph engine that tracks components,
their dependency edges and installed state, and the validator that audits it.
"""

from src.graph.dependency_graph import CycleDetectedError, DependencyGraph
from src.graph.events import EventKind, GraphEvent
from src.graph.validator import GraphValidator, ValidationReport

__all__ = [
    "CycleDetectedError",
    "DependencyGraph",
    "EventKind",
    "GraphEvent",
    "GraphValidator",
    "ValidationReport",
]
