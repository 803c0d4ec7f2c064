"""Dependency graph engine for tracking components and installed state.

This module provides the DependencyGraph class which keeps forward and
reverse dependency edges together with the set of installed components, and
applies the install and remove cascades over them.
"""

from collections.abc import Iterable

import structlog

from src.graph.events import EventKind, GraphEvent

logger = structlog.get_logger(__name__)


class CycleDetectedError(Exception):
    """Exception raised when a new edge would make a component depend on itself.

    Attributes:
        parent: Component the edge starts from
        dependency: Component the edge points to
    """

    def __init__(self, parent: str, dependency: str):
        """Initialize the exception with the offending edge.

        Args:
            parent: Component the rejected edge starts from
            dependency: Component the rejected edge points to
        """
        self.parent = parent
        self.dependency = dependency
        self.message = f"{dependency} depends on {parent}"
        super().__init__(self.message)


class DependencyGraph:
    """Dependency graph of named components and their installed state.

    Forward edges (``depends_on``) and reverse edges (``depended_by``) are
    always exact inverses of each other. Edges are only ever added; the
    installed set is the only state that shrinks.

    Thread-safety:
        This class is NOT thread-safe. Commands are expected to be applied
        one at a time from a single thread.

    Example:
        >>> graph = DependencyGraph()
        >>> graph.declare_dependency("TELNET", ["TCPIP", "NETCARD"])
        >>> graph.install("TELNET")  # Installs NETCARD, TCPIP, TELNET
        >>> graph.remove("TCPIP")  # TCPIP is still needed
        >>> graph.remove("TELNET")  # Removes TELNET, NETCARD, TCPIP
    """

    def __init__(self):
        """Initialize an empty dependency graph."""
        self.depends_on: dict[str, set[str]] = {}
        self.depended_by: dict[str, set[str]] = {}
        self.installed: set[str] = set()

        logger.debug("dependency_graph_initialized")

    def declare_dependency(self, parent: str, dependencies: Iterable[str]) -> list[GraphEvent]:
        """Declare that ``parent`` depends on each of ``dependencies``.

        Dependencies are processed in the given order. The first edge that
        would make a component depend on itself, or close a direct two-node
        cycle, stops the whole declaration; edges accepted before it stay.

        Args:
            parent: Component that has the dependencies
            dependencies: One or more components ``parent`` depends on

        Returns:
            Events for every accepted edge and the rejected one, if any

        Raises:
            ValueError: If no dependency is given
        """
        dependencies = list(dependencies)
        if not dependencies:
            msg = f"Declaring dependencies of {parent} requires at least one dependency"
            raise ValueError(msg)

        events: list[GraphEvent] = []
        for dependency in dependencies:
            try:
                self._check_edge(parent, dependency)
            except CycleDetectedError as e:
                logger.warning(
                    "cyclic_dependency_rejected",
                    parent=e.parent,
                    dependency=e.dependency,
                    skipped=len(dependencies) - len(events) - 1,
                )
                events.append(GraphEvent(EventKind.CYCLE_REJECTED, parent, dependency))
                return events

            self.depends_on.setdefault(parent, set()).add(dependency)
            self.depended_by.setdefault(dependency, set()).add(parent)
            events.append(GraphEvent(EventKind.DECLARED, parent, dependency))

            logger.debug("dependency_declared", parent=parent, dependency=dependency)

        return events

    def _check_edge(self, parent: str, dependency: str) -> None:
        """Reject self dependencies and direct back edges.

        Only an existing ``dependency -> parent`` edge is detected; longer
        cycles are reported by GraphValidator instead.

        Raises:
            CycleDetectedError: If the edge would close a cycle
        """
        if parent == dependency or parent in self.depends_on.get(dependency, set()):
            raise CycleDetectedError(parent, dependency)

    def install(self, component: str) -> list[GraphEvent]:
        """Install a component after installing its dependencies.

        A dependency already on the current install path is reported as
        CYCLE_SKIPPED instead of being descended into again.

        Args:
            component: Component to install

        Returns:
            Events in the order components were installed or found installed
        """
        events: list[GraphEvent] = []
        self._install(component, events, set())

        logger.info(
            "install_complete",
            component=component,
            newly_installed=sum(1 for e in events if e.kind is EventKind.INSTALLED),
        )
        return events

    def _install(self, component: str, events: list[GraphEvent], in_progress: set[str]) -> None:
        # Longer cycles pass the declare-time check; stop at a component still on the path
        in_progress.add(component)
        for dependency in sorted(self.depends_on.get(component, set())):
            if dependency in self.installed:
                events.append(GraphEvent(EventKind.ALREADY_INSTALLED, dependency))
            elif dependency in in_progress:
                logger.warning("install_cycle_skipped", component=component, dependency=dependency)
                events.append(GraphEvent(EventKind.CYCLE_SKIPPED, component, dependency))
            else:
                self._install(dependency, events, in_progress)
        in_progress.discard(component)

        if component in self.installed:
            events.append(GraphEvent(EventKind.ALREADY_INSTALLED, component))
            return

        self.installed.add(component)
        events.append(GraphEvent(EventKind.INSTALLED, component))
        logger.debug("component_installed", component=component)

    def remove(self, component: str) -> list[GraphEvent]:
        """Remove a component and the dependencies nothing else needs.

        The removal is refused when another installed component still depends
        on ``component``. Dependencies are removed along with it unless
        something outside this removal still needs them; those are kept and
        reported as STILL_NEEDED.

        Args:
            component: Component to remove

        Returns:
            REMOVED and STILL_NEEDED events in cascade order (each component
            before its dependencies), or a single NOT_INSTALLED or
            STILL_NEEDED event when nothing was removed
        """
        if component not in self.installed:
            logger.info("component_not_installed", component=component)
            return [GraphEvent(EventKind.NOT_INSTALLED, component)]

        to_be_removed = {component}
        if self._still_needed(component, to_be_removed):
            logger.info(
                "component_still_needed",
                component=component,
                dependents=sorted(self.depended_by.get(component, set()) & self.installed),
            )
            return [GraphEvent(EventKind.STILL_NEEDED, component)]

        events: list[GraphEvent] = []
        self._remove_cascade(component, to_be_removed, events)

        logger.info(
            "remove_complete",
            component=component,
            removed=sum(1 for e in events if e.kind is EventKind.REMOVED),
        )
        return events

    def _still_needed(self, component: str, to_be_removed: set[str]) -> bool:
        return any(
            dependent in self.installed and dependent not in to_be_removed
            for dependent in self.depended_by.get(component, set())
        )

    def _remove_cascade(
        self,
        component: str,
        to_be_removed: set[str],
        events: list[GraphEvent],
    ) -> None:
        self.installed.discard(component)
        events.append(GraphEvent(EventKind.REMOVED, component))
        logger.debug("component_removed", component=component)

        for dependency in sorted(self.depends_on.get(component, set())):
            if dependency not in self.installed:
                continue

            to_be_removed.add(dependency)
            if self._still_needed(dependency, to_be_removed):
                to_be_removed.discard(dependency)
                logger.info("dependency_kept", component=dependency, required_by=component)
                events.append(GraphEvent(EventKind.STILL_NEEDED, dependency))
                continue

            self._remove_cascade(dependency, to_be_removed, events)

    def list_installed(self) -> list[str]:
        """Return the installed components in name order."""
        return sorted(self.installed)

    def is_installed(self, component: str) -> bool:
        """Check whether a component is currently installed."""
        return component in self.installed

    def dependencies_of(self, component: str) -> set[str]:
        """Return a copy of the direct dependencies of a component."""
        return set(self.depends_on.get(component, set()))

    def dependents_of(self, component: str) -> set[str]:
        """Return a copy of the components directly depending on a component."""
        return set(self.depended_by.get(component, set()))

    def components(self) -> set[str]:
        """Return every component identifier the graph has seen."""
        return set(self.depends_on) | set(self.depended_by) | self.installed

    def get_stats(self) -> dict[str, int]:
        """Get statistics about the current graph state.

        Returns:
            Dictionary with graph statistics including:
                - total_components: Number of distinct components seen
                - total_dependencies: Number of dependency edges
                - installed: Number of installed components
        """
        stats = {
            "total_components": len(self.components()),
            "total_dependencies": sum(len(deps) for deps in self.depends_on.values()),
            "installed": len(self.installed),
        }

        logger.debug("graph_stats_retrieved", **stats)

        return stats
