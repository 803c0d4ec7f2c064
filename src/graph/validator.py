"""Graph validation with edge symmetry, cycle and install closure checks.

This module audits a DependencyGraph after commands have been applied:
forward and reverse edges must mirror each other, the dependency relation
must be acyclic, and every installed component should have its direct
dependencies installed.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from src.graph.dependency_graph import DependencyGraph

logger = structlog.get_logger(__name__)


@dataclass
class ValidationReport:
    """Report containing validation results for a dependency graph.

    Attributes:
        is_valid: Whether the graph passed all validation checks
        errors: List of error messages (critical issues)
        warnings: List of warning messages (potential issues)
        cycles: List of detected cycles, each represented as a list of components
        asymmetric_edges: Edges present in only one of the two edge maps
        unsatisfied: Installed components mapped to their missing dependencies
    """

    is_valid: bool = True
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    asymmetric_edges: set[tuple[str, str]] = field(default_factory=set)
    unsatisfied: dict[str, set[str]] = field(default_factory=dict)

    def add_error(self, message: str) -> None:
        """Add an error message and mark validation as failed."""
        self.errors.append(message)
        self.is_valid = False
        logger.error("validation_error", message=message)

    def add_warning(self, message: str) -> None:
        """Add a warning message without failing validation."""
        self.warnings.append(message)
        logger.warning("validation_warning", message=message)

    def summary(self) -> str:
        """Generate a human-readable summary of the validation report."""
        lines = []
        lines.append(f"Validation Status: {'PASS' if self.is_valid else 'FAIL'}")
        lines.append(f"Errors: {len(self.errors)}")
        lines.append(f"Warnings: {len(self.warnings)}")
        lines.append(f"Cycles: {len(self.cycles)}")
        lines.append(f"Asymmetric Edges: {len(self.asymmetric_edges)}")
        lines.append(f"Unsatisfied Components: {len(self.unsatisfied)}")

        if self.errors:
            lines.append("\nErrors:")
            lines.extend(f"  - {error}" for error in self.errors)

        if self.warnings:
            lines.append("\nWarnings:")
            lines.extend(f"  - {warning}" for warning in self.warnings)

        if self.cycles:
            lines.append("\nCycles Detected:")
            for i, cycle in enumerate(self.cycles, 1):
                cycle_path = " -> ".join(cycle)
                lines.append(f"  {i}. {cycle_path}")

        return "\n".join(lines)


class GraphValidator:
    """Validator for dependency graphs with detailed error reporting.

    The declare-time check in DependencyGraph only rejects self dependencies
    and direct back edges, so longer cycles can only be found here.
    """

    def __init__(self):
        """Initialize the graph validator."""
        self._visited: set[str] = set()
        self._rec_stack: set[str] = set()
        self._path: list[str] = []

    def validate(self, graph: "DependencyGraph") -> ValidationReport:
        """Validate a dependency graph and generate a detailed report.

        Args:
            graph: The DependencyGraph to validate

        Returns:
            ValidationReport containing all validation results
        """
        logger.info("starting_graph_validation", component_count=len(graph.components()))

        report = ValidationReport()

        asymmetric = self._check_symmetry(graph.depends_on, graph.depended_by)
        if asymmetric:
            report.asymmetric_edges = asymmetric
            for parent, dependency in sorted(asymmetric):
                report.add_error(f"Edge {parent} -> {dependency} is missing its reverse entry")

        cycles = self._detect_cycles(graph.depends_on)
        if cycles:
            report.cycles = cycles
            for cycle in cycles:
                cycle_path = " -> ".join(cycle)
                report.add_error(f"Cycle detected: {cycle_path}")

        unsatisfied = self._check_install_closure(graph.depends_on, graph.installed)
        if unsatisfied:
            report.unsatisfied = unsatisfied
            for component, missing in sorted(unsatisfied.items()):
                report.add_warning(
                    f"{component} is installed without its dependencies: "
                    f"{', '.join(sorted(missing))}",
                )

        logger.info(
            "graph_validation_complete",
            is_valid=report.is_valid,
            error_count=len(report.errors),
            warning_count=len(report.warnings),
        )

        return report

    def _check_symmetry(
        self,
        depends_on: dict[str, set[str]],
        depended_by: dict[str, set[str]],
    ) -> set[tuple[str, str]]:
        """Find edges recorded in only one direction.

        Returns:
            Set of (parent, dependency) pairs missing from one of the maps
        """
        forward = {(parent, dep) for parent, deps in depends_on.items() for dep in deps}
        reverse = {(parent, dep) for dep, parents in depended_by.items() for parent in parents}
        return forward ^ reverse

    def _detect_cycles(self, graph: dict[str, set[str]]) -> list[list[str]]:
        """Detect cycles in the graph using DFS.

        Args:
            graph: Dictionary mapping components to their dependencies

        Returns:
            List of cycles, where each cycle is a list of components forming the cycle
        """
        if not graph:
            return []

        self._visited = set()
        self._rec_stack = set()
        self._path = []
        cycles = []

        all_nodes = set(graph.keys())
        for deps in graph.values():
            all_nodes.update(deps)

        for node in sorted(all_nodes):
            if node not in self._visited:
                cycle = self._dfs_cycle_detect(node, graph)
                if cycle:
                    cycles.append(cycle)
                    # Abandoned DFS leaves its stack behind
                    self._rec_stack = set()
                    self._path = []

        return cycles

    def _dfs_cycle_detect(self, node: str, graph: dict[str, set[str]]) -> list[str] | None:
        """DFS-based cycle detection that returns the cycle path.

        Args:
            node: Current node being visited
            graph: The dependency graph

        Returns:
            List representing the cycle path if found, None otherwise
        """
        self._visited.add(node)
        self._rec_stack.add(node)
        self._path.append(node)

        for dep in sorted(graph.get(node, set())):
            if dep not in self._visited:
                cycle = self._dfs_cycle_detect(dep, graph)
                if cycle:
                    return cycle
            elif dep in self._rec_stack:
                cycle_start_idx = self._path.index(dep)
                return [*self._path[cycle_start_idx:], dep]

        self._rec_stack.remove(node)
        self._path.pop()
        return None

    def _check_install_closure(
        self,
        depends_on: dict[str, set[str]],
        installed: set[str],
    ) -> dict[str, set[str]]:
        """Find installed components whose direct dependencies are not installed.

        This happens when a dependency is declared for a component that was
        already installed.
        """
        unsatisfied = {}
        for component in installed:
            missing = depends_on.get(component, set()) - installed
            if missing:
                unsatisfied[component] = missing

        if unsatisfied:
            logger.debug("unsatisfied_components_found", count=len(unsatisfied))

        return unsatisfied

    def generate_visualization(
        self,
        graph: "DependencyGraph",
        output_format: str = "mermaid",
    ) -> str:
        """Generate a visual representation of the dependency graph.

        Args:
            graph: The DependencyGraph to visualize
            output_format: Output format ('mermaid' or 'dot')

        Returns:
            String representation of the graph in the requested format

        Raises:
            ValueError: If an unsupported format is requested
        """
        output_format = output_format.lower().strip()

        if output_format == "mermaid":
            return self._generate_mermaid(graph)
        if output_format == "dot":
            return self._generate_graphviz(graph)
        error_msg = f"Unsupported format: {output_format}. Use 'mermaid' or 'dot'."
        raise ValueError(error_msg)

    def _generate_mermaid(self, graph: "DependencyGraph") -> str:
        """Generate a Mermaid flowchart, installed components in bold outline."""
        lines = ["graph TD"]

        components = sorted(graph.components())
        if not components:
            lines.append("    Empty[Empty Graph]")
            return "\n".join(lines)

        # Node ids are positional so distinct names never share an id
        node_ids = {component: f"n{index}" for index, component in enumerate(components)}

        def escape_mermaid_label(s: str) -> str:
            return s.replace('"', "#quot;")

        for component in components:
            lines.append(f'    {node_ids[component]}["{escape_mermaid_label(component)}"]')

        # Arrow points from dependency to dependent component
        for component, deps in sorted(graph.depends_on.items()):
            lines.extend(f"    {node_ids[dep]} --> {node_ids[component]}" for dep in sorted(deps))

        installed = [node_ids[c] for c in sorted(graph.installed)]
        if installed:
            lines.append("    classDef installed stroke-width:3px;")
            lines.append(f"    class {','.join(installed)} installed;")

        return "\n".join(lines)

    def _generate_graphviz(self, graph: "DependencyGraph") -> str:
        """Generate a Graphviz DOT representation, installed components filled."""

        def escape_dot_string(s: str) -> str:
            return s.replace('"', '\\"')

        lines = ["digraph DependencyGraph {"]
        lines.append("    rankdir=LR;")
        lines.append("    node [shape=box, style=rounded];")

        components = sorted(graph.components())
        if not components:
            lines.append('    Empty [label="Empty Graph"];')
        else:
            for component in components:
                style = ' [style="rounded,filled"]' if component in graph.installed else ""
                lines.append(f'    "{escape_dot_string(component)}"{style};')

            for component, deps in sorted(graph.depends_on.items()):
                escaped = escape_dot_string(component)
                lines.extend(
                    f'    "{escape_dot_string(dep)}" -> "{escaped}";' for dep in sorted(deps)
                )

        lines.append("}")
        return "\n".join(lines)
