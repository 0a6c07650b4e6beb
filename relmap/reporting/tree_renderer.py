"""
Relationship Tree Renderer
==========================

Turns a relationship graph into an indented text tree.

Example Output:

    🔗 Relationship Tree for Acme A/S
    ══════════════════════════════════════════════════
    └── 🏢 Acme A/S ✅
        ├── 👤 Ann Berg ✅
        ├── 📧 Carl Dahl ✅
        └── 📧 Eva Falk ❌
    ══════════════════════════════════════════════════
    📊 Total nodes: 4 | Total connections: 3

Design Decisions:
-----------------
1. Depth-first from the chosen root on an explicit stack, with a visited set
   keyed by node identity; long reporting chains do not hit the recursion
   limit and merged graphs with cross-links still terminate
2. Children are claimed as visited before descending; a node shows up once,
   under the first parent that reaches it
3. Siblings are ordered by kind (employee, contact, company), then name,
   then id; output is a pure function of (graph, root)
"""

from ..model.graph import RelationshipGraph
from ..model.schemas import Node, EntityKind


KIND_ORDER = {
    EntityKind.EMPLOYEE: 0,
    EntityKind.CONTACT: 1,
    EntityKind.COMPANY: 2,
}

KIND_MARKERS = {
    EntityKind.COMPANY: "🏢",
    EntityKind.EMPLOYEE: "👤",
    EntityKind.CONTACT: "📧",
}

ACTIVE_MARKER = "✅"
INACTIVE_MARKER = "❌"

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "

RULE_WIDTH = 50


class TreeRenderer:
    """Renders relationship graphs as text trees.

    Usage:
        renderer = TreeRenderer()
        text = renderer.render(graph, graph.root)
    """

    def render(self, graph: RelationshipGraph, root_node: Node) -> str:
        """Render the tree reachable from root_node.

        Args:
            graph: Graph to render
            root_node: Node to start from

        Returns:
            Tree text with header and footer

        Raises:
            ValueError: If root_node is not in the graph
        """
        root = graph.get_node(root_node.id, root_node.kind)
        if root is None:
            raise ValueError(f"Root node {root_node.key} is not in the graph")

        lines = [f"\n🔗 Relationship Tree for {root.name}", "═" * RULE_WIDTH]

        self._render_nodes(graph, root, lines)

        lines.append("═" * RULE_WIDTH)
        lines.append(
            f"📊 Total nodes: {graph.total_nodes} | "
            f"Total connections: {graph.connection_count}\n"
        )
        return "\n".join(lines)

    def _render_nodes(self, graph: RelationshipGraph, root: Node, lines: list) -> None:
        visited = {root.key}
        # (node, prefix, is_last); siblings pushed in reverse so they pop in order
        stack = [(root, "", True)]
        while stack:
            node, prefix, is_last = stack.pop()
            lines.append(f"{prefix}{LAST_BRANCH if is_last else BRANCH}{self.format_node(node)}")

            children = self._unvisited_children(graph, node, visited)
            for child in children:
                visited.add(child.key)

            child_prefix = prefix + (SPACE if is_last else PIPE)
            for index in reversed(range(len(children))):
                stack.append((children[index], child_prefix, index == len(children) - 1))

    def _unvisited_children(self, graph: RelationshipGraph, node: Node, visited: set) -> list:
        children = {}
        for _, neighbor in graph.get_neighbors(node):
            if neighbor.key not in visited:
                children[neighbor.key] = neighbor
        return sorted(children.values(), key=sort_key)

    def format_node(self, node: Node) -> str:
        """One tree line's label: kind marker, name, status marker."""
        status = ACTIVE_MARKER if node.active else INACTIVE_MARKER
        return f"{KIND_MARKERS[node.kind]} {node.name} {status}"


def sort_key(node: Node) -> tuple:
    """Sibling ordering: kind, then case-sensitive name, then id."""
    return (KIND_ORDER[node.kind], node.name, node.id)
