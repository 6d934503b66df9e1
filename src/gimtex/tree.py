from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE = "│   "
SPACE = "    "


@dataclass
class TreeNode:
    """A trie of path segments. A node without children is a file."""

    children: dict[str, TreeNode] = field(default_factory=dict)

    @property
    def is_dir(self) -> bool:
        return bool(self.children)

    def insert(self, rel: str) -> None:
        """Insert the segments of a POSIX relative path."""
        parts = [p for p in rel.replace("\\", "/").split("/") if p and p != "."]
        cur = self
        for part in parts:
            cur = cur.children.setdefault(part, TreeNode())

    def render(self, prefix: str = "") -> list[str]:
        """Render the children of this node depth-first.

        Children are visited in lexicographic order of their names. Directory
        names get a trailing `/`.

        Args:
            prefix (str): the continuation prefix inherited from the parents

        Returns:
            list[str]: one line per descendant
        """
        lines: list[str] = []
        names = sorted(self.children)
        for idx, name in enumerate(names):
            node = self.children[name]
            last = idx == len(names) - 1
            label = f"{name}/" if node.is_dir else name
            lines.append(prefix + (LAST_BRANCH if last else BRANCH) + label)
            lines.extend(node.render(prefix + (SPACE if last else PIPE)))
        return lines


def build_tree(rel_paths: Iterable[str]) -> TreeNode:
    root = TreeNode()
    for rel in rel_paths:
        root.insert(rel)
    return root


def render_tree(root_label: str, rel_paths: Iterable[str]) -> str:
    """Build a visual tree of file paths under `root_label`.

    Args:
        root_label (str): the scan root, printed once on the first line
        rel_paths (Iterable[str]): file paths relative to the root, using POSIX separators

    Returns:
        str: the tree, one entry per line, each line ending with a newline
    """
    lines = [root_label, *build_tree(rel_paths).render()]
    return "\n".join(lines) + "\n"
