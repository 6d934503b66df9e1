from __future__ import annotations

import pytest

from gimtex.tree import build_tree, render_tree


@pytest.mark.unit
def test_render_tree_nests_and_orders_children() -> None:
    out = render_tree("proj", ["a/c/z", "a/b/y", "a/b/x"])

    assert out.splitlines() == [
        "proj",
        "└── a/",
        "    ├── b/",
        "    │   ├── x",
        "    │   └── y",
        "    └── c/",
        "        └── z",
    ]


@pytest.mark.unit
def test_build_tree_children_are_sorted() -> None:
    root = build_tree(["a/b/x", "a/b/y", "a/c/z"])

    a = root.children["a"]
    assert sorted(a.children) == ["b", "c"]
    assert list(a.children["b"].children) == ["x", "y"]
    assert not a.children["b"].children["x"].is_dir


@pytest.mark.unit
def test_render_tree_root_label_printed_once() -> None:
    out = render_tree(".", ["README.md", "src/main.rs"])

    assert out == ".\n├── README.md\n└── src/\n    └── main.rs\n"


@pytest.mark.unit
def test_render_tree_empty() -> None:
    assert render_tree("root", []) == "root\n"
