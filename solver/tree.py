# solver/tree.py: search tree stored as an index-addressed arena
from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from solver.tiling import Tiling


@dataclass
class SearchNode:
    index: int
    parent: Optional[int]  # None for the root
    tiling: Tiling
    children: List[int] = field(default_factory=list)
    expanded: bool = False
    viable: bool = True


class SearchTree:
    """Append-only store of :class:`SearchNode` objects.

    Nodes refer to each other by index so backtracking is a plain lookup.
    Nothing is ever removed; a node proven hopeless only has ``viable``
    cleared.
    """

    def __init__(self, root_tiling: Tiling):
        self.nodes: List[SearchNode] = []
        self.root = self.add(root_tiling, None).index

    def add(self, tiling: Tiling, parent: Optional[int]) -> SearchNode:
        node = SearchNode(index=len(self.nodes), parent=parent, tiling=tiling)
        self.nodes.append(node)
        return node

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> SearchNode:
        return self.nodes[index]

    def expand(
        self,
        index: int,
        rng: random.Random,
        *,
        forced_moves: Optional[bool] = None,
    ) -> List[int]:
        """Attach one child per candidate tiling; no-op if already expanded.

        Children whose vacancy is already split are attached as non-viable so
        they are never descended into.
        """
        node = self.nodes[index]
        if node.expanded:
            return node.children
        for tiling in node.tiling.generate_children(rng, forced_moves=forced_moves):
            child = self.add(tiling, index)
            child.viable = tiling.has_connected_vacancy()
            node.children.append(child.index)
        node.expanded = True
        return node.children

    def viable_children(self, index: int) -> List[int]:
        return [c for c in self.nodes[index].children if self.nodes[c].viable]

    def ancestors(self, index: int) -> Iterator[SearchNode]:
        """Walk from ``index``'s parent up to the root."""
        parent = self.nodes[index].parent
        while parent is not None:
            node = self.nodes[parent]
            yield node
            parent = node.parent

    def depth(self, index: int) -> int:
        return sum(1 for _ in self.ancestors(index))


__all__ = ["SearchNode", "SearchTree"]
