"""
Search tree storage for MCTS.

Nodes live in a flat arena and refer to each other by index: a node keeps
its parent's index (None for the root) and the indices of its children.
Re-rooting copies the surviving subtree into a fresh arena so discarded
siblings do not accumulate across turns.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional

from .game import GameState, Move, Piece

# Exploration constant for UCT
ROOT2 = math.sqrt(2)


@dataclass
class TreeNode:
    """One position in the search tree."""
    state: GameState
    side_to_move: Piece
    achieving_move: Optional[Move] = None  # None for the root
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)
    visit_count: int = 0
    win_score: float = 0.0
    expanded: bool = False

    def is_leaf(self) -> bool:
        return len(self.children) == 0

    def average_score(self) -> float:
        """Mean score; unvisited nodes rank below everything."""
        if self.visit_count == 0:
            return float("-inf")
        return self.win_score / self.visit_count


class SearchTree:
    """Arena of TreeNodes with a single root."""

    def __init__(self, root_state: GameState, exploration: float = ROOT2):
        self.exploration = exploration
        self.nodes: List[TreeNode] = []
        self.root = self._add_node(root_state.copy(), None, None)

    def __len__(self) -> int:
        return len(self.nodes)

    def __getitem__(self, index: int) -> TreeNode:
        return self.nodes[index]

    def _add_node(self, state: GameState, parent: Optional[int], move: Optional[Move]) -> int:
        self.nodes.append(TreeNode(state, state.side_to_move, move, parent))
        return len(self.nodes) - 1

    @property
    def root_node(self) -> TreeNode:
        return self.nodes[self.root]

    def expand(self, index: int) -> bool:
        """
        Add one child per legal move.

        Returns:
            True if children were added; False if the node was already
            expanded or its game is decided.
        """
        node = self.nodes[index]
        if node.expanded or node.state.winner() is not None:
            return False
        for move in node.state.legal_moves():
            child_state = node.state.copy()
            child_state.apply_move(move)
            node.children.append(self._add_node(child_state, index, move))
        node.expanded = True
        return True

    def uct(self, index: int) -> float:
        node = self.nodes[index]
        if node.visit_count == 0:
            return float("inf")
        parent_visits = self.nodes[node.parent].visit_count
        return (node.win_score / node.visit_count
                + self.exploration * math.sqrt(math.log(parent_visits) / node.visit_count))

    def best_uct_child(self, index: int) -> int:
        """Child with the highest UCT value (first one wins ties)."""
        best_child = None
        best_uct = float("-inf")
        for child in self.nodes[index].children:
            value = self.uct(child)
            if best_child is None or value > best_uct:
                best_child = child
                best_uct = value
        return best_child

    def best_average_child(self, index: int) -> Optional[int]:
        """Child with the highest average score, or None if there are no children."""
        best_child = None
        best_score = float("-inf")
        for child in self.nodes[index].children:
            score = self.nodes[child].average_score()
            if best_child is None or score > best_score:
                best_child = child
                best_score = score
        return best_child

    def find_child(self, index: int, move: Move) -> Optional[int]:
        for child in self.nodes[index].children:
            if self.nodes[child].achieving_move == move:
                return child
        return None

    def path_to_root(self, index: int) -> List[int]:
        path = []
        current: Optional[int] = index
        while current is not None:
            path.append(current)
            current = self.nodes[current].parent
        return path

    def reroot(self, index: int) -> None:
        """Make `index` the root, keeping only its subtree."""
        nodes: List[TreeNode] = []
        remap = {}
        stack = [index]
        while stack:
            old = stack.pop()
            remap[old] = len(nodes)
            nodes.append(self.nodes[old])
            stack.extend(reversed(self.nodes[old].children))
        for node in nodes:
            node.children = [remap[c] for c in node.children]
            node.parent = remap.get(node.parent) if node.parent is not None else None
        nodes[0].parent = None
        nodes[0].achieving_move = None
        self.nodes = nodes
        self.root = 0
