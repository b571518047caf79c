"""
Monte Carlo Tree Search with random rollouts.

One SearchEngine plays one side for one game. Its tree persists across
turns: after each search the root moves to the chosen child, and the
opponent's reply moves it again, so statistics gathered for the current
position are reused.
"""

import logging
import random
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .game import TIE, GameState, Move, Piece, format_move, normalize_move
from .tree import ROOT2, SearchTree

logger = logging.getLogger(__name__)


@dataclass
class SearchConfig:
    """Search configuration."""

    # Wall-clock budget per search, seconds
    time_budget: float = 10.0

    # UCT exploration constant
    exploration: float = ROOT2

    # Optional hard cap on iterations (None = time only)
    max_iterations: Optional[int] = None

    # Random seed for rollouts and expansion picks
    seed: Optional[int] = None


class SearchStatus(Enum):
    MOVE_FOUND = "move_found"
    NO_MOVE = "no_move"  # root position is already decided


@dataclass
class SearchResult:
    status: SearchStatus
    move: Optional[Move]
    iterations: int
    elapsed: float
    root_visits: int
    candidates: List["ChildStat"] = field(default_factory=list)

    @property
    def found(self) -> bool:
        return self.status is SearchStatus.MOVE_FOUND


@dataclass
class ChildStat:
    move: Move
    visit_count: int
    average_score: float
    uct: float


class Deadline:
    """Polling wall-clock budget."""

    def __init__(self, budget: float):
        self.started = time.perf_counter()
        self.deadline = self.started + max(0.0, budget)

    def expired(self) -> bool:
        return time.perf_counter() >= self.deadline

    def elapsed(self) -> float:
        return time.perf_counter() - self.started


class SearchEngine:
    """
    MCTS player for one side.

    Args:
        searcher_side: the piece this engine plays
        config: search settings (defaults to SearchConfig())
        rng: random source for rollouts; built from config.seed if omitted
    """

    def __init__(
        self,
        searcher_side: Piece,
        config: Optional[SearchConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        if searcher_side not in (Piece.X, Piece.O):
            raise ValueError(f"Searcher side must be X or O, got {searcher_side!r}")
        self.searcher_side = Piece(searcher_side)
        self.config = config if config is not None else SearchConfig()
        self.rng = rng if rng is not None else random.Random(self.config.seed)
        self.tree: Optional[SearchTree] = None

    # ------------------------------------------------------------------
    # Tree lifecycle
    # ------------------------------------------------------------------

    def initialize(self, root_state: GameState) -> None:
        """Start a fresh one-node tree on a private copy of root_state."""
        self.tree = SearchTree(root_state, exploration=self.config.exploration)

    def _require_tree(self) -> SearchTree:
        if self.tree is None:
            raise RuntimeError("SearchEngine.initialize() must be called before use")
        return self.tree

    @property
    def root_state(self) -> GameState:
        return self._require_tree().root_node.state.copy()

    def advance_root(self, move: Union[str, Move]) -> None:
        """
        Move the root to the child reached by `move`, dropping its siblings.

        An unexplored move rebuilds the tree from the resulting position.
        """
        tree = self._require_tree()
        coords = normalize_move(move)
        if coords is None:
            raise ValueError(f"Cannot advance root with malformed move {move!r}")
        child = tree.find_child(tree.root, coords)
        if child is not None:
            tree.reroot(child)
            return

        state = tree.root_node.state.copy()
        if not state.apply_move(coords):
            raise ValueError(f"Cannot advance root with illegal move {move!r}")
        logger.debug("Move %s not in tree, reinitializing", format_move(coords))
        self.initialize(state)

    def sync(self, state: GameState) -> None:
        """Bring the root in line with an externally maintained game."""
        if self.tree is None:
            self.initialize(state)
            return
        root_history = self.tree.root_node.state.move_history
        history = state.move_history
        if history[:len(root_history)] != root_history:
            logger.debug("Tree lineage broken, reinitializing")
            self.initialize(state)
            return
        for move in history[len(root_history):]:
            self.advance_root(move)

    # ------------------------------------------------------------------
    # Four phases
    # ------------------------------------------------------------------

    def _select(self) -> int:
        tree = self.tree
        index = tree.root
        while not tree[index].is_leaf():
            index = tree.best_uct_child(index)
        return index

    def _expand(self, index: int) -> int:
        tree = self.tree
        tree.expand(index)
        children = tree[index].children
        if not children:
            return index
        return self.rng.choice(children)

    def _rollout(self, index: int) -> Piece:
        state = self.tree[index].state.copy()
        winner = state.winner()
        while winner is None:
            state.apply_move(self.rng.choice(state.legal_moves()))
            winner = state.winner()
        return winner

    def _backpropagate(self, index: int, winner: Piece) -> None:
        if winner is self.searcher_side:
            credit = 1.0
        elif winner is TIE:
            credit = 0.5
        else:
            credit = 0.0
        tree = self.tree
        for i in tree.path_to_root(index):
            node = tree[i]
            node.visit_count += 1
            if node.side_to_move is not self.searcher_side:
                node.win_score += credit

    def iterate(self) -> None:
        """Run one selection / expansion / rollout / backpropagation pass."""
        leaf = self._select()
        node = self._expand(leaf)
        winner = self._rollout(node)
        self._backpropagate(node, winner)

    # ------------------------------------------------------------------
    # Public search
    # ------------------------------------------------------------------

    def search(self, time_budget: Optional[float] = None) -> SearchResult:
        """
        Search from the root until the budget runs out, then commit to the
        child with the best average score.

        Returns:
            SearchResult with status NO_MOVE if the root game is decided.
        """
        tree = self._require_tree()
        budget = self.config.time_budget if time_budget is None else time_budget
        deadline = Deadline(budget)
        root = tree.root_node

        if root.state.winner() is not None:
            return SearchResult(SearchStatus.NO_MOVE, None, 0, deadline.elapsed(), root.visit_count)
        if root.side_to_move is not self.searcher_side:
            raise ValueError(
                f"Engine plays {self.searcher_side.name} but it is {root.side_to_move.name} to move"
            )

        tree.expand(tree.root)
        max_iterations = self.config.max_iterations
        iterations = 0
        while True:
            self.iterate()
            iterations += 1
            if max_iterations is not None and iterations >= max_iterations:
                break
            if deadline.expired():
                break

        best = tree.best_average_child(tree.root)
        if best is None:
            # expansion of an undecided root always yields children
            raise RuntimeError("Root has no children after search")

        root_visits = tree.root_node.visit_count
        candidates = self.root_statistics()
        chosen = tree[best]
        move = chosen.achieving_move
        elapsed = deadline.elapsed()
        logger.debug(
            "%s searched %d iterations in %.3fs, plays %s (avg %.3f over %d visits)",
            self.searcher_side.name, iterations, elapsed, format_move(move),
            chosen.average_score(), chosen.visit_count,
        )
        tree.reroot(best)
        return SearchResult(SearchStatus.MOVE_FOUND, move, iterations, elapsed, root_visits, candidates)

    def root_statistics(self) -> List[ChildStat]:
        """Per-child statistics of the current root, most visited first."""
        tree = self._require_tree()
        stats = [
            ChildStat(
                move=tree[c].achieving_move,
                visit_count=tree[c].visit_count,
                average_score=tree[c].average_score(),
                uct=tree.uct(c),
            )
            for c in tree.root_node.children
        ]
        stats.sort(key=lambda s: s.visit_count, reverse=True)
        return stats
