"""
Evaluation functions.

Plays the search engine against random and minimax opponents, and
measures how often its chosen move is minimax-optimal.
"""

import random
from typing import Callable, Dict, Mapping, Optional, Tuple

from tqdm.auto import tqdm, trange

from .game import TIE, GameState, Move, Piece
from .mcts import SearchConfig, SearchEngine
from .minimax import iter_all_legal_nonterminal_states, minimax_value_and_moves

Agent = Callable[[GameState], Move]


def random_agent(rng: random.Random) -> Agent:
    """Agent that plays a uniformly random legal move."""
    def choose(state: GameState) -> Move:
        return rng.choice(state.legal_moves())
    return choose


def minimax_agent(rng: random.Random, optimal_random: bool = True) -> Agent:
    """
    Agent that always plays a minimax-optimal move.

    Args:
        optimal_random: If True, samples among all optimal moves; otherwise
            takes the first in scan order
    """
    def choose(state: GameState) -> Move:
        _, best_moves = minimax_value_and_moves(state.copy())
        if optimal_random:
            return rng.choice(best_moves)
        return best_moves[0]
    return choose


class MCTSAgent:
    """Agent backed by one SearchEngine whose tree is kept across turns."""

    def __init__(self, side: Piece, config: SearchConfig, rng: Optional[random.Random] = None):
        self.engine = SearchEngine(side, config=config, rng=rng)

    def __call__(self, state: GameState) -> Move:
        self.engine.sync(state)
        result = self.engine.search()
        if not result.found:
            raise ValueError("Engine asked to move in a decided position")
        return result.move


def play_game(agents: Mapping[Piece, Agent], state: Optional[GameState] = None) -> Piece:
    """
    Alternate agents until the game is decided.

    Returns:
        Piece.X, Piece.O or TIE
    """
    state = state.copy() if state is not None else GameState()
    while state.winner() is None:
        mover = state.side_to_move
        move = agents[mover](state.copy())
        if not state.apply_move(move):
            raise ValueError(f"{mover.name} agent returned illegal move {move!r}")
    return state.winner()


def _engine_vs(
    make_opponent: Callable[[random.Random], Agent],
    games: int,
    config: SearchConfig,
    seed: int,
    desc: str,
) -> Tuple[int, int, int]:
    rng = random.Random(seed)
    wins = draws = losses = 0

    for g in trange(games, desc=desc, leave=False):
        engine_side = Piece.X if (g % 2 == 0) else Piece.O
        agents = {
            engine_side: MCTSAgent(engine_side, config, random.Random(rng.getrandbits(32))),
            engine_side.opposite: make_opponent(rng),
        }
        winner = play_game(agents)
        if winner is TIE:
            draws += 1
        elif winner is engine_side:
            wins += 1
        else:
            losses += 1

    return wins, draws, losses


def eval_vs_random(games: int = 100, config: Optional[SearchConfig] = None, seed: int = 0) -> Tuple[float, float, float]:
    """
    Evaluate the engine vs a random opponent, alternating sides.

    Returns:
        (win_rate, draw_rate, loss_rate)
    """
    config = config if config is not None else SearchConfig(time_budget=0.1)
    wins, draws, losses = _engine_vs(random_agent, games, config, seed, "vs random")
    total = wins + draws + losses
    return wins / total, draws / total, losses / total


def eval_vs_minimax(
    games: int = 100,
    config: Optional[SearchConfig] = None,
    seed: int = 0,
    optimal_random: bool = True,
) -> Dict[str, float]:
    """
    Evaluate the engine vs the minimax player, alternating sides.

    Returns:
        Dict with 'games', 'engine_w', 'engine_d', 'engine_l'
    """
    config = config if config is not None else SearchConfig(time_budget=0.1)
    wins, draws, losses = _engine_vs(
        lambda rng: minimax_agent(rng, optimal_random), games, config, seed, "vs minimax"
    )
    total = wins + draws + losses
    return {
        "games": total,
        "engine_w": wins / total,
        "engine_d": draws / total,
        "engine_l": losses / total,
    }


def eval_minimax_agreement(
    config: Optional[SearchConfig] = None,
    max_states: Optional[int] = 200,
    seed: int = 0,
) -> Dict[str, float]:
    """
    Fraction of undecided positions where the engine picks an optimal move.

    Positions are sampled uniformly from all reachable undecided states;
    max_states=None checks every one of them.
    """
    config = config if config is not None else SearchConfig(time_budget=0.05)
    rng = random.Random(seed)
    states = list(iter_all_legal_nonterminal_states())
    if max_states is not None and max_states < len(states):
        states = rng.sample(states, max_states)

    agree = 0
    for state in tqdm(states, desc="minimax agreement", leave=False):
        engine = SearchEngine(state.side_to_move, config=config, rng=random.Random(rng.getrandbits(32)))
        engine.initialize(state)
        result = engine.search()
        _, best_moves = minimax_value_and_moves(state)
        if result.move in best_moves:
            agree += 1

    return {
        "n_states": len(states),
        "optimal_move_rate": agree / len(states),
    }
