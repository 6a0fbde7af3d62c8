import logging
from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from reversi.Engine.constants import BOARD_SIZE, NUM_CELLS
from reversi.Engine.game import GameEngine, IllegalMove, Player, Position
from reversi.utils.display import board_to_text

_log = logging.getLogger(__name__)

INVALID_MOVE_REWARD = -10.0


class ReversiEnv(gym.Env):
    """Gymnasium view of a single `GameEngine`; one env is one game."""

    metadata = {"render_modes": ["ansi"], "render_fps": 4}

    def __init__(self, render_mode: Optional[str] = None):
        super().__init__()

        # 64 possible positions on the board (8x8), action = row * 8 + col
        self.action_space = spaces.Discrete(NUM_CELLS)

        # Board cells are -1, 0 or 1; current_player is 0 for BLACK, 1 for WHITE
        self.observation_space = spaces.Dict({
            "board": spaces.Box(low=-1, high=1, shape=(BOARD_SIZE, BOARD_SIZE), dtype=np.int8),
            "current_player": spaces.Discrete(2),
            "valid_moves": spaces.MultiBinary(NUM_CELLS),
        })

        self.render_mode = render_mode
        self.engine = GameEngine()
        self.cumulative_rewards = {"BLACK": 0.0, "WHITE": 0.0}

    def reset(self, seed=None, options=None):
        super().reset(seed=seed)
        self.engine.restart()
        self.cumulative_rewards = {"BLACK": 0.0, "WHITE": 0.0}
        return self._get_observation(), self._get_info()

    def step(self, action: int) -> Tuple[Dict[str, Any], float, bool, bool, Dict[str, Any]]:
        position = action_to_position(action)

        try:
            result = self.engine.apply_move(position)
        except IllegalMove as exc:
            # The game is untouched; the episode is cut short with a penalty
            _log.debug("Invalid action %s: %s", action, exc.reason)
            info = self._get_info()
            info["error"] = exc.reason
            return self._get_observation(), INVALID_MOVE_REWARD, False, True, info

        # Reward is the mover's disk lead after the move
        mover = result.player
        reward = float(result.scores.for_player(mover) - result.scores.for_player(mover.opponent))
        self.cumulative_rewards[mover.name] += reward

        terminated = result.outcome is not None
        info = self._get_info()
        info["flipped"] = result.flipped
        info["passed"] = result.passed

        if terminated:
            winner = result.outcome.winner
            info["winner"] = winner.name if winner is not None else "DRAW"

        return self._get_observation(), reward, terminated, False, info

    def valid_actions(self):
        return sorted(position_to_action(p) for p in self.engine.legal_moves)

    def _get_observation(self) -> Dict[str, Any]:
        valid_moves_array = np.zeros(NUM_CELLS, dtype=np.int8)
        for position in self.engine.legal_moves:
            valid_moves_array[position_to_action(position)] = 1

        return {
            "board": self.engine.board.copy(),
            "current_player": 0 if self.engine.current_player == Player.BLACK else 1,
            "valid_moves": valid_moves_array,
        }

    def _get_info(self) -> Dict[str, Any]:
        scores = self.engine.scores
        return {
            "score_black": scores.black,
            "score_white": scores.white,
            "valid_moves_count": len(self.engine.legal_moves),
            "cumulative_reward_black": self.cumulative_rewards["BLACK"],
            "cumulative_reward_white": self.cumulative_rewards["WHITE"],
        }

    def render(self):
        if self.render_mode == "ansi":
            return board_to_text(self.engine.board, self.engine.legal_moves)
        return None

    def close(self):
        pass


def action_to_position(action: int) -> Position:
    action = int(action)
    return Position(action // BOARD_SIZE, action % BOARD_SIZE)


def position_to_action(position: Position) -> int:
    return position[0] * BOARD_SIZE + position[1]
