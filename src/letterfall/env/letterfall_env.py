from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from letterfall.game import Action, GameConfig, LetterfallGame, QuizOutcome
from letterfall.game.resolver import Dictionary
from letterfall.services.random_source import RandomSource


class LetterfallEnv(gym.Env):
    """Headless environment over the engine.

    Each step applies one Action and then advances gravity by `frame_ms`.
    Definition quizzes are answered as skipped so that play never stalls.
    """

    metadata = {"render_modes": ["ansi", "rgb_array"], "render_fps": 30}

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        dictionary: Optional[Dictionary] = None,
        render_mode: Optional[str] = None,
        frame_ms: int = 100,
        max_episode_steps: int = 10000,
    ) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.dictionary = dictionary
        self.game = LetterfallGame(self.config, dictionary=dictionary)
        self.render_mode = render_mode
        self.frame_ms = int(frame_ms)
        self.max_episode_steps = int(max_episode_steps)

        h, w = self.config.height, self.config.width
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-26, high=26, shape=(h, w), dtype=np.int8),
                "next_letters": spaces.Box(low=0, high=26, shape=(4,), dtype=np.int8),
                "level": spaces.Box(low=1, high=np.iinfo(np.int32).max, shape=(1,), dtype=np.int32),
            }
        )
        self.action_space = spaces.Discrete(len(Action))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        letters = np.zeros((4,), dtype=np.int8)
        for i, letter in enumerate(self.game.state.next_piece.letters[:4]):
            letters[i] = ord(letter) - ord("A") + 1
        return {
            "board": self.game.get_state().astype(np.int8),
            "next_letters": letters,
            "level": np.array([self.game.level], dtype=np.int32),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "level": self.game.level,
            "words_removed": list(self.game.state.removed_words),
            "steps": self._steps,
        }

    def reset(
        self, *, seed: Optional[int] = None, options: Optional[dict] = None
    ) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game = LetterfallGame(self.config, dictionary=self.dictionary, rng=RandomSource(seed))
        else:
            self.game.restart()
        self.game.events.drain()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action):
        before = self.game.score
        _, _, terminated, _ = self.game.step(Action(int(action)))
        if not terminated:
            self.game.tick(self.frame_ms)
        if self.game.quiz_pending:
            self.game.answer_quiz(QuizOutcome.SKIPPED)
        self.game.events.drain()

        self._steps += 1
        terminated = self.game.game_over
        truncated = self._steps >= self.max_episode_steps
        reward = float(self.game.score - before)
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[Any]:
        if self.render_mode == "ansi":
            return board_to_text(self.game.get_state())
        if self.render_mode == "rgb_array":
            board = self.game.get_state()
            cell = 12
            h, w = board.shape
            img = np.zeros((h * cell, w * cell, 3), dtype=np.uint8)
            for y in range(h):
                for x in range(w):
                    if board[y, x] > 0:
                        color = (70, 200, 120)
                    elif board[y, x] < 0:
                        color = (230, 110, 60)
                    else:
                        color = (30, 30, 36)
                    img[y * cell : (y + 1) * cell, x * cell : (x + 1) * cell, :] = color
            return img
        return None

    def close(self) -> None:
        pass


def board_to_text(board: np.ndarray) -> str:
    rows = []
    for row in board:
        chars = []
        for code in row:
            code = int(code)
            if code == 0:
                chars.append("·")
            elif code > 0:
                chars.append(chr(ord("A") + code - 1))
            else:
                chars.append(chr(ord("a") - code - 1))
        rows.append("".join(chars))
    return "\n".join(rows)
