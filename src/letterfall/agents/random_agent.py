from __future__ import annotations

import argparse
import logging
import random
from typing import Optional, Sequence

import gymnasium as gym

# Ensure envs are registered
import letterfall.env  # noqa: F401
from letterfall.env.letterfall_env import board_to_text
from letterfall.services.dictionary import WordList


def run_random(steps: int = 500, seed: Optional[int] = None, words: Optional[str] = None) -> float:
    env = gym.make("Letterfall-10x33-v0", dictionary=WordList.load(words))
    rng = random.Random(seed)
    obs, info = env.reset(seed=seed)
    total_reward = 0.0
    episodes = 1
    for _ in range(steps):
        action = rng.randrange(env.action_space.n)
        obs, reward, terminated, truncated, info = env.step(action)
        total_reward += float(reward)
        if terminated or truncated:
            print(f"Episode {episodes} ended: score={info['score']} level={info['level']}")
            episodes += 1
            obs, info = env.reset()
    print(board_to_text(obs["board"]))
    print(f"Words removed: {', '.join(info['words_removed']) or '-'}")
    print(f"Random agent total reward: {total_reward:.2f}")
    env.close()
    return total_reward


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play Letterfall with uniformly random actions")
    p.add_argument("--steps", type=int, default=500)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--words", type=str, default=None, help="newline-separated word list")
    p.add_argument("--verbose", action="store_true")
    return p


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)
    run_random(args.steps, args.seed, args.words)


if __name__ == "__main__":  # pragma: no cover
    main()
