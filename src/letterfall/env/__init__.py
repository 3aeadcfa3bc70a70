"""Gymnasium environments for Letterfall."""

from __future__ import annotations

from gymnasium.envs.registration import register

register(
    id="Letterfall-10x33-v0",
    entry_point="letterfall.env.letterfall_env:LetterfallEnv",
)

__all__ = ["Letterfall-10x33-v0"]
