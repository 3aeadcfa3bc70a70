"""Scripted agents that drive the Letterfall environment."""
