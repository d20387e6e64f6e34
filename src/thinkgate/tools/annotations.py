from __future__ import annotations

from .base import ToolAnnotations

ARCHITECT = ToolAnnotations(
    title="Software Architecture Planner",
    read_only_hint=True,
    open_world_hint=False,
)

THINK = ToolAnnotations(
    title="Thought Analyzer",
    read_only_hint=True,
    open_world_hint=False,
)

# the model's training data counts as an open world
LLM_GATEWAY = ToolAnnotations(
    title="Specialized Language Model Gateway",
    read_only_hint=True,
    open_world_hint=True,
)

# Additive state: repeated identical calls append duplicates.
SEQUENTIAL_THINKING = ToolAnnotations(
    title="Sequential Chain of Thought Problem Solver",
    read_only_hint=False,
    destructive_hint=False,
    idempotent_hint=False,
    open_world_hint=False,
)
