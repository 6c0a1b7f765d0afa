"""
Runtime execution layer.

This module coordinates the flow of a turn:
Player input → Reasoning engine → Tool dispatch (repeat) → Narrative → State commit
"""

from runtime.orchestrator import AISettings, ToolCallLog, TurnOrchestrator, TurnResult
from runtime.session import GameSession, TurnHistory

__all__ = [
    "AISettings",
    "GameSession",
    "ToolCallLog",
    "TurnHistory",
    "TurnOrchestrator",
    "TurnResult",
]
