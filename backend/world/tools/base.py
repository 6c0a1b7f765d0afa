"""
Shared building blocks for world tools.

Every tool handler receives the current state plus its validated args model
and returns a ToolOutcome. Expected failures (missing entity, illegal move)
return the untouched input state and a message; they never raise.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict

from ..game_state import GameState


class ToolArgs(BaseModel):
    """Base class for all tool arguments (camelCase on the wire)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


@dataclass
class ToolOutcome:
    """What a tool hands back: the resulting state and a readable result."""

    new_state: GameState
    result: str
    created_id: Optional[str] = None
    ok: bool = True


def rejected(state: GameState, message: str) -> ToolOutcome:
    """Failure outcome: same state object, nothing changed."""
    return ToolOutcome(new_state=state, result=f"Error: {message}", ok=False)


def quoted(name: str) -> str:
    return f'"{name}"'
