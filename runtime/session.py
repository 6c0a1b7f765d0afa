"""
Game session - serializes turns against one evolving world state.

The orchestrator itself is stateless. A GameSession owns the current state,
lets one turn run at a time, commits the resulting state and keeps a turn
history.
"""

import logging
import threading
from dataclasses import dataclass, field
from typing import List, Optional

from backend.world.game_state import GameState
from backend.world.tool_catalog import DEFAULT_ENABLED_TOOLS

from .orchestrator import AISettings, ToolCallLog, TurnOrchestrator, TurnResult

logger = logging.getLogger(__name__)


@dataclass
class TurnHistory:
    """Record of one played turn."""

    turn: int
    user_prompt: str
    narrative: str
    tool_logs: List[ToolCallLog] = field(default_factory=list)


class GameSession:
    """One world, one in-flight turn at a time."""

    def __init__(
        self,
        state: GameState,
        orchestrator: TurnOrchestrator,
        settings: Optional[AISettings] = None,
        enabled_tools: Optional[List[str]] = None,
    ):
        self.state = state
        self.orchestrator = orchestrator
        self.settings = settings or AISettings.from_config()
        self.enabled_tools: List[str] = list(
            DEFAULT_ENABLED_TOOLS if enabled_tools is None else enabled_tools
        )
        self.history: List[TurnHistory] = []
        self._lock = threading.Lock()

    @property
    def turn_count(self) -> int:
        return len(self.history)

    def play(self, user_text: str) -> TurnResult:
        """Run one turn and commit its state. Concurrent calls wait their turn."""
        with self._lock:
            result = self.orchestrator.process_turn(
                self.state,
                user_text,
                enabled_tools=self.enabled_tools,
                settings=self.settings,
            )
            self.state = result.new_state
            self.history.append(
                TurnHistory(
                    turn=len(self.history) + 1,
                    user_prompt=user_text,
                    narrative=result.narrative,
                    tool_logs=list(result.tool_logs),
                )
            )

            problems = self.state.validate_invariants()
            if problems:
                logger.warning(f"World state has {len(problems)} problem(s): {problems}")
            return result

    def enable_tool(self, name: str) -> bool:
        """Offer a tool to the engine. Returns False for unknown names."""
        if name not in self.orchestrator.registry:
            logger.warning(f"Unknown tool: {name}")
            return False
        if name not in self.enabled_tools:
            self.enabled_tools.append(name)
        return True

    def disable_tool(self, name: str) -> bool:
        """Stop offering a tool. Returns False if it was not enabled."""
        if name not in self.enabled_tools:
            return False
        self.enabled_tools.remove(name)
        return True
