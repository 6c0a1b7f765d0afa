"""
Turn Orchestrator - drives one user turn against the reasoning engine.

Flow of a turn:
1. Simulation: send the user's text, the world state and the enabled tool
   schemas. Execute every requested tool call in order against the running
   state, feed the results back, repeat until the engine stops calling tools
   or the iteration cap is reached. Calls still pending at the cap are
   executed without another simulation round.
2. Narrative: one final request with tools disabled, asking for prose about
   what happened.

A turn always returns a TurnResult. Failures of individual tools end up in
the tool log; transport failures during simulation return the original
state with an error narrative.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, Field

import config
from backend.world.game_state import GameState
from backend.world.tool_catalog import (
    DEFAULT_ENABLED_TOOLS,
    DEFAULT_REGISTRY,
    ToolRegistry,
)
from narration.prompts import (
    PromptLibrary,
    build_narrative_request,
    build_system_instruction,
    get_prompt_library,
)

from .reasoning_client import (
    ConversationTurn,
    ReasoningClient,
    ReasoningResponse,
    ToolCallRequest,
    ToolResultPart,
)
from .retry import RetryOptions, retry_call
from .usage import CostInfo, TokenUsage, TurnTokenUsage, calculate_cost, combine_costs

logger = logging.getLogger(__name__)

MISSING_CREDENTIAL_NARRATIVE = (
    "CRITICAL ERROR: OPENAI_API_KEY is not set. The game cannot reach the "
    "reasoning engine; set the key in the environment and try again."
)
NO_CANDIDATES_NARRATIVE = "Error: the AI returned no response candidates."
PROCESSED_NARRATIVE = "The action was processed."
NOTHING_HAPPENED_NARRATIVE = "Nothing happened."

CREATED_ID_REF = re.compile(r"\$(\d+)\.createdId")


class AISettings(BaseModel):
    """Per-turn model settings, passed into each process_turn call."""

    model_id: str = "gpt-4o-mini"
    max_iterations: int = Field(default=5, ge=1)
    temperature: float = Field(default=0.6, ge=0.0, le=2.0)
    max_tokens: Optional[int] = Field(default=None, gt=0)
    system_prompt_override: Optional[str] = None
    system_prompt_preset_id: Optional[str] = None
    narrative_prompt_override: Optional[str] = None
    narrative_prompt_preset_id: Optional[str] = None
    narrative_model_id: Optional[str] = None
    narrative_temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)

    @classmethod
    def from_config(cls, **overrides: Any) -> "AISettings":
        values = dict(
            model_id=config.OPENAI_MODEL,
            max_iterations=config.MAX_TOOL_ITERATIONS,
            temperature=config.OPENAI_TEMPERATURE,
            max_tokens=config.OPENAI_MAX_TOKENS,
            narrative_model_id=config.NARRATIVE_MODEL,
            narrative_temperature=config.NARRATIVE_TEMPERATURE,
        )
        values.update(overrides)
        return cls(**values)

    @property
    def effective_narrative_model(self) -> str:
        return self.narrative_model_id or self.model_id

    @property
    def effective_narrative_temperature(self) -> float:
        if self.narrative_temperature is None:
            return self.temperature
        return self.narrative_temperature


@dataclass(frozen=True)
class ToolCallLog:
    """One dispatched tool call."""

    name: str
    args: Dict[str, Any]
    result: str
    iteration: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "args": self.args,
            "result": self.result,
            "iteration": self.iteration,
        }


@dataclass
class TurnResult:
    """Everything the caller needs after one turn."""

    narrative: str
    tool_logs: List[ToolCallLog]
    new_state: GameState
    iterations: int = 0
    token_usage: Optional[TurnTokenUsage] = None
    cost_info: Optional[CostInfo] = None
    success: bool = True
    error: Optional[str] = None


def resolve_created_refs(value: Any, created_ids: Dict[int, str]) -> Any:
    """
    Replace ``$N.createdId`` in string arguments with the id created by call N.

    References to calls that created nothing are left as they are.
    """
    if isinstance(value, str):
        return CREATED_ID_REF.sub(
            lambda m: created_ids.get(int(m.group(1)), m.group(0)), value
        )
    if isinstance(value, dict):
        return {k: resolve_created_refs(v, created_ids) for k, v in value.items()}
    if isinstance(value, list):
        return [resolve_created_refs(v, created_ids) for v in value]
    return value


@dataclass
class _TurnRun:
    """Mutable bookkeeping for one turn."""

    working_state: GameState
    tool_logs: List[ToolCallLog] = field(default_factory=list)
    simulation_usage: List[Optional[TokenUsage]] = field(default_factory=list)
    simulation_notes: List[str] = field(default_factory=list)
    iteration: int = 0


class TurnOrchestrator:
    """Runs turns: tool-calling simulation followed by a narrative request."""

    def __init__(
        self,
        client: ReasoningClient,
        registry: ToolRegistry = DEFAULT_REGISTRY,
        retry_options: Optional[RetryOptions] = None,
        sleep: Optional[Callable[[float], None]] = None,
        prompts: Optional[PromptLibrary] = None,
    ):
        self.client = client
        self.registry = registry
        self.retry_options = retry_options or RetryOptions.from_config()
        self.sleep = sleep
        self.prompts = prompts or get_prompt_library()

    def process_turn(
        self,
        current_state: GameState,
        user_text: str,
        enabled_tools: Optional[Iterable[str]] = None,
        settings: Optional[AISettings] = None,
    ) -> TurnResult:
        """
        Process one user turn.

        Args:
            current_state: State before the turn; never mutated
            user_text: The player's free-text action
            enabled_tools: Tool names offered to the engine (default set if None)
            settings: Model settings (config defaults if None)

        Returns:
            TurnResult with narrative, tool log and resulting state
        """
        settings = settings or AISettings.from_config()

        if not self.client.is_configured():
            logger.error("Reasoning engine credential missing; turn aborted")
            return TurnResult(
                narrative=MISSING_CREDENTIAL_NARRATIVE,
                tool_logs=[],
                new_state=current_state,
                success=False,
                error="missing credential",
            )

        registry = self.registry.subset(
            DEFAULT_ENABLED_TOOLS if enabled_tools is None else enabled_tools
        )
        run = _TurnRun(working_state=current_state)

        try:
            failure = self._simulate(run, user_text, registry, settings)
        except Exception as e:
            logger.exception(f"Simulation phase failed: {e}")
            return TurnResult(
                narrative=f"SYSTEM ERROR: {e}",
                tool_logs=[],
                new_state=current_state,
                success=False,
                error=str(e),
            )
        if failure is not None:
            return failure

        narrative, narrative_usage = self._narrate(run, user_text, settings)
        result = TurnResult(
            narrative=narrative,
            tool_logs=run.tool_logs,
            new_state=run.working_state,
            iterations=run.iteration,
        )
        self._account(result, run, narrative_usage, settings)

        logger.info(
            f"Turn finished: {run.iteration} iterations, "
            f"{len(result.tool_logs)} tool calls, "
            f"state changed: {run.working_state is not current_state}, "
            f"tokens: {result.token_usage.total.total_tokens if result.token_usage else 0}, "
            f"cost: {f'${result.cost_info.total_cost:.6f}' if result.cost_info else 'n/a'}"
        )
        return result

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _simulate(
        self,
        run: _TurnRun,
        user_text: str,
        registry: ToolRegistry,
        settings: AISettings,
    ) -> Optional[TurnResult]:
        """Tool loop. Returns a TurnResult only when the turn must end early."""
        schemas = registry.declarations()
        base_prompt = self.prompts.resolve(
            "simulation",
            settings.system_prompt_override,
            settings.system_prompt_preset_id,
        )
        history: List[ConversationTurn] = [
            ConversationTurn(role="user", text=user_text)
        ]

        logger.info(
            f"Sending turn to {settings.model_id} with {len(schemas)} tools: "
            f"{user_text!r}"
        )
        response = self._send_simulation(run, base_prompt, schemas, history, settings)

        while run.iteration < settings.max_iterations:
            if not response.has_candidates:
                logger.error(f"No candidates in response (iteration {run.iteration})")
                return TurnResult(
                    narrative=NO_CANDIDATES_NARRATIVE,
                    tool_logs=run.tool_logs,
                    # Still the input state when this is the first response.
                    new_state=run.working_state,
                    iterations=run.iteration,
                    success=False,
                    error="no candidates",
                )

            if not response.tool_calls:
                break

            logger.info(
                f"Iteration {run.iteration}: {len(response.tool_calls)} tool call(s)"
            )
            results = self._dispatch(run, response.tool_calls, registry)

            history.append(response.as_model_turn())
            history.append(ConversationTurn(role="tool", tool_results=results))

            response = self._send_simulation(run, base_prompt, schemas, history, settings)
            run.iteration += 1

        if response.tool_calls:
            # Remaining calls at the cap still run; their results reach the
            # narrative request instead of another simulation round.
            logger.warning(
                f"Reached max iterations ({settings.max_iterations}); executing "
                f"{len(response.tool_calls)} remaining tool call(s) before narrating"
            )
            self._dispatch(run, response.tool_calls, registry)
        return None

    def _narrate(
        self, run: _TurnRun, user_text: str, settings: AISettings
    ) -> Tuple[str, Optional[TokenUsage]]:
        """Final prose request, tools disabled. Never raises."""
        logs = run.tool_logs
        base_prompt = self.prompts.resolve(
            "narrative",
            settings.narrative_prompt_override,
            settings.narrative_prompt_preset_id,
        )

        narrative = ""
        usage = None
        try:
            response = self._send(
                prompt=build_narrative_request(
                    user_text, logs, run.simulation_notes
                ),
                system_instruction=build_system_instruction(
                    base_prompt, run.working_state
                ),
                tool_schemas=None,
                history=None,
                model=settings.effective_narrative_model,
                temperature=settings.effective_narrative_temperature,
                max_tokens=settings.max_tokens,
            )
        except Exception as e:
            logger.error(f"Narrative request failed, using fallback: {e}")
        else:
            usage = response.usage
            if response.has_candidates:
                narrative = response.text

        if not narrative:
            last_text = run.simulation_notes[-1] if run.simulation_notes else ""
            narrative = last_text or (
                PROCESSED_NARRATIVE if logs else NOTHING_HAPPENED_NARRATIVE
            )
        return narrative, usage

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _dispatch(
        self,
        run: _TurnRun,
        calls: List[ToolCallRequest],
        registry: ToolRegistry,
    ) -> List[ToolResultPart]:
        """Execute one response's tool calls in order against the running state."""
        created_ids: Dict[int, str] = {}
        results: List[ToolResultPart] = []

        for index, call in enumerate(calls):
            args = resolve_created_refs(dict(call.args or {}), created_ids)
            tool = registry.get(call.name)

            if tool is None:
                result = f"Error: tool {call.name!r} not found or disabled."
                logger.warning(f"Requested unknown or disabled tool: {call.name}")
            else:
                logger.info(f"Executing {call.name} with {args}")
                try:
                    outcome = tool.apply(run.working_state, args)
                except Exception as e:
                    logger.exception(f"Tool execution error for {call.name}: {e}")
                    result = f"Execution error: {e}"
                else:
                    run.working_state = outcome.new_state
                    result = outcome.result
                    if outcome.created_id:
                        created_ids[index] = outcome.created_id
                    if not outcome.ok:
                        logger.info(f"{call.name} rejected: {result}")

            run.tool_logs.append(
                ToolCallLog(
                    name=call.name, args=args, result=result, iteration=run.iteration
                )
            )
            results.append(ToolResultPart(name=call.name, id=call.id, result=result))

        return results

    def _send_simulation(
        self,
        run: _TurnRun,
        base_prompt: str,
        schemas: List[Dict[str, Any]],
        history: List[ConversationTurn],
        settings: AISettings,
    ) -> ReasoningResponse:
        response = self._send(
            prompt=None,
            system_instruction=build_system_instruction(base_prompt, run.working_state),
            tool_schemas=schemas,
            history=history,
            model=settings.model_id,
            temperature=settings.temperature,
            max_tokens=settings.max_tokens,
        )
        run.simulation_usage.append(response.usage)
        if response.text:
            run.simulation_notes.append(response.text)
        return response

    def _send(
        self,
        prompt: Optional[str],
        system_instruction: str,
        tool_schemas: Optional[List[Dict[str, Any]]],
        history: Optional[List[ConversationTurn]],
        model: str,
        temperature: float,
        max_tokens: Optional[int],
    ) -> ReasoningResponse:
        return retry_call(
            self.client.send,
            prompt,
            system_instruction,
            tool_schemas,
            history,
            model=model,
            temperature=temperature,
            max_tokens=max_tokens,
            options=self.retry_options,
            sleep=self.sleep,
        )

    @staticmethod
    def _account(
        result: TurnResult,
        run: _TurnRun,
        narrative_usage: Optional[TokenUsage],
        settings: AISettings,
    ) -> None:
        simulation = TokenUsage.total(run.simulation_usage)
        narrative = narrative_usage or TokenUsage()
        total = simulation + narrative
        if total.total_tokens <= 0:
            return

        result.token_usage = TurnTokenUsage(
            simulation=simulation, narrative=narrative, total=total
        )
        result.cost_info = combine_costs(
            calculate_cost(simulation, settings.model_id)
            if simulation.total_tokens
            else None,
            calculate_cost(narrative, settings.effective_narrative_model)
            if narrative.total_tokens
            else None,
        )
