"""
Reasoning-engine client.

The orchestrator only depends on the ReasoningClient contract: given a
prompt, a system instruction, the declared tool schemas and the conversation
so far, return text and/or requested tool invocations. OpenAIReasoningClient
implements it on top of the Chat Completions API with function tools.
"""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional

from openai import OpenAI

import config

from .usage import TokenUsage

logger = logging.getLogger(__name__)


@dataclass
class ToolCallRequest:
    """One tool invocation requested by the reasoning engine."""

    name: str
    id: Optional[str] = None
    args: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ToolResultPart:
    """The result of one tool invocation, fed back to the reasoning engine."""

    name: str
    id: Optional[str]
    result: str


@dataclass
class ConversationTurn:
    """
    One entry of the multi-turn conversation.

    - role "user": free text from the player (or a narrative request)
    - role "model": what the engine answered (text and/or tool calls)
    - role "tool": results of the tool calls from the preceding model turn
    """

    role: Literal["user", "model", "tool"]
    text: Optional[str] = None
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    tool_results: List[ToolResultPart] = field(default_factory=list)


@dataclass
class ReasoningResponse:
    """Normalized response: text parts, tool calls and token usage."""

    text_parts: List[str] = field(default_factory=list)
    tool_calls: List[ToolCallRequest] = field(default_factory=list)
    has_candidates: bool = True
    usage: Optional[TokenUsage] = None

    @property
    def text(self) -> str:
        return " ".join(part for part in self.text_parts if part).strip()

    def as_model_turn(self) -> ConversationTurn:
        return ConversationTurn(
            role="model", text=self.text or None, tool_calls=list(self.tool_calls)
        )


class ReasoningClient(ABC):
    """Capability the orchestrator talks to."""

    @abstractmethod
    def is_configured(self) -> bool:
        """False when the credential needed to reach the engine is missing."""

    @abstractmethod
    def send(
        self,
        prompt: Optional[str],
        system_instruction: str,
        tool_schemas: Optional[List[Dict[str, Any]]] = None,
        history: Optional[List[ConversationTurn]] = None,
        *,
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> ReasoningResponse:
        """
        Send one request.

        Args:
            prompt: New user text appended after the history (None to just
                continue the conversation)
            system_instruction: Rules plus the current world state
            tool_schemas: Tool declarations; None or empty disables tools
            history: Conversation so far
            model: Model identifier
            temperature: Sampling temperature
            max_tokens: Optional completion token cap

        Raises:
            Any transport error; transient ones are retried by the caller.
        """


class OpenAIReasoningClient(ReasoningClient):
    """ReasoningClient backed by the OpenAI Chat Completions API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key
        # Retries happen in runtime.retry.
        self.client = (
            OpenAI(api_key=api_key, base_url=base_url, timeout=timeout, max_retries=0)
            if api_key
            else None
        )

    @classmethod
    def from_config(cls) -> "OpenAIReasoningClient":
        return cls(
            api_key=config.OPENAI_API_KEY,
            base_url=config.OPENAI_BASE_URL,
            timeout=config.LLM_TIMEOUT_SECONDS,
        )

    def is_configured(self) -> bool:
        return self.client is not None

    def send(
        self,
        prompt: Optional[str],
        system_instruction: str,
        tool_schemas: Optional[List[Dict[str, Any]]] = None,
        history: Optional[List[ConversationTurn]] = None,
        *,
        model: str,
        temperature: float,
        max_tokens: Optional[int] = None,
    ) -> ReasoningResponse:
        if self.client is None:
            raise RuntimeError("OpenAI client is not configured (missing API key)")

        turns = list(history or [])
        if prompt is not None:
            turns.append(ConversationTurn(role="user", text=prompt))

        api_params: Dict[str, Any] = {
            "model": model,
            "messages": self._to_messages(system_instruction, turns),
            "temperature": temperature,
        }
        if max_tokens:
            api_params["max_tokens"] = max_tokens
        if tool_schemas:
            api_params["tools"] = [
                {"type": "function", "function": schema} for schema in tool_schemas
            ]

        logger.debug(
            f"Sending {len(api_params['messages'])} messages to {model} "
            f"with {len(tool_schemas or [])} tools"
        )
        response = self.client.chat.completions.create(**api_params)
        return self._from_completion(response)

    @staticmethod
    def _to_messages(
        system_instruction: str, turns: List[ConversationTurn]
    ) -> List[Dict[str, Any]]:
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": system_instruction}
        ]
        for turn in turns:
            if turn.role == "user":
                messages.append({"role": "user", "content": turn.text or ""})
            elif turn.role == "model":
                message: Dict[str, Any] = {"role": "assistant", "content": turn.text}
                if turn.tool_calls:
                    message["tool_calls"] = [
                        {
                            "id": call.id,
                            "type": "function",
                            "function": {
                                "name": call.name,
                                "arguments": json.dumps(call.args, ensure_ascii=False),
                            },
                        }
                        for call in turn.tool_calls
                    ]
                messages.append(message)
            else:
                for part in turn.tool_results:
                    messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": part.id,
                            "content": json.dumps(
                                {"result": part.result}, ensure_ascii=False
                            ),
                        }
                    )
        return messages

    @staticmethod
    def _from_completion(response: Any) -> ReasoningResponse:
        usage = None
        if getattr(response, "usage", None) is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens or 0,
                completion_tokens=response.usage.completion_tokens or 0,
                total_tokens=response.usage.total_tokens or 0,
            )

        if not response.choices:
            return ReasoningResponse(has_candidates=False, usage=usage)

        message = response.choices[0].message
        text_parts = [message.content] if message.content else []

        tool_calls = []
        for index, call in enumerate(message.tool_calls or []):
            try:
                args = json.loads(call.function.arguments or "{}")
            except json.JSONDecodeError as e:
                logger.warning(
                    f"Unparseable arguments for {call.function.name}: {e}"
                )
                args = {}
            if not isinstance(args, dict):
                args = {}
            tool_calls.append(
                ToolCallRequest(
                    name=call.function.name,
                    id=call.id or f"call_{index}",
                    args=args,
                )
            )

        return ReasoningResponse(
            text_parts=text_parts, tool_calls=tool_calls, usage=usage
        )
