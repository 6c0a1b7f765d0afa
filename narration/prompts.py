"""
Prompt presets and instruction building for both phases of a turn.

Presets live in prompt_presets.yaml next to this module. If the file is
missing or broken the built-in fallback prompts are used, so a turn can
always be composed.
"""

import os
import logging
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Sequence

import yaml

from backend.world.game_state import GameState

logger = logging.getLogger(__name__)

PromptKind = Literal["simulation", "narrative"]

PRESETS_FILE = os.path.join(os.path.dirname(__file__), "prompt_presets.yaml")

FALLBACK_SIMULATION_PROMPT = """You are an AI Game Master. Change the world state only by calling tools.
Do not write a narrative answer; it is produced separately.
Use only IDs present in the world state or returned by a tool. Never invent IDs.
Respect the genre and rules implied by the world description."""

FALLBACK_NARRATIVE_PROMPT = """You are a storyteller. Describe, in one or two vivid paragraphs,
what happened in the game world as a result of the player's action.
Match the tone of the world. Do not mention game mechanics or IDs."""

NARRATIVE_INSTRUCTION_AFTER_CHANGES = (
    "Write a vivid description of what happened as a result of these changes."
)
NARRATIVE_INSTRUCTION_NO_CHANGES = (
    "Write a vivid description in response to the player's request. Describe what "
    "they see, hear and feel, including why the action did not succeed (if it did not)."
)
SIMULATION_NOTES_HEADER = "Game master notes from the simulation:"


@dataclass
class PromptPreset:
    """A named system prompt."""

    id: str
    name: str
    prompt: str
    kind: PromptKind
    description: Optional[str] = None


class PromptLibrary:
    """Simulation and narrative presets loaded from YAML."""

    def __init__(self, presets_file: str = PRESETS_FILE):
        self.presets_file = presets_file
        self._presets: Dict[str, List[PromptPreset]] = {
            "simulation": [],
            "narrative": [],
        }
        self._load_presets()

    def _load_presets(self) -> None:
        """Load presets from the YAML file, keeping fallbacks on failure."""
        if os.path.exists(self.presets_file):
            try:
                with open(self.presets_file, "r", encoding="utf-8") as f:
                    data = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.error(f"Failed to load prompt presets {self.presets_file}: {e}")
                data = {}

            for kind in ("simulation", "narrative"):
                for entry in data.get(kind) or []:
                    if not isinstance(entry, dict) or not entry.get("prompt"):
                        logger.warning(f"Skipping malformed {kind} preset: {entry!r}")
                        continue
                    self._presets[kind].append(
                        PromptPreset(
                            id=str(entry.get("id") or entry.get("name")),
                            name=str(entry.get("name") or entry.get("id")),
                            prompt=str(entry["prompt"]).strip(),
                            kind=kind,
                            description=entry.get("description"),
                        )
                    )
        else:
            logger.warning(f"Prompt presets file not found: {self.presets_file}")

        for kind, fallback in (
            ("simulation", FALLBACK_SIMULATION_PROMPT),
            ("narrative", FALLBACK_NARRATIVE_PROMPT),
        ):
            if self.get(kind, "default") is None:
                self._presets[kind].insert(
                    0,
                    PromptPreset(id="default", name="Built-in", prompt=fallback, kind=kind),
                )

        logger.debug(
            f"Loaded {len(self._presets['simulation'])} simulation and "
            f"{len(self._presets['narrative'])} narrative presets"
        )

    def presets(self, kind: PromptKind) -> List[PromptPreset]:
        return list(self._presets[kind])

    def get(self, kind: PromptKind, preset_id: str) -> Optional[PromptPreset]:
        return next((p for p in self._presets[kind] if p.id == preset_id), None)

    def resolve(
        self,
        kind: PromptKind,
        override: Optional[str] = None,
        preset_id: Optional[str] = None,
    ) -> str:
        """
        Pick the base prompt for a phase.

        An explicit override wins, then the selected preset, then the
        "default" preset.
        """
        if override:
            logger.debug(f"Using {kind} prompt override")
            return override
        if preset_id:
            preset = self.get(kind, preset_id)
            if preset is not None:
                logger.debug(f"Using {kind} preset: {preset.name}")
                return preset.prompt
            logger.warning(f"Unknown {kind} preset {preset_id!r}, using default")
        return self.get(kind, "default").prompt


_library: Optional[PromptLibrary] = None


def get_prompt_library() -> PromptLibrary:
    """Shared library instance, loaded on first use."""
    global _library
    if _library is None:
        _library = PromptLibrary()
    return _library


def build_system_instruction(base_prompt: str, state: GameState) -> str:
    """Base prompt followed by the current world state as JSON."""
    return f"{base_prompt}\n\nCURRENT WORLD STATE (JSON):\n{state.to_prompt_json()}\n"


def build_narrative_request(
    user_text: str,
    tool_logs: Sequence,
    simulation_notes: Optional[Sequence[str]] = None,
) -> str:
    """
    Single-message prompt for the narrative pass.

    ``tool_logs`` are the executed tool calls of the turn (anything with
    ``name`` and ``result``). ``simulation_notes`` is the text the engine
    wrote alongside its tool calls; it is passed on as context.
    """
    parts = [user_text]
    if tool_logs:
        summary = "\n".join(f"- {log.name}: {log.result}" for log in tool_logs)
        parts.append(f"Changes applied to the world:\n{summary}")
    notes = [note for note in (simulation_notes or []) if note]
    if notes:
        parts.append(f"{SIMULATION_NOTES_HEADER}\n" + "\n\n---\n\n".join(notes))
    parts.append(
        NARRATIVE_INSTRUCTION_AFTER_CHANGES if tool_logs else NARRATIVE_INSTRUCTION_NO_CHANGES
    )
    return "\n\n".join(parts)
