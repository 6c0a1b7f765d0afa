"""
Narration layer: system prompts for the simulation and narrative phases.

Presets are read from prompt_presets.yaml; the world state is embedded into
every system instruction as JSON.
"""

from .prompts import (
    PromptLibrary,
    PromptPreset,
    build_narrative_request,
    build_system_instruction,
    get_prompt_library,
)

__all__ = [
    "PromptLibrary",
    "PromptPreset",
    "build_narrative_request",
    "build_system_instruction",
    "get_prompt_library",
]
