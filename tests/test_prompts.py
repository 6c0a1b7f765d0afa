"""Test prompt preset loading and request building."""

import sys
from pathlib import Path
from types import SimpleNamespace

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from narration.prompts import (
    FALLBACK_NARRATIVE_PROMPT,
    FALLBACK_SIMULATION_PROMPT,
    NARRATIVE_INSTRUCTION_AFTER_CHANGES,
    NARRATIVE_INSTRUCTION_NO_CHANGES,
    SIMULATION_NOTES_HEADER,
    PromptLibrary,
    build_narrative_request,
    build_system_instruction,
)


class TestPromptLibrary:
    """Test loading presets from YAML."""

    def test_bundled_presets(self):
        library = PromptLibrary()

        assert [p.id for p in library.presets("simulation")][:2] == ["default", "strict_referee"]
        assert library.get("narrative", "terse") is not None
        assert "createdId" in library.resolve("simulation")

    def test_custom_file(self, tmp_path):
        presets = tmp_path / "presets.yaml"
        presets.write_text(
            "simulation:\n"
            "  - id: default\n"
            "    name: Plain\n"
            "    prompt: Use tools.\n"
            "  - id: broken\n"
            "narrative:\n"
            "  - id: gothic\n"
            "    name: Gothic\n"
            "    prompt: |\n"
            "      Write like a gothic novel.\n",
            encoding="utf-8",
        )
        library = PromptLibrary(str(presets))

        assert library.resolve("simulation") == "Use tools."
        assert library.get("simulation", "broken") is None
        assert library.resolve("narrative", preset_id="gothic") == "Write like a gothic novel."
        # No narrative "default" in the file: the built-in one is added.
        assert library.resolve("narrative") == FALLBACK_NARRATIVE_PROMPT

    def test_missing_file_uses_fallbacks(self, tmp_path):
        library = PromptLibrary(str(tmp_path / "nope.yaml"))

        assert library.resolve("simulation") == FALLBACK_SIMULATION_PROMPT
        assert library.resolve("narrative") == FALLBACK_NARRATIVE_PROMPT

    def test_invalid_yaml_uses_fallbacks(self, tmp_path):
        presets = tmp_path / "presets.yaml"
        presets.write_text("simulation: [unclosed\n", encoding="utf-8")

        assert PromptLibrary(str(presets)).resolve("simulation") == FALLBACK_SIMULATION_PROMPT

    def test_resolution_order(self):
        library = PromptLibrary()
        default = library.resolve("simulation")

        assert library.resolve("simulation", override="Custom.", preset_id="strict_referee") == "Custom."
        assert library.resolve("simulation", preset_id="strict_referee") != default
        assert library.resolve("simulation", preset_id="unknown") == default


class TestRequestBuilding:
    def test_system_instruction_includes_state(self, world_state):
        instruction = build_system_instruction("Rules.", world_state)

        assert instruction.startswith("Rules.\n\nCURRENT WORLD STATE (JSON):\n{")
        assert '"gameGenre": "noir"' in instruction
        assert '"currentSituation": "Quiet."' in instruction

    def test_narrative_request_with_changes(self):
        logs = [
            SimpleNamespace(name="move_player", result="Jack moved"),
            SimpleNamespace(name="set_attribute", result="mood set"),
        ]

        assert build_narrative_request("go", logs) == (
            "go\n\nChanges applied to the world:\n"
            "- move_player: Jack moved\n"
            "- set_attribute: mood set\n\n"
            f"{NARRATIVE_INSTRUCTION_AFTER_CHANGES}"
        )

    def test_narrative_request_with_simulation_notes(self):
        logs = [SimpleNamespace(name="move_player", result="Jack moved")]

        assert build_narrative_request("go", logs, ["The door creaks.", "", "Rain."]) == (
            "go\n\nChanges applied to the world:\n"
            "- move_player: Jack moved\n\n"
            f"{SIMULATION_NOTES_HEADER}\nThe door creaks.\n\n---\n\nRain.\n\n"
            f"{NARRATIVE_INSTRUCTION_AFTER_CHANGES}"
        )

    def test_notes_without_changes(self):
        assert build_narrative_request("wave", [], ["Nobody notices."]) == (
            f"wave\n\n{SIMULATION_NOTES_HEADER}\nNobody notices.\n\n"
            f"{NARRATIVE_INSTRUCTION_NO_CHANGES}"
        )
