"""Test the command-line helpers (no interactive loop)."""

import json
import sys
from pathlib import Path

import pytest
from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.world.tool_catalog import DEFAULT_ENABLED_TOOLS
from narration.prompts import PromptLibrary
from runtime.main import handle_command, load_world, parse_tools
from runtime.orchestrator import AISettings, TurnOrchestrator
from runtime.session import GameSession
from stubs import StubReasoningClient


class TestLoadWorld:
    def test_bundled_demo_world(self):
        world = load_world()

        assert world.get_location("loc_001") is not None
        assert world.get_player("char_001").connection_id == "loc_001"
        assert world.validate_invariants() == []

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_world(str(tmp_path / "missing.json"))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "world.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(json.JSONDecodeError):
            load_world(str(path))

    def test_schema_mismatch(self, tmp_path):
        path = tmp_path / "world.json"
        path.write_text(json.dumps({"locations": [{"name": "No id"}]}), encoding="utf-8")

        with pytest.raises(ValidationError):
            load_world(str(path))


class TestParseTools:
    def test_default(self):
        assert parse_tools(None) == DEFAULT_ENABLED_TOOLS

    def test_unknown_names_dropped(self):
        assert parse_tools("move_player, teleport,,find_entity_location") == [
            "move_player",
            "find_entity_location",
        ]


class TestCommands:
    @pytest.fixture
    def session(self, world_state, fast_retry):
        orchestrator = TurnOrchestrator(
            StubReasoningClient(), retry_options=fast_retry, prompts=PromptLibrary()
        )
        return GameSession(world_state, orchestrator, settings=AISettings())

    def test_not_a_command(self, session):
        assert not handle_command(session, "open the door")

    def test_tools_listing(self, session, capsys):
        assert handle_command(session, "/tools")

        out = capsys.readouterr().out
        assert "[x] move_object" in out
        assert "[ ] find_entity_location" in out

    def test_enable_disable(self, session, capsys):
        handle_command(session, "/enable find_entity_location")
        handle_command(session, "/disable delete_object")
        handle_command(session, "/enable teleport")

        assert "find_entity_location" in session.enabled_tools
        assert "delete_object" not in session.enabled_tools
        assert "unknown tool: teleport" in capsys.readouterr().out

    def test_state_dump(self, session, capsys):
        handle_command(session, "/state")

        assert json.loads(capsys.readouterr().out)["locations"][0]["id"] == "loc_001"
