"""Test delete_object: removal and one-level reparenting of contents."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.world.tool_catalog import get_tool_by_id
from models.entities import WorldObject


def delete(state, object_id):
    return get_tool_by_id("delete_object").apply(state, {"objectId": object_id})


class TestDeleteObject:
    """Test successful deletions."""

    def test_leaf_object(self, world_state):
        outcome = delete(world_state, "obj_001")

        assert outcome.ok
        assert outcome.new_state.get_object("obj_001") is None
        assert outcome.result == 'Object "Revolver" deleted'
        assert world_state.get_object("obj_001") is not None

    def test_direct_children_move_to_parent(self, world_state):
        outcome = delete(world_state, "obj_bust")

        new_state = outcome.new_state
        assert new_state.get_object("obj_bust") is None
        assert new_state.get_object("obj_envelope").connection_id == "loc_001"
        # Deeper nesting is preserved under the reparented child.
        assert new_state.get_object("obj_letter").connection_id == "obj_envelope"
        # The message names everything that was inside, at any depth.
        assert outcome.result == (
            'Object "Bust" deleted. Nested items (2) moved to location "Office": '
            '"Envelope", "Letter"'
        )

    def test_players_inside_are_reparented(self, world_state):
        outcome = delete(world_state, "obj_car")

        assert outcome.new_state.get_player("char_002").connection_id == "loc_003"
        assert '"Pugh"' in outcome.result

    def test_children_move_into_parent_object(self, world_state):
        outcome = delete(world_state, "obj_envelope")

        assert outcome.new_state.get_object("obj_letter").connection_id == "obj_bust"
        assert 'object "Bust"' in outcome.result

    def test_several_children(self, world_state):
        world_state.objects.append(
            WorldObject(id="obj_stamp", name="Stamp", connection_id="obj_bust")
        )
        outcome = delete(world_state, "obj_bust")

        new_state = outcome.new_state
        assert new_state.get_object("obj_stamp").connection_id == "loc_001"
        assert new_state.get_object("obj_envelope").connection_id == "loc_001"
        assert "Nested items (3)" in outcome.result
        assert all(f'"{name}"' in outcome.result for name in ("Envelope", "Stamp", "Letter"))

    def test_unparented_object_children_become_unparented(self, world_state):
        world_state.objects.append(
            WorldObject(id="obj_inner", name="Inner", connection_id="obj_orphan")
        )
        outcome = delete(world_state, "obj_orphan")

        assert outcome.new_state.get_object("obj_inner").connection_id == ""
        assert "unparented" in outcome.result

    def test_state_stays_consistent(self, world_state):
        outcome = delete(world_state, "obj_bust")

        assert outcome.new_state.validate_invariants() == []


class TestDeleteObjectValidation:
    """Test rejected deletions."""

    def test_unknown_object(self, world_state):
        outcome = delete(world_state, "obj_404")

        assert not outcome.ok
        assert outcome.new_state is world_state
        assert outcome.result == 'Error: Object "obj_404" not found'

    def test_locations_and_players_are_not_objects(self, world_state):
        assert not delete(world_state, "loc_001").ok
        assert not delete(world_state, "char_001").ok

    def test_missing_argument(self, world_state):
        outcome = get_tool_by_id("delete_object").apply(world_state, {})

        assert outcome.result == "Error: objectId is required"
