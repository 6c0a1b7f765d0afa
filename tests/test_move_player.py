"""Test move_player: travel between locations along the travel graph."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.world.tool_catalog import get_tool_by_id


def travel(state, player_id, target_location_id):
    return get_tool_by_id("move_player").apply(
        state, {"playerId": player_id, "targetLocationId": target_location_id}
    )


class TestMovePlayerBasics:
    """Test legal travel."""

    def test_out_edge(self, world_state):
        outcome = travel(world_state, "char_001", "loc_002")

        assert outcome.ok
        assert outcome.new_state.get_player("char_001").connection_id == "loc_002"
        assert outcome.result == (
            'Player "Jack" moved from location "Office" to location "Street"'
        )
        assert world_state.get_player("char_001").connection_id == "loc_001"

    def test_carried_items_follow(self, world_state):
        outcome = travel(world_state, "char_001", "loc_002")

        assert outcome.new_state.get_object("obj_001").connection_id == "char_001"

    def test_nested_player_travels_from_resolved_location(self, world_state):
        # Pugh sits in the car in the Garage; the Garage connects to the Street.
        outcome = travel(world_state, "char_002", "loc_002")

        assert outcome.ok
        assert outcome.new_state.get_player("char_002").connection_id == "loc_002"
        assert 'from location "Garage"' in outcome.result

    def test_already_at_target_is_noop(self, world_state):
        outcome = travel(world_state, "char_001", "loc_001")

        assert outcome.ok
        assert outcome.new_state == world_state
        assert "already" in outcome.result


class TestMovePlayerValidation:
    """Test rejected travel."""

    def test_no_return_over_out_edge(self, world_state):
        world_state.get_player("char_001").connection_id = "loc_002"
        outcome = travel(world_state, "char_001", "loc_001")

        assert not outcome.ok
        assert outcome.new_state is world_state
        assert "no suitable connection" in outcome.result

    def test_unconnected_lists_reachable(self, world_state):
        outcome = travel(world_state, "char_001", "loc_004")

        assert not outcome.ok
        assert '(reachable: "Street")' in outcome.result

    def test_nested_player_same_location_points_to_move_object(self, world_state):
        outcome = travel(world_state, "char_002", "loc_003")

        assert not outcome.ok
        assert "move_object" in outcome.result
        assert 'object "Car"' in outcome.result

    def test_unknown_player(self, world_state):
        outcome = travel(world_state, "char_404", "loc_002")

        assert outcome.result == 'Error: Player "char_404" not found'

    def test_target_must_be_location(self, world_state):
        outcome = travel(world_state, "char_001", "obj_car")

        assert not outcome.ok
        assert 'Target location "obj_car" not found' in outcome.result

    def test_container_target_rejected_even_when_already_inside(self, world_state):
        # Pugh sits in the car; naming the car is still not a travel target.
        before = world_state.clone()
        outcome = travel(world_state, "char_002", "obj_car")

        assert not outcome.ok
        assert 'Target location "obj_car" not found' in outcome.result
        assert outcome.new_state.get_player("char_002").connection_id == "obj_car"
        assert outcome.new_state.model_dump() == before.model_dump()

    def test_player_inside_unplaced_container(self, world_state):
        world_state.get_player("char_001").connection_id = "obj_orphan"
        outcome = travel(world_state, "char_001", "loc_002")

        assert not outcome.ok
        assert "Cannot determine the current location" in outcome.result

    def test_containment_loop_reported(self, world_state):
        world_state.get_object("obj_car").connection_id = "char_002"
        outcome = travel(world_state, "char_002", "loc_002")

        assert not outcome.ok
        assert "loops" in outcome.result

    def test_missing_arguments(self, world_state):
        outcome = get_tool_by_id("move_player").apply(world_state, {})

        assert outcome.result == "Error: playerId and targetLocationId are required"
