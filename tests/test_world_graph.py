"""Test containment walks, cycle detection, deletion reparenting and travel edges."""

import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.world.world_graph import (
    all_descendants,
    containment_path,
    deletion_parent,
    find_root_location_or_player,
    has_travel_edge,
    reachable_locations,
    reparent_direct_children,
    walk_ancestors,
    would_create_cycle,
)
from models.entities import Connection


class TestAncestorWalk:
    """Test walking up the containment graph."""

    def test_nested_object_reaches_location(self, world_state):
        walk = walk_ancestors(world_state, "obj_letter")
        assert walk.root.id == "loc_001"
        assert [ref.id for ref in walk.chain] == ["obj_letter", "obj_envelope", "obj_bust"]
        assert not walk.has_cycle
        assert walk.broken_at is None

    def test_player_in_vehicle(self, world_state):
        assert walk_ancestors(world_state, "char_002").root.id == "loc_003"

    def test_location_is_its_own_root(self, world_state):
        walk = walk_ancestors(world_state, "loc_002")
        assert walk.root.id == "loc_002"
        assert walk.chain == []

    def test_unknown_entity(self, world_state):
        walk = walk_ancestors(world_state, "ghost")
        assert not walk.found
        assert walk.broken_at is None

    def test_unparented_object(self, world_state):
        walk = walk_ancestors(world_state, "obj_orphan")
        assert walk.found
        assert walk.root is None

    def test_broken_chain(self, world_state):
        world_state.get_object("obj_bust").connection_id = "obj_missing"
        walk = walk_ancestors(world_state, "obj_letter")
        assert walk.broken_at == "obj_missing"
        assert walk.root is None

    def test_cycle_terminates(self, world_state):
        world_state.get_object("obj_bust").connection_id = "obj_letter"
        walk = walk_ancestors(world_state, "obj_envelope")
        assert walk.has_cycle
        assert walk.cycle_at == "obj_envelope"
        assert walk.root is None

    def test_containment_path(self, world_state):
        walk = walk_ancestors(world_state, "char_002")
        assert containment_path(walk) == "Garage > Car (obj_car) > Pugh (char_002)"


class TestRootLocationOrPlayer:
    """Test the nearest location/player lookup used for deletions."""

    def test_stops_at_player(self, world_state):
        assert find_root_location_or_player(world_state, "obj_001") == "char_001"

    def test_walks_through_objects(self, world_state):
        assert find_root_location_or_player(world_state, "obj_letter") == "loc_001"

    def test_unparented(self, world_state):
        assert find_root_location_or_player(world_state, "obj_orphan") is None

    def test_cycle_returns_none(self, world_state):
        world_state.get_object("obj_bust").connection_id = "obj_letter"
        assert find_root_location_or_player(world_state, "obj_letter") is None


class TestCycleDetection:
    """Test the pre-move cycle check."""

    def test_self_parent(self, world_state):
        assert would_create_cycle(world_state, "obj_bust", "obj_bust")

    def test_direct_child(self, world_state):
        assert would_create_cycle(world_state, "obj_bust", "obj_envelope")

    def test_transitive_descendant(self, world_state):
        assert would_create_cycle(world_state, "obj_bust", "obj_letter")

    def test_player_into_own_item(self, world_state):
        assert would_create_cycle(world_state, "char_001", "obj_001")

    def test_legal_moves(self, world_state):
        assert not would_create_cycle(world_state, "obj_letter", "obj_bust")
        assert not would_create_cycle(world_state, "char_001", "obj_car")
        assert not would_create_cycle(world_state, "obj_bust", "loc_004")

    def test_terminates_on_existing_cycle(self, world_state):
        world_state.get_object("obj_car").connection_id = "char_002"
        assert not would_create_cycle(world_state, "obj_bust", "obj_car")


class TestDeletionSupport:
    """Test descendant listing and one-level reparenting."""

    def test_all_descendants(self, world_state):
        ids = {e.id for e in all_descendants(world_state, "loc_001")}
        assert ids == {"char_001", "obj_001", "obj_bust", "obj_envelope", "obj_letter"}

    def test_reparent_only_direct_children(self, world_state):
        moved = reparent_direct_children(world_state, "obj_bust", "loc_001")
        assert [m.id for m in moved] == ["obj_envelope"]
        assert world_state.get_object("obj_envelope").connection_id == "loc_001"
        assert world_state.get_object("obj_letter").connection_id == "obj_envelope"

    def test_reparent_players_too(self, world_state):
        moved = reparent_direct_children(world_state, "obj_car", "loc_003")
        assert [m.id for m in moved] == ["char_002"]
        assert world_state.get_player("char_002").connection_id == "loc_003"

    def test_deletion_parent_is_own_parent(self, world_state):
        assert deletion_parent(world_state, "obj_envelope") == "obj_bust"

    def test_deletion_parent_of_unparented(self, world_state):
        assert deletion_parent(world_state, "obj_orphan") == ""
        assert deletion_parent(world_state, "ghost") == ""


class TestTravelGraph:
    """Test direction-aware adjacency."""

    def test_out_edge_from_origin(self, world_state):
        assert has_travel_edge(world_state, "loc_001", "loc_002")

    def test_in_edge_declared_on_target(self, world_state):
        # "in" on the Roof towards the Garage: the Roof can be entered from the Garage.
        world_state.get_location("loc_004").connections.append(
            Connection(target_location_id="loc_003", type="in")
        )
        assert has_travel_edge(world_state, "loc_003", "loc_004")
        assert not has_travel_edge(world_state, "loc_004", "loc_003")

    def test_out_edge_does_not_allow_return(self, world_state):
        assert not has_travel_edge(world_state, "loc_002", "loc_001")

    def test_bidirectional_both_ways(self, world_state):
        assert has_travel_edge(world_state, "loc_002", "loc_003")
        assert has_travel_edge(world_state, "loc_003", "loc_002")

    def test_no_edge(self, world_state):
        assert not has_travel_edge(world_state, "loc_001", "loc_004")
        assert not has_travel_edge(world_state, "loc_001", "loc_404")

    def test_reachable_locations(self, world_state):
        assert [l.id for l in reachable_locations(world_state, "loc_002")] == ["loc_003"]
        assert [l.id for l in reachable_locations(world_state, "loc_003")] == ["loc_002"]
