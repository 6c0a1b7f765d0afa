"""
World Graph Utilities - containment and travel graph operations.

Two independent graphs live in a GameState:

- the containment graph, formed by ``connection_id`` links from players and
  objects up to their parent (a location, player or object)
- the travel graph, formed by ``Location.connections``; it only decides
  whether a player may walk between two locations

All walks here are bounded by a visited set so a corrupted state with a cycle
is reported instead of looping forever.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from models.entities import Location

from .game_state import ContainedEntity, EntityRef, GameState


@dataclass
class AncestorWalk:
    """
    Result of walking up the containment graph from an entity.

    ``chain`` holds the visited players/objects starting with the entity
    itself, ``root`` the location the walk ended at (if any). ``cycle_at`` is
    set when an id repeated; ``broken_at`` when a connection_id did not
    resolve to anything.
    """

    start_id: str
    chain: List[EntityRef] = field(default_factory=list)
    root: Optional[Location] = None
    cycle_at: Optional[str] = None
    broken_at: Optional[str] = None
    visited: List[str] = field(default_factory=list)

    @property
    def found(self) -> bool:
        """True when the starting entity exists at all."""
        return bool(self.chain) or self.root is not None

    @property
    def has_cycle(self) -> bool:
        return self.cycle_at is not None


def walk_ancestors(state: GameState, entity_id: str) -> AncestorWalk:
    """
    Follow connection_id upwards from an entity until a location is reached.

    Args:
        state: Game state to walk
        entity_id: Player, object or location id to start from

    Returns:
        AncestorWalk describing the chain, the root location and any
        cycle or dangling reference that stopped the walk
    """
    walk = AncestorWalk(start_id=entity_id)
    index = state.entity_index()
    current = entity_id

    while current:
        if current in walk.visited:
            walk.cycle_at = current
            break
        walk.visited.append(current)

        found = index.get(current)
        if found is None:
            if current != entity_id:
                walk.broken_at = current
            break

        kind, entity = found
        if kind == "location":
            walk.root = entity
            break

        walk.chain.append(EntityRef(kind=kind, entity=entity))
        current = entity.connection_id

    return walk


def find_root_location_or_player(state: GameState, object_id: str) -> Optional[str]:
    """
    Walk up from an object and return the first location or player id met.

    Returns None when the object is unparented, the chain breaks or loops.
    """
    obj = state.get_object(object_id)
    if obj is None or not obj.connection_id:
        return None

    visited = {object_id}
    current = obj.connection_id
    while current and current not in visited:
        visited.add(current)
        if state.get_location(current) or state.get_player(current):
            return current
        parent = state.get_object(current)
        if parent is None:
            return None
        current = parent.connection_id
    return None


def would_create_cycle(state: GameState, entity_id: str, target_id: str) -> bool:
    """
    Check whether putting ``entity_id`` under ``target_id`` closes a loop.

    Walks up from the target; meeting the entity on the way means the target
    is already (directly or transitively) inside the entity.
    """
    if entity_id == target_id:
        return True

    index = state.entity_index()
    visited = set()
    current = target_id
    while current and current not in visited:
        if current == entity_id:
            return True
        visited.add(current)
        found = index.get(current)
        if found is None or found[0] == "location":
            return False
        current = found[1].connection_id
    return False


def containment_path(walk: AncestorWalk) -> str:
    """Render a walk as 'Root > Outer > ... > Entity'."""
    names = [f"{ref.name} ({ref.id})" for ref in reversed(walk.chain)]
    if walk.root is not None:
        names.insert(0, walk.root.name)
    return " > ".join(names)


def all_descendants(state: GameState, parent_id: str) -> List[ContainedEntity]:
    """Every player/object nested under ``parent_id`` at any depth."""
    result: List[ContainedEntity] = []
    seen = {parent_id}
    frontier = [parent_id]
    while frontier:
        current = frontier.pop(0)
        for child in state.children_of(current):
            if child.id in seen:
                continue
            seen.add(child.id)
            result.append(child)
            frontier.append(child.id)
    return result


def reparent_direct_children(
    state: GameState, deleted_id: str, new_parent_id: str
) -> List[ContainedEntity]:
    """
    Move the direct children of ``deleted_id`` under ``new_parent_id``.

    Only one level is collapsed: grandchildren keep pointing at their own
    parent, so the nested structure below each child survives. Mutates the
    given state; callers pass a clone.

    Returns:
        The children that were moved
    """
    children = state.children_of(deleted_id)
    for child in children:
        child.connection_id = new_parent_id
    return children


def deletion_parent(state: GameState, object_id: str) -> str:
    """
    Where the children of a deleted object should go.

    The deleted object's own parent when it has one, otherwise the nearest
    ancestor location/player found by walking the chain, otherwise nowhere
    (empty string).
    """
    obj = state.get_object(object_id)
    if obj is None:
        return ""
    if obj.connection_id:
        return obj.connection_id
    return find_root_location_or_player(state, object_id) or ""


def has_travel_edge(state: GameState, from_id: str, to_id: str) -> bool:
    """
    Direction-aware travel check between two locations.

    Legal when the origin declares an ``out``/``bidirectional`` edge to the
    target, or the target declares an ``in``/``bidirectional`` edge back to
    the origin.
    """
    origin = state.get_location(from_id)
    target = state.get_location(to_id)
    if origin is None or target is None:
        return False

    outgoing = any(
        c.target_location_id == to_id and c.type in ("out", "bidirectional")
        for c in origin.connections
    )
    incoming = any(
        c.target_location_id == from_id and c.type in ("in", "bidirectional")
        for c in target.connections
    )
    return outgoing or incoming


def reachable_locations(state: GameState, from_id: str) -> List[Location]:
    """Locations a player standing in ``from_id`` can travel to in one step."""
    return [
        location
        for location in state.locations
        if location.id != from_id and has_travel_edge(state, from_id, location.id)
    ]
