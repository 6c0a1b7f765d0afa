"""
Containment and travel tools.

move_object is the only way to change a parent in the containment graph
(including putting a player into a car or taking them out of it).
move_player walks a player between locations along the travel graph.
"""

import logging

from pydantic import Field

from ..game_state import GameState
from ..world_graph import (
    has_travel_edge,
    reachable_locations,
    walk_ancestors,
    would_create_cycle,
)
from .base import ToolArgs, ToolOutcome, quoted, rejected

logger = logging.getLogger(__name__)


class MoveObjectArgs(ToolArgs):
    """Arguments for move_object."""

    object_id: str = Field(
        alias="objectId",
        description="ID of the object or player to move.",
    )
    target_id: str = Field(
        alias="targetId",
        description="ID of the new parent: a Location ID, Player ID or Object ID.",
    )


class MovePlayerArgs(ToolArgs):
    """Arguments for move_player."""

    player_id: str = Field(
        alias="playerId",
        description="ID of an existing player (e.g. char_001). Never invent IDs.",
    )
    target_location_id: str = Field(
        alias="targetLocationId",
        description="ID of the destination location (e.g. loc_002).",
    )


def move_object(state: GameState, args: MoveObjectArgs) -> ToolOutcome:
    """Re-parent a player or object under a location, player or object."""
    entity = state.get_contained(args.object_id)
    if entity is None:
        if state.get_location(args.object_id):
            return rejected(
                state, f"Location {quoted(args.object_id)} cannot be moved"
            )
        return rejected(state, f"Object or player {quoted(args.object_id)} not found")

    target = state.resolve(args.target_id)
    if target is None:
        return rejected(state, f"Target {quoted(args.target_id)} not found")

    if args.object_id == args.target_id:
        return rejected(state, f"{quoted(entity.name)} cannot be placed inside itself")

    if entity.connection_id == args.target_id:
        return ToolOutcome(
            new_state=state,
            result=f"{quoted(entity.name)} is already in {target.describe()}",
        )

    if would_create_cycle(state, args.object_id, args.target_id):
        return rejected(
            state,
            f"Cannot move {quoted(entity.name)} into {target.describe()}: "
            f"{quoted(target.name)} is already inside {quoted(entity.name)} "
            "(containment cycle)",
        )

    previous = state.resolve(entity.connection_id)
    origin = previous.describe() if previous else "nowhere"

    new_state = state.clone()
    moved = new_state.get_contained(args.object_id)
    moved.connection_id = args.target_id

    logger.debug(f"move_object: {args.object_id} -> {args.target_id}")
    return ToolOutcome(
        new_state=new_state,
        result=(
            f"{quoted(moved.name)} ({moved.id}) moved from {origin} "
            f"to {target.describe()}"
        ),
    )


def move_player(state: GameState, args: MovePlayerArgs) -> ToolOutcome:
    """
    Walk a player to an adjacent location.

    The player's current location is resolved through the containment chain,
    so a player sitting in a car parked in the garage travels from the garage.
    """
    player = state.get_player(args.player_id)
    if player is None:
        return rejected(state, f"Player {quoted(args.player_id)} not found")

    # Only locations are travel targets; containers go through move_object.
    target = state.get_location(args.target_location_id)
    if target is None:
        return rejected(
            state, f"Target location {quoted(args.target_location_id)} not found"
        )

    if player.connection_id == target.id:
        return ToolOutcome(
            new_state=state,
            result=(
                f"Player {quoted(player.name)} is already in location "
                f"{quoted(target.name)}"
            ),
        )

    walk = walk_ancestors(state, args.player_id)
    current = walk.root
    if current is None:
        reason = "the containment chain loops" if walk.has_cycle else (
            "they are inside something that is not anywhere"
        )
        return rejected(
            state,
            f"Cannot determine the current location of player {quoted(player.name)} "
            f"(parent {quoted(player.connection_id)}): {reason}",
        )

    if current.id == target.id:
        container = state.resolve(player.connection_id)
        inside = container.describe() if container else quoted(player.connection_id)
        return rejected(
            state,
            f"Player {quoted(player.name)} is already in location {quoted(target.name)} "
            f"(inside {inside}); use move_object to leave a container",
        )

    if not has_travel_edge(state, current.id, target.id):
        reachable = ", ".join(quoted(l.name) for l in reachable_locations(state, current.id))
        return rejected(
            state,
            f"Cannot move player {quoted(player.name)} from location "
            f"{quoted(current.name)} to location {quoted(target.name)}: "
            f"no suitable connection between them"
            + (f" (reachable: {reachable})" if reachable else ""),
        )

    new_state = state.clone()
    new_state.get_player(args.player_id).connection_id = target.id

    logger.debug(f"move_player: {args.player_id} {current.id} -> {target.id}")
    return ToolOutcome(
        new_state=new_state,
        result=(
            f"Player {quoted(player.name)} moved from location "
            f"{quoted(current.name)} to location {quoted(target.name)}"
        ),
    )
