"""
Legacy single-field state setters.

Older worlds describe each entity with one scalar ``state`` string instead of
an attribute map. These tools keep those worlds playable; new content should
prefer set_attribute.
"""

from pydantic import Field

from ..game_state import GameState
from .base import ToolArgs, ToolOutcome, quoted, rejected


class ChangeLocationStateArgs(ToolArgs):
    """Arguments for change_location_state."""

    location_id: str = Field(alias="locationId", description="ID of the location.")
    new_state: str = Field(
        alias="newState",
        description="New description of the state (e.g. 'flooded', 'silent').",
    )


class ChangeObjectStateArgs(ToolArgs):
    """Arguments for change_object_state."""

    object_id: str = Field(alias="objectId", description="ID of the object.")
    new_state: str = Field(
        alias="newState",
        description="New description of the state (e.g. 'broken', 'activated').",
    )


class ChangePlayerStateArgs(ToolArgs):
    """Arguments for change_player_state."""

    player_id: str = Field(alias="playerId", description="ID of the player.")
    new_state: str = Field(
        alias="newState",
        description="New description of the state (e.g. 'unconscious', 'inspired').",
    )


def change_location_state(
    state: GameState, args: ChangeLocationStateArgs
) -> ToolOutcome:
    if state.get_location(args.location_id) is None:
        return rejected(state, f"Location {quoted(args.location_id)} not found")

    new_state = state.clone()
    location = new_state.get_location(args.location_id)
    location.state = args.new_state
    return ToolOutcome(
        new_state=new_state,
        result=f"State of location {quoted(location.name)} changed to: {quoted(args.new_state)}",
    )


def change_object_state(state: GameState, args: ChangeObjectStateArgs) -> ToolOutcome:
    if state.get_object(args.object_id) is None:
        return rejected(state, f"Object {quoted(args.object_id)} not found")

    new_state = state.clone()
    obj = new_state.get_object(args.object_id)
    obj.state = args.new_state
    return ToolOutcome(
        new_state=new_state,
        result=f"State of object {quoted(obj.name)} changed to: {quoted(args.new_state)}",
    )


def change_player_state(state: GameState, args: ChangePlayerStateArgs) -> ToolOutcome:
    if state.get_player(args.player_id) is None:
        return rejected(state, f"Player {quoted(args.player_id)} not found")

    new_state = state.clone()
    player = new_state.get_player(args.player_id)
    player.state = args.new_state
    return ToolOutcome(
        new_state=new_state,
        result=f"State of player {quoted(player.name)} changed to: {quoted(args.new_state)}",
    )
