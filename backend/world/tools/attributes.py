"""
Narrative attribute tools: set_attribute and delete_attribute.

Attributes are free-form prose keyed by name ("health": "badly wounded but
still standing"). The structural parent link is not an attribute and can
only be changed by move_object / move_player.
"""

from typing import Literal, Optional, Union

from pydantic import Field

from models.entities import Location, Player, WorldObject

from ..game_state import GameState
from .base import ToolArgs, ToolOutcome, quoted, rejected

EntityType = Literal["player", "object", "location"]
STRUCTURAL_NAMES = frozenset({"connectionId", "connection_id", "locationId"})


class SetAttributeArgs(ToolArgs):
    """Arguments for set_attribute."""

    entity_type: EntityType = Field(
        alias="entityType",
        description="'player', 'object' or 'location'.",
    )
    entity_id: str = Field(
        alias="entityId",
        description="Real ID of the entity from the world state. Never invent IDs.",
    )
    attribute_name: str = Field(
        alias="attributeName",
        description=(
            "Name of the attribute (e.g. 'health', 'condition', 'durability', "
            "'atmosphere', 'safety'). Created automatically if missing."
        ),
    )
    value: str = Field(
        description=(
            "Rich narrative description, e.g. 'badly wounded but can still "
            "fight', 'almost broken but still works'. No raw numbers."
        ),
    )


class DeleteAttributeArgs(ToolArgs):
    """Arguments for delete_attribute."""

    entity_type: EntityType = Field(
        alias="entityType",
        description="'player', 'object' or 'location'.",
    )
    entity_id: str = Field(
        alias="entityId",
        description="ID of the player, object or location.",
    )
    attribute_name: str = Field(
        alias="attributeName",
        description="Name of the attribute to remove.",
    )


def _find(
    state: GameState, entity_type: str, entity_id: str
) -> Optional[Union[Player, WorldObject, Location]]:
    if entity_type == "player":
        return state.get_player(entity_id)
    if entity_type == "object":
        return state.get_object(entity_id)
    return state.get_location(entity_id)


def _structural_refusal(state: GameState, attribute_name: str) -> Optional[ToolOutcome]:
    if attribute_name.strip() in STRUCTURAL_NAMES:
        return rejected(
            state,
            f"{quoted(attribute_name)} is the structural parent link and cannot be "
            "changed with attribute tools. Use move_player to move players between "
            "locations and move_object to change containers.",
        )
    return None


def set_attribute(state: GameState, args: SetAttributeArgs) -> ToolOutcome:
    """Create or overwrite one narrative attribute."""
    refusal = _structural_refusal(state, args.attribute_name)
    if refusal is not None:
        return refusal

    if _find(state, args.entity_type, args.entity_id) is None:
        return rejected(
            state, f"{args.entity_type} with ID {quoted(args.entity_id)} not found"
        )

    new_state = state.clone()
    entity = _find(new_state, args.entity_type, args.entity_id)
    previous = entity.attributes.get(args.attribute_name)
    entity.attributes[args.attribute_name] = args.value

    label = f"{args.entity_type} {quoted(entity.name)}"
    if previous is not None:
        result = (
            f"Attribute {quoted(args.attribute_name)} of {label} changed "
            f"from {quoted(previous)} to {quoted(args.value)}"
        )
    else:
        result = (
            f"Attribute {quoted(args.attribute_name)} of {label} created: "
            f"{quoted(args.value)}"
        )
    return ToolOutcome(new_state=new_state, result=result)


def delete_attribute(state: GameState, args: DeleteAttributeArgs) -> ToolOutcome:
    """Remove one narrative attribute."""
    refusal = _structural_refusal(state, args.attribute_name)
    if refusal is not None:
        return refusal

    entity = _find(state, args.entity_type, args.entity_id)
    if entity is None:
        return rejected(
            state, f"{args.entity_type} with ID {quoted(args.entity_id)} not found"
        )

    label = f"{args.entity_type} {quoted(entity.name)}"
    if args.attribute_name not in entity.attributes:
        return rejected(
            state, f"attribute {quoted(args.attribute_name)} not found on {label}"
        )

    new_state = state.clone()
    clone = _find(new_state, args.entity_type, args.entity_id)
    previous = clone.attributes.pop(args.attribute_name)

    return ToolOutcome(
        new_state=new_state,
        result=(
            f"Attribute {quoted(args.attribute_name)} removed from {label} "
            f"(was: {quoted(previous)})"
        ),
    )
