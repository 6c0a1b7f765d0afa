"""
Object lifecycle tools: create_object and delete_object.
"""

import json
import logging
import random
import string
import time
from typing import Any, Dict, Optional, Set, Union

from pydantic import Field

from models.entities import WorldObject

from ..game_state import GameState
from ..world_graph import all_descendants, deletion_parent, reparent_direct_children
from .base import ToolArgs, ToolOutcome, quoted, rejected

logger = logging.getLogger(__name__)

DEFAULT_CONDITION = "in good condition"
ID_ATTEMPTS = 5


class CreateObjectArgs(ToolArgs):
    """Arguments for create_object."""

    name: str = Field(
        description="Name of the object (e.g. 'Rusty key', 'Note').",
    )
    connection_id: str = Field(
        alias="connectionId",
        description=(
            "Owner/container ID: a Player ID (the player carries it), a "
            "Location ID (it lies there) or an Object ID (it is inside)."
        ),
    )
    attributes: Optional[Union[str, Dict[str, Any]]] = Field(
        default=None,
        description=(
            'JSON object of narrative attributes, e.g. {"condition": "rusty", '
            '"size": "small", "material": "iron"}. Useful keys: condition, type, '
            "size, material, appearance, smell, content, feature, quality, "
            "durability. Values must be descriptive prose, never numbers."
        ),
    )
    description: Optional[str] = Field(
        default=None,
        description="Optional free-text description of the object.",
    )


class DeleteObjectArgs(ToolArgs):
    """Arguments for delete_object."""

    object_id: str = Field(
        alias="objectId",
        description=(
            "Real ID of the object from the world state (e.g. "
            "'obj_1764794659879_jo28') or from a create_object result."
        ),
    )


def generate_object_id(existing: Set[str]) -> Optional[str]:
    """
    Allocate an id of the form obj_<epoch-ms>_<4 base36 chars>.

    Returns None if every attempt collided with an existing id.
    """
    alphabet = string.digits + string.ascii_lowercase
    for _ in range(ID_ATTEMPTS):
        timestamp = int(time.time() * 1000)
        suffix = "".join(random.choices(alphabet, k=4))
        candidate = f"obj_{timestamp}_{suffix}"
        if candidate not in existing:
            return candidate
    return None


def parse_attributes(raw: Optional[Union[str, Dict[str, Any]]]) -> Dict[str, str]:
    """
    Normalize the attributes argument.

    Accepts a JSON-encoded object, a plain mapping, or a bare string which is
    taken as the ``condition``. Empty values are dropped; when nothing is
    left the object gets a default condition.
    """
    parsed: Any = None
    attributes: Dict[str, str] = {}

    if isinstance(raw, str):
        text = raw.strip()
        if text:
            try:
                parsed = json.loads(text)
            except json.JSONDecodeError:
                attributes["condition"] = text
            else:
                if not isinstance(parsed, dict):
                    attributes["condition"] = text
                    parsed = None
    elif isinstance(raw, dict):
        parsed = raw

    if isinstance(parsed, dict):
        for key, value in parsed.items():
            if value is None or value == "":
                continue
            attributes[str(key)] = str(value).strip()

    if not attributes:
        attributes["condition"] = DEFAULT_CONDITION
    return attributes


def create_object(state: GameState, args: CreateObjectArgs) -> ToolOutcome:
    """Create a new object under an existing location, player or object."""
    name = args.name.strip()
    parent = state.resolve(args.connection_id)
    if parent is None:
        return rejected(
            state,
            f"Target {quoted(args.connection_id)} not found "
            "(not a player, location or object)",
        )

    new_id = generate_object_id(state.all_ids())
    if new_id is None:
        return rejected(state, "could not generate a unique ID for the object")

    attributes = parse_attributes(args.attributes)

    new_state = state.clone()
    new_state.objects.append(
        WorldObject(
            id=new_id,
            name=name,
            description=args.description,
            connection_id=args.connection_id,
            attributes=attributes,
        )
    )

    where = {
        "player": f"carried by player {quoted(parent.name)}",
        "location": f"in location {quoted(parent.name)}",
        "object": f"inside object {quoted(parent.name)}",
    }[parent.kind]
    attr_list = ", ".join(f'{k}: "{v}"' for k, v in attributes.items())

    logger.debug(f"create_object: {new_id} under {args.connection_id}")
    return ToolOutcome(
        new_state=new_state,
        result=f"Created object {quoted(name)} ({new_id}) {where}. Attributes: {attr_list}.",
        created_id=new_id,
    )


def delete_object(state: GameState, args: DeleteObjectArgs) -> ToolOutcome:
    """
    Remove an object from the world.

    Direct children move up to the deleted object's parent; anything nested
    deeper stays inside those children. The result names every item that
    was nested inside, at any depth.
    """
    obj = state.get_object(args.object_id)
    if obj is None:
        return rejected(state, f"Object {quoted(args.object_id)} not found")

    nested = all_descendants(state, args.object_id)
    new_state = state.clone()
    new_parent_id = deletion_parent(new_state, args.object_id)
    moved = reparent_direct_children(new_state, args.object_id, new_parent_id)
    new_state.objects = [o for o in new_state.objects if o.id != args.object_id]

    result = f"Object {quoted(obj.name)} deleted"
    if moved:
        destination = new_state.resolve(new_parent_id)
        if destination is not None:
            where = f"to {destination.describe()}"
        elif new_parent_id:
            where = f"to {quoted(new_parent_id)}"
        else:
            where = "out of any container (unparented)"
        names = ", ".join(quoted(item.name) for item in nested)
        result += f". Nested items ({len(nested)}) moved {where}: {names}"

    logger.debug(f"delete_object: {args.object_id}, reparented {len(moved)}")
    return ToolOutcome(new_state=new_state, result=result)
