"""
Tool Catalog - the explicit registry of world mutation tools.

Each tool has:
- name: unique identifier the reasoning engine calls it by
- description: what the tool does, shown to the reasoning engine
- args_schema: pydantic model used both to advertise the parameters and to
  coerce the raw arguments
- handler: (state, args) -> ToolOutcome

The catalog is an ordered, statically built list. The orchestrator resolves a
requested tool name through a ToolRegistry; nothing is discovered at runtime.
"""

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from .game_state import GameState
from .tools.attributes import (
    DeleteAttributeArgs,
    SetAttributeArgs,
    delete_attribute,
    set_attribute,
)
from .tools.base import ToolArgs, ToolOutcome, rejected
from .tools.legacy_state import (
    ChangeLocationStateArgs,
    ChangeObjectStateArgs,
    ChangePlayerStateArgs,
    change_location_state,
    change_object_state,
    change_player_state,
)
from .tools.movement import MoveObjectArgs, MovePlayerArgs, move_object, move_player
from .tools.objects import (
    CreateObjectArgs,
    DeleteObjectArgs,
    create_object,
    delete_object,
)
from .tools.queries import FindEntityLocationArgs, find_entity_location

logger = logging.getLogger(__name__)

JSON_TYPES = {"string", "number", "integer", "boolean", "object", "array"}


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def _join_names(names: List[str]) -> str:
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + " and " + names[-1]


def _property_declaration(prop: Dict[str, Any]) -> Dict[str, Any]:
    """Flatten one pydantic JSON-schema property to {type, description, enum?}."""
    declared: Dict[str, Any] = {}

    prop_type = prop.get("type")
    enum = prop.get("enum")
    if prop_type is None:
        # Optional[...] and unions render as anyOf; the first concrete
        # variant is what the reasoning engine should send.
        for variant in prop.get("anyOf", []):
            if variant.get("type") in JSON_TYPES:
                prop_type = variant["type"]
                enum = enum or variant.get("enum")
                break
    declared["type"] = prop_type if prop_type in JSON_TYPES else "string"

    if prop.get("description"):
        declared["description"] = prop["description"]
    if enum:
        declared["enum"] = list(enum)
    return declared


class Tool(BaseModel):
    """Core Tool definition: name, description, argument schema and handler."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[ToolArgs]
    handler: Callable[[GameState, Any], ToolOutcome]

    def required_fields(self) -> List[str]:
        """Wire names (aliases) of the required parameters, in declaration order."""
        return [
            field.alias or field_name
            for field_name, field in self.args_schema.model_fields.items()
            if field.is_required()
        ]

    def declaration(self) -> Dict[str, Any]:
        """Render the schema advertised to the reasoning engine."""
        schema = self.args_schema.model_json_schema(by_alias=True)
        properties = {
            name: _property_declaration(prop)
            for name, prop in schema.get("properties", {}).items()
        }
        return {
            "name": self.name,
            "description": self.description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": list(schema.get("required", [])),
            },
        }

    def apply(self, state: GameState, raw_args: Optional[Dict[str, Any]]) -> ToolOutcome:
        """
        Validate raw arguments and run the handler.

        Missing or empty required arguments and arguments that fail coercion
        are reported as a failed outcome with the state untouched. Exceptions
        raised by the handler itself propagate to the caller.
        """
        raw = dict(raw_args or {})

        missing = []
        for field_name, field in self.args_schema.model_fields.items():
            if not field.is_required():
                continue
            wire_name = field.alias or field_name
            value = raw.get(wire_name, raw.get(field_name))
            if _is_missing(value):
                missing.append(wire_name)
        if missing:
            verb = "is" if len(missing) == 1 else "are"
            return rejected(state, f"{_join_names(missing)} {verb} required")

        try:
            args = self.args_schema.model_validate(raw)
        except ValidationError as e:
            problems = "; ".join(
                f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                for err in e.errors()
            )
            logger.warning(f"{self.name}: invalid arguments {raw}: {problems}")
            return rejected(state, f"Invalid arguments for {self.name}: {problems}")

        return self.handler(state, args)


class ToolRegistry:
    """Ordered, name-keyed collection of tools."""

    def __init__(self, tools: Iterable[Tool]):
        self._tools: Dict[str, Tool] = {}
        for tool in tools:
            if tool.name in self._tools:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._tools[tool.name] = tool

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self):
        return iter(self._tools.values())

    def get(self, name: str) -> Optional[Tool]:
        return self._tools.get(name)

    def names(self) -> List[str]:
        return list(self._tools)

    def declarations(self) -> List[Dict[str, Any]]:
        return [tool.declaration() for tool in self._tools.values()]

    def subset(self, enabled: Iterable[str]) -> "ToolRegistry":
        """Registry limited to the enabled names; unknown names are ignored."""
        wanted = set(enabled)
        return ToolRegistry(t for t in self._tools.values() if t.name in wanted)


TOOL_CATALOG: List[Tool] = [
    Tool(
        name="move_object",
        description=(
            "Move an object or player into another location, object or player. "
            "This is the only way to change containment, including putting a "
            "player into a vehicle or taking them out of it. Moves that would "
            "put something inside itself are rejected."
        ),
        args_schema=MoveObjectArgs,
        handler=move_object,
    ),
    Tool(
        name="move_player",
        description=(
            "Move a player to an adjacent location along a travel connection. "
            "Only works between locations; use move_object to enter or leave "
            "containers."
        ),
        args_schema=MovePlayerArgs,
        handler=move_player,
    ),
    Tool(
        name="set_attribute",
        description=(
            "Create or change a narrative attribute of a player, object or "
            "location. Use rich descriptions instead of numbers (e.g. health: "
            "'badly wounded but can still fight'). Cannot change the parent link."
        ),
        args_schema=SetAttributeArgs,
        handler=set_attribute,
    ),
    Tool(
        name="delete_attribute",
        description=(
            "Remove an attribute from a player, object or location when it is "
            "no longer relevant."
        ),
        args_schema=DeleteAttributeArgs,
        handler=delete_attribute,
    ),
    Tool(
        name="create_object",
        description=(
            "Create a new object in a location, in a player's possession or "
            "inside another object. Describe it with narrative attributes. "
            "The new id can be referenced by later calls in the same response "
            "as $N.createdId, where N is the zero-based index of this call."
        ),
        args_schema=CreateObjectArgs,
        handler=create_object,
    ),
    Tool(
        name="delete_object",
        description=(
            "Remove an object from the world (destroyed, consumed, vanished). "
            "Items directly inside it move to its parent."
        ),
        args_schema=DeleteObjectArgs,
        handler=delete_object,
    ),
    Tool(
        name="change_location_state",
        description="Change the legacy state description of a location.",
        args_schema=ChangeLocationStateArgs,
        handler=change_location_state,
    ),
    Tool(
        name="change_object_state",
        description="Change the legacy state description of an object.",
        args_schema=ChangeObjectStateArgs,
        handler=change_object_state,
    ),
    Tool(
        name="change_player_state",
        description="Change the legacy state description of a player.",
        args_schema=ChangePlayerStateArgs,
        handler=change_player_state,
    ),
    Tool(
        name="find_entity_location",
        description=(
            "Find where a player or object physically is, with the full "
            "containment path (e.g. Garage > Car > Jack). Read-only."
        ),
        args_schema=FindEntityLocationArgs,
        handler=find_entity_location,
    ),
]

DEFAULT_ENABLED_TOOLS: List[str] = [
    "move_object",
    "move_player",
    "set_attribute",
    "delete_attribute",
    "create_object",
    "delete_object",
]

DEFAULT_REGISTRY = ToolRegistry(TOOL_CATALOG)


def get_tool_by_id(tool_id: str) -> Optional[Tool]:
    """Get a tool by its name."""
    return DEFAULT_REGISTRY.get(tool_id)
