"""
Entity models for the narrative world: the world record, locations with their
travel connections, players and objects.

Field names are snake_case in Python and camelCase in the persisted JSON
format (``connectionId``, ``currentSituation``...). Both spellings are
accepted on input.
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

ConnectionType = Literal["in", "out", "bidirectional"]
EntityKind = Literal["location", "player", "object"]


class WorldModel(BaseModel):
    """Shared configuration for every persisted world record."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump using the persisted (camelCase) field names."""
        return self.model_dump(by_alias=True, exclude_none=True)


def _normalize_attributes(value: Any) -> Dict[str, str]:
    """Attributes are always present and always narrative strings."""
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError("attributes must be a mapping of name to description")
    return {str(k): str(v) for k, v in value.items() if v is not None}


class World(WorldModel):
    """Singleton descriptive record for the setting."""

    game_genre: str = Field(default="", alias="gameGenre")
    world_description: str = Field(default="", alias="worldDescription")


class Connection(WorldModel):
    """
    A directed edge in the travel graph.

    ``out`` lets players leave the owning location towards the target,
    ``in`` lets players arrive at the owning location from the target,
    ``bidirectional`` allows both.
    """

    target_location_id: str = Field(alias="targetLocationId")
    type: ConnectionType = "bidirectional"


class Location(WorldModel):
    """A place in the world. Locations are always containment roots."""

    id: str
    name: str
    description: str = ""
    current_situation: str = Field(default="", alias="currentSituation")
    state: Optional[str] = None  # legacy scalar state
    connections: List[Connection] = Field(default_factory=list)
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes(cls, value: Any) -> Dict[str, str]:
        return _normalize_attributes(value)


class ContainedEntity(WorldModel):
    """
    Base for anything that lives inside the containment graph.

    ``connection_id`` names exactly one parent (a location, a player or an
    object). An empty string means the entity is unparented.
    """

    id: str
    name: str
    description: Optional[str] = None
    connection_id: str = Field(
        default="",
        validation_alias=AliasChoices("connectionId", "connection_id"),
        serialization_alias="connectionId",
    )
    state: Optional[str] = None  # legacy scalar state
    attributes: Dict[str, str] = Field(default_factory=dict)

    @field_validator("connection_id", mode="before")
    @classmethod
    def _connection_id(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("attributes", mode="before")
    @classmethod
    def _attributes(cls, value: Any) -> Dict[str, str]:
        return _normalize_attributes(value)


class Player(ContainedEntity):
    """A character. Older saves store the parent under ``locationId``."""

    connection_id: str = Field(
        default="",
        validation_alias=AliasChoices("connectionId", "locationId", "connection_id"),
        serialization_alias="connectionId",
    )


class WorldObject(ContainedEntity):
    """An item, container, vehicle or any other thing in the world."""

    pass
