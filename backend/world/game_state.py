"""
Core data structures for the narrative world state.

GameState is the aggregate root. Tools never mutate a state they were given:
they clone it, change the clone and hand the clone back.
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from models.entities import EntityKind, Location, Player, World, WorldObject

Entity = Union[Location, Player, WorldObject]
ContainedEntity = Union[Player, WorldObject]


@dataclass(frozen=True)
class EntityRef:
    """An entity together with the collection it was found in."""

    kind: EntityKind
    entity: Entity

    @property
    def id(self) -> str:
        return self.entity.id

    @property
    def name(self) -> str:
        return self.entity.name

    def describe(self) -> str:
        """Short human-readable label, e.g. 'location "Office"'."""
        return f'{self.kind} "{self.entity.name}"'


class GameState(BaseModel):
    """Core game state representation."""

    model_config = ConfigDict(populate_by_name=True)

    world: World = Field(default_factory=World)
    locations: List[Location] = Field(default_factory=list)
    players: List[Player] = Field(default_factory=list)
    objects: List[WorldObject] = Field(default_factory=list)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------

    def get_location(self, location_id: Optional[str]) -> Optional[Location]:
        if not location_id:
            return None
        return next((l for l in self.locations if l.id == location_id), None)

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if not player_id:
            return None
        return next((p for p in self.players if p.id == player_id), None)

    def get_object(self, object_id: Optional[str]) -> Optional[WorldObject]:
        if not object_id:
            return None
        return next((o for o in self.objects if o.id == object_id), None)

    def resolve(self, entity_id: Optional[str]) -> Optional[EntityRef]:
        """
        Find an entity by id in any collection.

        Locations are checked first, then players, then objects.
        """
        location = self.get_location(entity_id)
        if location is not None:
            return EntityRef(kind="location", entity=location)
        player = self.get_player(entity_id)
        if player is not None:
            return EntityRef(kind="player", entity=player)
        obj = self.get_object(entity_id)
        if obj is not None:
            return EntityRef(kind="object", entity=obj)
        return None

    def get_contained(self, entity_id: Optional[str]) -> Optional[ContainedEntity]:
        """Return the player or object with this id (things that can be moved)."""
        return self.get_player(entity_id) or self.get_object(entity_id)

    def entity_index(self) -> Dict[str, Tuple[EntityKind, Entity]]:
        """Build an id -> (kind, entity) map. First occurrence of an id wins."""
        index: Dict[str, Tuple[EntityKind, Entity]] = {}
        for location in self.locations:
            index.setdefault(location.id, ("location", location))
        for player in self.players:
            index.setdefault(player.id, ("player", player))
        for obj in self.objects:
            index.setdefault(obj.id, ("object", obj))
        return index

    def all_ids(self) -> set:
        return {
            *(l.id for l in self.locations),
            *(p.id for p in self.players),
            *(o.id for o in self.objects),
        }

    def children_of(self, parent_id: str) -> List[ContainedEntity]:
        """Direct children in the containment graph (players first, then objects)."""
        if not parent_id:
            return []
        children: List[ContainedEntity] = [
            p for p in self.players if p.connection_id == parent_id
        ]
        children.extend(o for o in self.objects if o.connection_id == parent_id)
        return children

    # ------------------------------------------------------------------
    # Copy-on-write helpers
    # ------------------------------------------------------------------

    def clone(self) -> "GameState":
        """Deep copy. Mutating the clone never affects this instance."""
        return self.model_copy(deep=True)

    def to_json_dict(self) -> Dict:
        """Export with the persisted (camelCase) field names."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_prompt_json(self) -> str:
        """Indented JSON rendering used as context for the reasoning engine."""
        return json.dumps(self.to_json_dict(), ensure_ascii=False, indent=2)

    # ------------------------------------------------------------------
    # Invariants
    # ------------------------------------------------------------------

    def validate_invariants(self) -> List[str]:
        """
        Check structural integrity and return a list of violations.

        Checks:
        - ids are unique within each collection
        - every non-empty connection_id resolves to an existing entity
        - the containment relation is acyclic
        - every travel connection targets an existing location

        Returns:
            List of error messages, empty when the state is consistent
        """
        errors: List[str] = []

        for label, collection in (
            ("location", self.locations),
            ("player", self.players),
            ("object", self.objects),
        ):
            seen = set()
            for entity in collection:
                if entity.id in seen:
                    errors.append(f"Duplicate {label} id: {entity.id}")
                seen.add(entity.id)

        index = self.entity_index()
        for entity in [*self.players, *self.objects]:
            if entity.connection_id and entity.connection_id not in index:
                errors.append(
                    f"{entity.id}: connectionId '{entity.connection_id}' "
                    "does not resolve to any entity"
                )

        for entity in [*self.players, *self.objects]:
            visited = {entity.id}
            current = entity.connection_id
            while current:
                if current in visited:
                    errors.append(f"{entity.id}: containment cycle through '{current}'")
                    break
                visited.add(current)
                found = index.get(current)
                if found is None or found[0] == "location":
                    break
                current = found[1].connection_id

        location_ids = {l.id for l in self.locations}
        for location in self.locations:
            for connection in location.connections:
                if connection.target_location_id not in location_ids:
                    errors.append(
                        f"{location.id}: connection to unknown location "
                        f"'{connection.target_location_id}'"
                    )

        return errors
