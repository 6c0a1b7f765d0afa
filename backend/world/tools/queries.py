"""
Read-only world queries.
"""

from pydantic import Field

from ..game_state import GameState
from ..world_graph import containment_path, walk_ancestors
from .base import ToolArgs, ToolOutcome, quoted, rejected


class FindEntityLocationArgs(ToolArgs):
    """Arguments for find_entity_location."""

    entity_id: str = Field(
        alias="entityId",
        description="ID of a player or object.",
    )


def find_entity_location(state: GameState, args: FindEntityLocationArgs) -> ToolOutcome:
    """
    Report where an entity physically is and the full containment path
    (e.g. Garage > Car > Jack). Never changes the state.
    """
    walk = walk_ancestors(state, args.entity_id)

    if walk.has_cycle:
        loop = " -> ".join([*walk.visited, walk.cycle_at])
        return rejected(state, f"containment cycle detected ({loop})")

    if not walk.found:
        return rejected(state, f"Entity {quoted(args.entity_id)} not found")

    if walk.broken_at is not None:
        return rejected(
            state, f"containment chain broken at {quoted(walk.broken_at)} (not found)"
        )

    if walk.root is None:
        return ToolOutcome(
            new_state=state,
            result=(
                f"Could not determine a location for {quoted(args.entity_id)}: "
                f"it is not placed anywhere. Path: {containment_path(walk)}"
            ),
        )

    return ToolOutcome(
        new_state=state,
        result=(
            f"Location: {quoted(walk.root.name)} ({walk.root.id}).\n"
            f"Full path: {containment_path(walk)}"
        ),
    )
