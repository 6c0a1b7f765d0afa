"""Shared fixtures: a small nested world and retry settings that never wait."""

import sys
from pathlib import Path
from typing import List

import pytest

# Dynamically insert the repository root into sys.path for test portability
ROOT = Path(__file__).resolve().parents[1]  # repo root
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from backend.world.game_state import GameState
from runtime.retry import RetryOptions


@pytest.fixture
def world_state():
    """
    Office (loc_001) --out--> Street (loc_002) <--bidirectional--> Garage (loc_003).
    Street declares an "in" edge back to the Office. Roof (loc_004) is isolated.

    Containment:
      loc_001 > char_001 (Jack) > obj_001 (Revolver)
      loc_001 > obj_bust > obj_envelope > obj_letter
      loc_003 > obj_car > char_002 (Pugh)
      obj_orphan is unparented
    """
    return GameState.model_validate(
        {
            "world": {
                "gameGenre": "noir",
                "worldDescription": "A rainy city full of secrets.",
            },
            "locations": [
                {
                    "id": "loc_001",
                    "name": "Office",
                    "description": "A cramped office.",
                    "currentSituation": "Quiet.",
                    "connections": [{"targetLocationId": "loc_002", "type": "out"}],
                },
                {
                    "id": "loc_002",
                    "name": "Street",
                    "connections": [
                        {"targetLocationId": "loc_001", "type": "in"},
                        {"targetLocationId": "loc_003", "type": "bidirectional"},
                    ],
                    "attributes": {"weather": "acid rain"},
                },
                {"id": "loc_003", "name": "Garage", "connections": []},
                {"id": "loc_004", "name": "Roof"},
            ],
            "players": [
                {
                    "id": "char_001",
                    "name": "Jack",
                    "connectionId": "loc_001",
                    "attributes": {"health": "a few bruises"},
                },
                {"id": "char_002", "name": "Pugh", "connectionId": "obj_car"},
            ],
            "objects": [
                {
                    "id": "obj_001",
                    "name": "Revolver",
                    "connectionId": "char_001",
                    "attributes": {"condition": "loaded"},
                },
                {"id": "obj_bust", "name": "Bust", "connectionId": "loc_001"},
                {"id": "obj_envelope", "name": "Envelope", "connectionId": "obj_bust"},
                {"id": "obj_letter", "name": "Letter", "connectionId": "obj_envelope"},
                {"id": "obj_car", "name": "Car", "connectionId": "loc_003"},
                {"id": "obj_orphan", "name": "Lost Coin", "connectionId": ""},
            ],
        }
    )


@pytest.fixture
def no_sleep():
    """Pass ``no_sleep.append`` as the sleep function; the list records delays."""
    delays: List[float] = []
    return delays


@pytest.fixture
def fast_retry():
    return RetryOptions(max_retries=2, initial_delay=0.01, max_delay=0.05, backoff_factor=2.0)
