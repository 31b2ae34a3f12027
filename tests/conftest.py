"""Shared fixtures."""

from typing import Any, Dict

import pytest


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def status_payload() -> list:
    """A /api/system/status response as the machine sends it."""
    return [
        {
            "upTime": "1520",
            "profileId": "3",
            "profileName": "Londinium",
            "targetTemperature": "93.000000",
            "temperature": "92.650002",
            "pressure": "8.950000",
            "waterLevel": "72",
            "weight": "36.400002",
            "brewSwitchState": "true",
            "steamSwitchState": "false",
        }
    ]


@pytest.fixture
def shot_payload() -> Dict[str, Any]:
    """A /api/shots/{id} response with deci-unit datapoints."""
    return {
        "id": 42,
        "timestamp": 1700000000,
        "duration": 285,
        "profile": {
            "id": 3,
            "name": "Londinium",
            "waterTemperature": 93,
            "globalStopConditions": {"weight": 36, "time": 60000},
            "phases": [
                {
                    "name": "Preinfusion",
                    "type": "FLOW",
                    "target": {"start": 3, "end": 3, "curve": "INSTANT"},
                    "stopConditions": {"time": 8000, "pressureAbove": 2},
                    "restriction": 2,
                },
                {
                    "name": "Infusion",
                    "type": "PRESSURE",
                    "target": {"start": 9, "end": 6, "curve": "LINEAR"},
                    "stopConditions": {"weight": 36},
                    "restriction": 0,
                },
            ],
        },
        "datapoints": {
            "timeInShot": [0, 5, 10],
            "pressure": [0, 21, 89],
            "pumpFlow": [30, 25, 18],
            "weightFlow": [0, 3, 15],
            "temperature": [931, 929, 927],
            "shotWeight": [0, 4, 52],
            "waterPumped": [0, 15, 36],
            "targetTemperature": [930, 930, 930],
            "targetPumpFlow": [30, 30, 20],
            "targetPressure": [20, 20, 90],
        },
    }


@pytest.fixture
def profiles_payload() -> list:
    return [
        {"id": 1, "name": "Classic 9 bar", "selected": "false"},
        {"id": 3, "name": "Londinium", "selected": "true"},
    ]
