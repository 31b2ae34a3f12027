"""Decoders from raw Gaggiuino REST payloads to domain models.

Copyright (C) 2024 Gaggiuino MCP

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.

The machine reports most physical values as deci-units (ten times the
value), booleans as the strings "true"/"false", and numbers inside status
snapshots as loosely formatted strings. Every decoder here returns either a
validated model or a ProtocolError describing what was wrong; it never raises
for a malformed payload.
"""

import math
import re
from datetime import datetime, timedelta, timezone
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .errors import ProtocolError
from .models import (
    DatapointSeries,
    MachineStatus,
    Phase,
    PhaseTarget,
    ProfileDetail,
    ProfileListing,
    ProfileRef,
    ShotSummary,
    StopConditions,
    TargetSeries,
    TemperatureReading,
)

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))")

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _number_text(value: Any) -> Optional[str]:
    """Render a JSON scalar the way the machine's firmware would print it."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a value, ignoring trailing text.

    Returns:
        The integer, or None when no leading integer is present
    """
    text = _number_text(value)
    if text is None:
        return None
    match = _INT_PREFIX.match(text)
    return int(match.group(1)) if match else None


def parse_float(value: Any) -> float:
    """Parse the leading decimal number of a value, ignoring trailing text.

    Returns:
        The number, or NaN when no leading number is present
    """
    text = _number_text(value)
    if text is None:
        return math.nan
    match = _FLOAT_PREFIX.match(text)
    if not match:
        return math.nan
    return float(match.group(1).replace("Infinity", "inf"))


def parse_flag(value: Any) -> bool:
    """Only the literal string "true" is true."""
    return value == "true"


def _deci(values: List[float]) -> List[float]:
    return [v / 10 for v in values]


def _millis_to_seconds(value: Optional[float]) -> Optional[float]:
    # zero and missing both mean "no time condition"
    return value / 1000 if value else None


def _epoch_to_iso(timestamp: float) -> str:
    moment = _EPOCH + timedelta(milliseconds=timestamp * 1000)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _describe(error: PydanticValidationError) -> str:
    details = []
    for item in error.errors():
        field = ".".join(str(x) for x in item.get("loc", []))
        details.append(f"{field}: {item.get('msg', 'invalid value')}")
    return "; ".join(details)


class _WireModel(BaseModel):
    """Raw device JSON, keyed the way the firmware writes it."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class WireStopConditions(_WireModel):
    weight: Any = None
    time: Optional[float] = None


class WirePhaseTarget(_WireModel):
    start: Any = None
    end: Any = None
    curve: Any = None


class WirePhase(_WireModel):
    name: Any = None
    type: Any = None
    target: WirePhaseTarget
    stop_conditions: Optional[WireStopConditions] = None
    restriction: Any = None


class WireProfile(_WireModel):
    id: Any = None
    name: Any = None
    water_temperature: Any = None
    global_stop_conditions: Optional[WireStopConditions] = None
    phases: Optional[List[WirePhase]] = None


class WireDatapoints(_WireModel):
    time_in_shot: List[float]
    pressure: List[float]
    pump_flow: List[float]
    weight_flow: List[float]
    temperature: List[float]
    shot_weight: List[float]
    water_pumped: List[float]
    target_temperature: List[float]
    target_pump_flow: List[float]
    target_pressure: List[float]

    def lengths(self) -> List[int]:
        return [len(series) for series in self.model_dump().values()]


class WireShot(_WireModel):
    id: Any = None
    timestamp: float
    duration: Optional[float] = None
    profile: Optional[WireProfile] = None
    datapoints: WireDatapoints


def decode_status(payload: Any) -> Union[MachineStatus, ProtocolError]:
    """Decode GET /api/system/status.

    Only the first snapshot of the returned array is consulted.

    Args:
        payload: Parsed JSON body

    Returns:
        MachineStatus or ProtocolError if the payload has the wrong shape
    """
    if not isinstance(payload, list) or not payload:
        return ProtocolError("invalid status response: expected non-empty array from /api/system/status")
    snapshot = payload[0]
    if not isinstance(snapshot, dict):
        return ProtocolError("invalid status response: missing status data")

    return MachineStatus(
        brewing=parse_flag(snapshot.get("brewSwitchState")),
        steaming=parse_flag(snapshot.get("steamSwitchState")),
        profile=ProfileRef(
            id=parse_int(snapshot.get("profileId")),
            name=snapshot.get("profileName"),
        ),
        temperature=TemperatureReading(
            current=parse_float(snapshot.get("temperature")),
            target=parse_float(snapshot.get("targetTemperature")),
        ),
        pressure=parse_float(snapshot.get("pressure")),
        weight=parse_float(snapshot.get("weight")),
        water_level=parse_int(snapshot.get("waterLevel")),
    )


def decode_latest_shot_id(payload: Any) -> Union[int, ProtocolError]:
    """Decode GET /api/shots/latest into a shot ID."""
    error = ProtocolError("invalid latest shot response: expected array with lastShotId from /api/shots/latest")
    if not isinstance(payload, list) or not payload:
        return error
    first = payload[0]
    if not isinstance(first, dict) or not first.get("lastShotId"):
        return error
    shot_id = parse_int(first["lastShotId"])
    if shot_id is None:
        return ProtocolError(f"invalid latest shot response: lastShotId {first['lastShotId']!r} is not a number")
    return shot_id


def _convert_phase(phase: WirePhase) -> Phase:
    return Phase(
        name=phase.name,
        type=phase.type,
        target=PhaseTarget(
            start=phase.target.start,
            end=phase.target.end,
            curve=phase.target.curve,
        ),
        duration_seconds=_millis_to_seconds(phase.stop_conditions.time) if phase.stop_conditions else None,
        flow_restriction=phase.restriction,
    )


def _convert_profile(profile: WireProfile) -> ProfileDetail:
    stop_conditions = None
    if profile.global_stop_conditions is not None:
        stop_conditions = StopConditions(
            weight_g=profile.global_stop_conditions.weight,
            time_seconds=_millis_to_seconds(profile.global_stop_conditions.time),
        )
    return ProfileDetail(
        id=profile.id,
        name=profile.name,
        temperature_c=profile.water_temperature,
        stop_conditions=stop_conditions,
        phases=[_convert_phase(phase) for phase in profile.phases or []],
    )


def _convert_datapoints(datapoints: WireDatapoints) -> DatapointSeries:
    return DatapointSeries(
        time_seconds=_deci(datapoints.time_in_shot),
        pressure_bar=_deci(datapoints.pressure),
        flow_ml_per_sec=_deci(datapoints.pump_flow),
        weight_flow_g_per_sec=_deci(datapoints.weight_flow),
        temperature_c=_deci(datapoints.temperature),
        weight_g=_deci(datapoints.shot_weight),
        water_pumped_ml=_deci(datapoints.water_pumped),
        targets=TargetSeries(
            temperature_c=_deci(datapoints.target_temperature),
            flow_ml_per_sec=_deci(datapoints.target_pump_flow),
            pressure_bar=_deci(datapoints.target_pressure),
        ),
    )


def decode_shot(payload: Any, shot_id: int) -> Union[ShotSummary, ProtocolError]:
    """Decode GET /api/shots/{id}.

    Durations and datapoints arrive in deci-units and are divided by 10.
    Stop condition times arrive in milliseconds and are divided by 1000.

    Args:
        payload: Parsed JSON body
        shot_id: The requested shot ID, used in error messages

    Returns:
        ShotSummary or ProtocolError if the payload has the wrong shape
    """
    if not isinstance(payload, dict):
        return ProtocolError(f"invalid shot response: expected object from /api/shots/{shot_id}")
    if not isinstance(payload.get("datapoints"), dict):
        return ProtocolError(f"invalid shot data: missing datapoints for shot {shot_id}")

    try:
        wire = WireShot.model_validate(payload)
    except PydanticValidationError as e:
        return ProtocolError(f"invalid shot data for shot {shot_id}: {_describe(e)}")

    if len(set(wire.datapoints.lengths())) > 1:
        return ProtocolError(f"invalid shot data: datapoint series lengths differ for shot {shot_id}")

    try:
        timestamp = _epoch_to_iso(wire.timestamp)
    except (OverflowError, ValueError):
        return ProtocolError(f"invalid shot data: timestamp {wire.timestamp!r} out of range for shot {shot_id}")

    return ShotSummary(
        id=wire.id,
        timestamp=timestamp,
        duration_seconds=wire.duration / 10 if wire.duration is not None else None,
        profile=_convert_profile(wire.profile) if wire.profile is not None else None,
        datapoints=_convert_datapoints(wire.datapoints),
    )


def decode_profiles(payload: Any) -> Union[List[ProfileListing], ProtocolError]:
    """Decode GET /api/profiles/all.

    The selected flag is passed through; nothing checks that exactly one
    profile is selected.
    """
    if not isinstance(payload, list):
        return ProtocolError("invalid profiles response: expected array from /api/profiles/all")
    if not all(isinstance(item, dict) for item in payload):
        return ProtocolError("invalid profiles response: expected objects in array from /api/profiles/all")
    return [
        ProfileListing(
            id=item.get("id"),
            name=item.get("name"),
            selected=parse_flag(item.get("selected")),
        )
        for item in payload
    ]
