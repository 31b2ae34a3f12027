"""Normalized domain models returned by the Gaggiuino client.

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
"""

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter
from pydantic.alias_generators import to_camel


class _DomainModel(BaseModel):
    """Base model serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> str:
        """Pretty-print as JSON. NaN values are written as null."""
        return self.model_dump_json(indent=2, by_alias=True)


class ProfileRef(_DomainModel):
    """Profile currently loaded on the machine."""

    id: Optional[int] = None
    name: Any = None


class TemperatureReading(_DomainModel):
    """Boiler temperature in Celsius."""

    current: float
    target: float


class MachineStatus(_DomainModel):
    """Latest sensor snapshot of the machine."""

    brewing: bool
    steaming: bool
    profile: ProfileRef
    temperature: TemperatureReading
    pressure: float = Field(description="Pressure in bar")
    weight: float = Field(description="Scale weight in grams")
    water_level: Optional[int] = Field(default=None, description="Water tank level in percent")


class StopConditions(_DomainModel):
    weight_g: Any = None
    time_seconds: Optional[float] = None


class PhaseTarget(_DomainModel):
    start: Any = None
    end: Any = None
    curve: Any = None


class Phase(_DomainModel):
    """One phase of a brewing profile."""

    name: Any = None
    type: Any = None
    target: PhaseTarget
    duration_seconds: Optional[float] = None
    flow_restriction: Any = None


class ProfileDetail(_DomainModel):
    """Profile used for a shot, as recorded with the shot."""

    id: Any = None
    name: Any = None
    temperature_c: Any = None
    stop_conditions: Optional[StopConditions] = None
    phases: List[Phase] = Field(default_factory=list)


class TargetSeries(_DomainModel):
    temperature_c: List[float]
    flow_ml_per_sec: List[float]
    pressure_bar: List[float]


class DatapointSeries(_DomainModel):
    """Time-indexed shot curves; index i of every series is the same instant."""

    time_seconds: List[float]
    pressure_bar: List[float]
    flow_ml_per_sec: List[float]
    weight_flow_g_per_sec: List[float]
    temperature_c: List[float]
    weight_g: List[float]
    water_pumped_ml: List[float]
    targets: TargetSeries


class ShotSummary(_DomainModel):
    """A recorded shot with converted units."""

    id: Any = None
    timestamp: str = Field(description="ISO-8601 UTC time the shot was pulled")
    duration_seconds: Optional[float] = None
    profile: Optional[ProfileDetail] = None
    datapoints: DatapointSeries


class ProfileListing(_DomainModel):
    """Entry in the machine's profile list."""

    id: Any = None
    name: Any = None
    selected: bool


_profile_list_adapter = TypeAdapter(List[ProfileListing])


def profiles_to_json(profiles: List[ProfileListing]) -> str:
    """Pretty-print a profile list as JSON."""
    return _profile_list_adapter.dump_json(profiles, indent=2, by_alias=True).decode("utf-8")
