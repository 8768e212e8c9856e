"""Request bodies of the HTTP API.

Field names follow the camelCase JSON used by the web client; the
snake_case names are accepted as well.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CalculateImpactRequest(_CamelModel):
    transport_mode: str = Field(min_length=1)
    travel_pattern: str = Field(min_length=1)
    vehicle_class_id: Optional[int] = Field(default=None, alias="vehicleTypeId")
    occupancy: Optional[int] = None
    distance_km: Optional[float] = None
    origin: str = ""
    destination: str = ""


class GeocodeRequest(_CamelModel):
    address: str = Field(min_length=1, max_length=500)


class RouteInfoRequest(_CamelModel):
    origin: str = Field(min_length=1, max_length=500)
    destination: str = Field(min_length=1, max_length=500)
