"""Yandex Maps models: tool arguments and the Geocoder HTTP API response.

Tool arguments are validated here, at the executor boundary. The response
models cover only the parts of the Geocoder JSON the tools read; everything
else is ignored.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# ---------------------------------------------------------------------------
# Tool arguments
# ---------------------------------------------------------------------------


class GeocodeArguments(BaseModel):
    """Arguments of ``maps_geocode``."""

    country: str
    lang: str
    state: str | None = None
    city: str | None = None
    district: str | None = None
    street: str | None = None
    house_number: str | None = None

    def address(self) -> str:
        """Join the non-empty components, most specific first."""
        parts = [
            self.house_number,
            self.street,
            self.district,
            self.city,
            self.state,
            self.country,
        ]
        return ", ".join(part for part in parts if part)


class ReverseGeocodeArguments(BaseModel):
    """Arguments of ``maps_reverse_geocode``."""

    latitude: float
    longitude: float
    lang: str


class Placemark(BaseModel):
    """A marker drawn on a rendered map."""

    latitude: float
    longitude: float


class RenderMapArguments(BaseModel):
    """Arguments of ``maps_render``."""

    latitude: float
    longitude: float
    latitude_span: float
    longitude_span: float
    lang: str
    placemarks: list[Placemark] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Geocoder response
# ---------------------------------------------------------------------------


class AddressComponent(BaseModel):
    kind: str
    name: str


class GeocoderAddress(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    country_code: str | None = None
    formatted: str = ""
    components: list[AddressComponent] = Field(default_factory=list, alias="Components")


class GeocoderMetaData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    text: str = ""
    kind: str | None = None
    precision: str | None = None
    address: GeocoderAddress = Field(default_factory=GeocoderAddress, alias="Address")


class GeoObjectMetaData(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    geocoder_meta_data: GeocoderMetaData = Field(alias="GeocoderMetaData")


class GeoPoint(BaseModel):
    pos: str

    def lng_lat(self) -> tuple[float, float]:
        """``pos`` is ``"<longitude> <latitude>"``."""
        lng, lat = (float(value) for value in self.pos.split())
        return lng, lat


class GeoObject(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = ""
    description: str = ""
    meta_data_property: GeoObjectMetaData = Field(alias="metaDataProperty")
    point: GeoPoint | None = Field(default=None, alias="Point")

    def summary(self) -> dict[str, Any]:
        """The location, address text and components reported to agents."""
        location: dict[str, float] | None = None
        if self.point is not None:
            lng, lat = self.point.lng_lat()
            location = {"lng": lng, "lat": lat}
        meta = self.meta_data_property.geocoder_meta_data
        return {
            "location": location,
            "formatted_address": meta.text,
            "address_components": [c.model_dump() for c in meta.address.components],
        }


class FeatureMember(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    geo_object: GeoObject = Field(alias="GeoObject")


class GeoObjectCollection(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    feature_member: list[FeatureMember] = Field(default_factory=list, alias="featureMember")


class GeocoderResponseBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    geo_object_collection: GeoObjectCollection = Field(alias="GeoObjectCollection")


class GeocodeResponse(BaseModel):
    """Top-level Geocoder reply; ``response`` is absent on API errors."""

    response: GeocoderResponseBody | None = None

    def first(self) -> GeoObject | None:
        if self.response is None:
            return None
        members = self.response.geo_object_collection.feature_member
        return members[0].geo_object if members else None
