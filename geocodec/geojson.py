"""The GeoJSON (RFC 7946) model and the codecs that decode/encode it.

Every GeoJSON object is an `Envelope`: a type-specific ``payload`` plus an
optional ``bbox`` and the ``unknown`` members the schema doesn't define
(foreign members in RFC 7946 terms), which are kept so that decoding then
encoding a document loses nothing.

The nine object kinds are distinguished by their ``type`` member. Each kind
is described by one `Case`; the same case objects are shared by the
``Geometry``, ``Feature``, ``FeatureCollection`` and top-level ``GeoJSON``
dispatchers.
"""

from __future__ import annotations

import functools
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

import msgspec
from msgspec import UNSET, UnsetType

from ._core import (
    AnyOf,
    Case,
    Envelope as _EnvelopeCodec,
    FloatArray,
    JsonObject,
    Lazy,
    ListOf,
    Member,
    Nullable,
    Number,
    Record,
    String,
    TaggedUnion,
)

__all__ = (
    "Position",
    "Bbox",
    "Envelope",
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
    "Geometry",
    "FeatureId",
    "FeatureData",
    "Feature",
    "FeatureCollection",
    "GeoJSON",
    "GeoJSONSchema",
    "get_schema",
)


def __dir__():
    return __all__


Position = Tuple[float, ...]
Bbox = Tuple[float, ...]
FeatureId = Union[float, str]


class Envelope(msgspec.Struct, frozen=True):
    """The members shared by all GeoJSON objects.

    Parameters
    ----------
    payload: Any
        The type-specific data (coordinates, geometries, features, ...).
    bbox: tuple of float, optional
        The bounding box, if the object has one.
    unknown: dict, optional
        Members not defined for this kind of object, kept as decoded JSON
        values and written back on encode.
    """

    payload: Any
    bbox: Optional[Bbox] = None
    unknown: Dict[str, Any] = msgspec.field(default_factory=dict)

    kind: ClassVar[str]


class _Geometry(Envelope, frozen=True):
    @property
    def coordinates(self):
        return self.payload


class Point(_Geometry, frozen=True):
    """A single position."""

    kind: ClassVar[str] = "Point"


class MultiPoint(_Geometry, frozen=True):
    """A list of positions."""

    kind: ClassVar[str] = "MultiPoint"


class LineString(_Geometry, frozen=True):
    """A list of positions forming a line."""

    kind: ClassVar[str] = "LineString"


class MultiLineString(_Geometry, frozen=True):
    """A list of position lists."""

    kind: ClassVar[str] = "MultiLineString"


class Polygon(_Geometry, frozen=True):
    """A list of linear rings, each a list of positions."""

    kind: ClassVar[str] = "Polygon"


class MultiPolygon(_Geometry, frozen=True):
    """A list of polygons."""

    kind: ClassVar[str] = "MultiPolygon"


class GeometryCollection(Envelope, frozen=True):
    """A list of geometries, possibly other collections."""

    kind: ClassVar[str] = "GeometryCollection"

    @property
    def geometries(self) -> List[Geometry]:
        return self.payload


Geometry = Union[
    Point,
    MultiPoint,
    LineString,
    MultiLineString,
    Polygon,
    MultiPolygon,
    GeometryCollection,
]


class FeatureData(msgspec.Struct, frozen=True):
    """The payload of a `Feature`.

    Each field is ``UNSET`` when the member is absent from the object, so a
    missing member and an explicit ``null`` round trip differently.

    Parameters
    ----------
    id: float or str, optional
        The feature identifier. Numbers stay floats and strings stay strings.
    geometry: Geometry or None, optional
        The feature geometry. ``None`` for ``"geometry": null``.
    properties: dict or None, optional
        The feature properties, not interpreted.
    """

    id: Union[FeatureId, UnsetType] = UNSET
    geometry: Union[Geometry, None, UnsetType] = UNSET
    properties: Union[Dict[str, Any], None, UnsetType] = UNSET


class Feature(Envelope, frozen=True):
    """A spatially bounded thing: an optional geometry with properties."""

    payload: FeatureData = msgspec.field(default_factory=FeatureData)

    kind: ClassVar[str] = "Feature"

    @property
    def id(self):
        return self.payload.id

    @property
    def geometry(self):
        return self.payload.geometry

    @property
    def properties(self):
        return self.payload.properties


class FeatureCollection(Envelope, frozen=True):
    """A list of features."""

    kind: ClassVar[str] = "FeatureCollection"

    @property
    def features(self) -> List[Feature]:
        return self.payload


GeoJSON = Union[Geometry, Feature, FeatureCollection]


class GeoJSONSchema(msgspec.Struct, frozen=True):
    """The codecs making up a GeoJSON schema.

    Parameters
    ----------
    position: FloatArray
        The codec for a single position.
    bbox: FloatArray
        The codec for bounding boxes.
    cases: dict
        The `Case` for each of the nine object kinds, by tag.
    geometry: TaggedUnion
        A dispatcher over the seven geometry kinds.
    feature: TaggedUnion
        A dispatcher accepting only ``Feature``.
    feature_collection: TaggedUnion
        A dispatcher accepting only ``FeatureCollection``.
    geojson: TaggedUnion
        A dispatcher over all nine kinds; the codec for a whole document.
    strict: bool
        Whether positions and bounding boxes have their lengths checked and
        features require their ``geometry`` and ``properties`` members.
    """

    position: FloatArray
    bbox: FloatArray
    cases: Dict[str, Case]
    geometry: TaggedUnion
    feature: TaggedUnion
    feature_collection: TaggedUnion
    geojson: TaggedUnion
    strict: bool = False


def _geometry_case(cls, member, bbox):
    return Case(cls.kind, _EnvelopeCodec(cls.kind, member, cls, bbox=bbox))


@functools.lru_cache(maxsize=None)
def get_schema(strict: bool = False) -> GeoJSONSchema:
    """Get the GeoJSON schema.

    Schemas are built once per ``strict`` setting and shared afterwards; they
    hold no mutable state.

    Parameters
    ----------
    strict: bool, optional
        If ``True``, positions must have 2 or 3 elements, bounding boxes 4 or
        6, and features must have ``geometry`` and ``properties`` members
        (RFC 7946 requires both, possibly ``null``). Defaults to ``False``.

    Returns
    -------
    GeoJSONSchema
    """
    if strict:
        position = FloatArray("Position", lengths=(2, 3))
        bbox = FloatArray("Bbox", lengths=(4, 6))
    else:
        position = FloatArray("Position")
        bbox = FloatArray("Bbox")

    positions = ListOf(position)
    geometry_ref = Lazy(lambda: geometry)

    geometry_cases = (
        _geometry_case(Point, Member("coordinates", position), bbox),
        _geometry_case(MultiPoint, Member("coordinates", positions), bbox),
        _geometry_case(LineString, Member("coordinates", positions), bbox),
        _geometry_case(
            MultiLineString, Member("coordinates", ListOf(positions)), bbox
        ),
        _geometry_case(Polygon, Member("coordinates", ListOf(positions)), bbox),
        _geometry_case(
            MultiPolygon, Member("coordinates", ListOf(ListOf(positions))), bbox
        ),
        _geometry_case(
            GeometryCollection, Member("geometries", ListOf(geometry_ref)), bbox
        ),
    )
    geometry = TaggedUnion("Geometry", geometry_cases)

    feature_case = Case(
        Feature.kind,
        _EnvelopeCodec(
            Feature.kind,
            Record(
                FeatureData,
                Member(
                    "id",
                    AnyOf("id", number=Number(), string=String()),
                    optional=True,
                ),
                Member("geometry", Nullable(geometry_ref), optional=not strict),
                Member("properties", Nullable(JsonObject()), optional=not strict),
            ),
            Feature,
            bbox=bbox,
        ),
    )
    feature = TaggedUnion("Feature", (feature_case,))

    feature_collection_case = Case(
        FeatureCollection.kind,
        _EnvelopeCodec(
            FeatureCollection.kind,
            Member("features", ListOf(feature)),
            FeatureCollection,
            bbox=bbox,
        ),
    )
    feature_collection = TaggedUnion("FeatureCollection", (feature_collection_case,))

    geojson = TaggedUnion(
        "GeoJSON", geometry_cases + (feature_case, feature_collection_case)
    )

    # Resolve the self reference now so the finished schema is never mutated
    geometry_ref.resolve()

    return GeoJSONSchema(
        position=position,
        bbox=bbox,
        cases={c.tag: c for c in geojson.cases},
        geometry=geometry,
        feature=feature,
        feature_collection=feature_collection,
        geojson=geojson,
        strict=strict,
    )
