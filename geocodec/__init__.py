from ._core import (
    Case,
    Codec,
    MalformedJson,
    SchemaViolation,
    TaggedUnion,
    UnknownVariant,
)
from .geojson import (
    Envelope,
    Feature,
    FeatureCollection,
    FeatureData,
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
    get_schema,
)
from .json import Decoder, Encoder, decode, encode
from .trip import trip

from . import geojson, inspect, json
from ._version import __version__
