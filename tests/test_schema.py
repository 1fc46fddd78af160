import pytest

import geocodec
from geocodec._core import (
    AnyOf,
    FloatArray,
    JsonObject,
    ListOf,
    Nullable,
    Number,
    String,
)
from geocodec.geojson import get_schema

GEOMETRY_TAGS = [
    "Point",
    "MultiPoint",
    "LineString",
    "MultiLineString",
    "Polygon",
    "MultiPolygon",
    "GeometryCollection",
]


@pytest.mark.parametrize(
    "codec, sol",
    [
        (Number(), {"type": "number"}),
        (String(), {"type": "string"}),
        (JsonObject(), {"type": "object"}),
        (FloatArray("Position"), {"type": "array", "items": {"type": "number"}}),
        (
            FloatArray("Position", lengths=(2, 3)),
            {"type": "array", "items": {"type": "number"}, "minItems": 2, "maxItems": 3},
        ),
        (
            ListOf(Number()),
            {"type": "array", "items": {"type": "number"}},
        ),
        (
            Nullable(String()),
            {"anyOf": [{"type": "string"}, {"type": "null"}]},
        ),
        (
            AnyOf("id", number=Number(), string=String()),
            {"anyOf": [{"type": "number"}, {"type": "string"}]},
        ),
    ],
)
def test_simple(codec, sol):
    assert geocodec.json.schema(codec) == sol


def test_point():
    point = get_schema().cases["Point"].codec
    assert geocodec.json.schema(point) == {
        "$ref": "#/$defs/Point",
        "$defs": {
            "Point": {
                "title": "Point",
                "type": "object",
                "properties": {
                    "type": {"enum": ["Point"]},
                    "coordinates": {"type": "array", "items": {"type": "number"}},
                    "bbox": {"type": "array", "items": {"type": "number"}},
                },
                "required": ["type", "coordinates"],
            }
        },
    }


def test_document():
    schema = geocodec.json.schema()
    assert schema["$ref"] == "#/$defs/GeoJSON"
    defs = schema["$defs"]
    assert set(defs) == {
        "GeoJSON",
        "Geometry",
        "Feature",
        "FeatureCollection",
        *GEOMETRY_TAGS,
    }

    document = defs["GeoJSON"]
    assert document["title"] == "GeoJSON"
    assert document["discriminator"] == {
        "propertyName": "type",
        "mapping": {
            tag: f"#/$defs/{tag}"
            for tag in GEOMETRY_TAGS + ["Feature", "FeatureCollection"]
        },
    }
    assert len(document["anyOf"]) == 9

    geometry = defs["Geometry"]
    assert geometry["anyOf"] == [{"$ref": f"#/$defs/{tag}"} for tag in GEOMETRY_TAGS]


def test_recursive_collection():
    defs = geocodec.json.schema(get_schema().geometry)["$defs"]
    assert defs["GeometryCollection"]["properties"]["geometries"] == {
        "type": "array",
        "items": {"$ref": "#/$defs/Geometry"},
    }


def test_feature():
    defs = geocodec.json.schema()["$defs"]
    feature = defs["Feature"]
    assert feature["properties"] == {
        "type": {"enum": ["Feature"]},
        "id": {"anyOf": [{"type": "number"}, {"type": "string"}]},
        "geometry": {"anyOf": [{"$ref": "#/$defs/Geometry"}, {"type": "null"}]},
        "properties": {"anyOf": [{"type": "object"}, {"type": "null"}]},
        "bbox": {"type": "array", "items": {"type": "number"}},
    }
    assert feature["required"] == ["type"]

    # A single case union is described by its only case
    collection = defs["FeatureCollection"]
    assert collection["properties"]["features"] == {
        "type": "array",
        "items": {"$ref": "#/$defs/Feature"},
    }


def test_strict():
    defs = geocodec.json.schema(strict=True)["$defs"]
    assert defs["Feature"]["required"] == ["type", "geometry", "properties"]
    assert defs["Point"]["properties"]["coordinates"]["minItems"] == 2
    assert defs["Point"]["properties"]["bbox"]["maxItems"] == 6


def test_feature_codec_schema():
    schema = geocodec.json.schema(get_schema().feature)
    assert schema["$ref"] == "#/$defs/Feature"
    assert set(schema["$defs"]) == {"Feature", "Geometry", *GEOMETRY_TAGS}
