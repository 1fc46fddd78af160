from typing import Any

import pytest

import msgspec

import geocodec.inspect as gi
from geocodec._core import (
    AnyJson,
    AnyOf,
    Codec,
    Envelope,
    FloatArray,
    JsonObject,
    Lazy,
    ListOf,
    Member,
    Nullable,
    Number,
    Record,
    String,
)
from geocodec.geojson import Point, get_schema


def test_module_dir():
    assert set(dir(gi)) == set(gi.__all__)


@pytest.mark.parametrize(
    "codec, sol",
    [
        (AnyJson(), gi.AnyType()),
        (Number(), gi.NumberType()),
        (String(), gi.StringType()),
        (JsonObject(), gi.MappingType()),
        (FloatArray("Position"), gi.FloatArrayType("Position")),
        (FloatArray("Bbox", lengths=(6, 4)), gi.FloatArrayType("Bbox", (4, 6))),
        (ListOf(Number()), gi.ListType(gi.NumberType())),
        (Nullable(String()), gi.NullableType(gi.StringType())),
        (
            AnyOf("id", number=Number(), string=String()),
            gi.UnionType("id", (gi.NumberType(), gi.StringType())),
        ),
        (Lazy(lambda: Number()), gi.NumberType()),
    ],
)
def test_simple(codec, sol):
    assert gi.codec_info(codec) == sol


def test_object():
    codec = Envelope("Point", Member("coordinates", FloatArray("Position")), Point)
    assert gi.codec_info(codec) == gi.ObjectType(
        kind="Point",
        tag_field="type",
        tag="Point",
        fields=(
            gi.Field("type", gi.StringType()),
            gi.Field("coordinates", gi.FloatArrayType("Position")),
            gi.Field("bbox", gi.FloatArrayType("Bbox"), required=False),
        ),
    )


def geometry_object(kind, member, typ, bbox=gi.FloatArrayType("Bbox")):
    return gi.ObjectType(
        kind=kind,
        tag_field="type",
        tag=kind,
        fields=(
            gi.Field("type", gi.StringType()),
            gi.Field(member, typ),
            gi.Field("bbox", bbox, required=False),
        ),
    )


def test_geometry():
    position = gi.FloatArrayType("Position")
    positions = gi.ListType(position)
    sol = gi.TaggedUnionType(
        kind="Geometry",
        tag_field="type",
        cases=(
            geometry_object("Point", "coordinates", position),
            geometry_object("MultiPoint", "coordinates", positions),
            geometry_object("LineString", "coordinates", positions),
            geometry_object("MultiLineString", "coordinates", gi.ListType(positions)),
            geometry_object("Polygon", "coordinates", gi.ListType(positions)),
            geometry_object(
                "MultiPolygon", "coordinates", gi.ListType(gi.ListType(positions))
            ),
            geometry_object(
                "GeometryCollection", "geometries", gi.ListType(gi.RefType("Geometry"))
            ),
        ),
        tags=(
            "Point",
            "MultiPoint",
            "LineString",
            "MultiLineString",
            "Polygon",
            "MultiPolygon",
            "GeometryCollection",
        ),
    )
    assert gi.codec_info(get_schema().geometry) == sol


def test_geometry_strict():
    info = gi.codec_info(get_schema(strict=True).geometry)
    point = info.cases[0]
    assert point.fields[1].type == gi.FloatArrayType("Position", (2, 3))
    assert point.fields[2].type == gi.FloatArrayType("Bbox", (4, 6))


def test_feature():
    info = gi.codec_info(get_schema().feature)
    assert isinstance(info, gi.TaggedUnionType)
    assert info.tags == ("Feature",)
    (feature,) = info.cases
    assert [(f.name, f.required) for f in feature.fields] == [
        ("type", True),
        ("id", False),
        ("geometry", False),
        ("properties", False),
        ("bbox", False),
    ]
    assert feature.fields[1].type == gi.UnionType(
        "id", (gi.NumberType(), gi.StringType())
    )
    geometry = feature.fields[2].type
    assert isinstance(geometry, gi.NullableType)
    assert isinstance(geometry.type, gi.TaggedUnionType)
    assert geometry.type.kind == "Geometry"
    assert feature.fields[3].type == gi.NullableType(gi.MappingType())


def test_feature_strict():
    (feature,) = gi.codec_info(get_schema(strict=True).feature).cases
    required = {f.name for f in feature.fields if f.required}
    assert required == {"type", "geometry", "properties"}


def test_document_describes_named_types_once():
    info = gi.codec_info(get_schema().geojson)
    assert info.kind == "GeoJSON"
    assert len(info.cases) == 9
    assert all(isinstance(c, gi.ObjectType) for c in info.cases)

    collection = info.cases[6]
    assert collection.kind == "GeometryCollection"
    geometry = collection.fields[1].type.item_type
    assert isinstance(geometry, gi.TaggedUnionType)
    assert set(geometry.cases) == {
        gi.RefType(tag) for tag in geometry.tags
    }

    feature = info.cases[7]
    assert feature.fields[2].type == gi.NullableType(gi.RefType("Geometry"))

    features = info.cases[8].fields[1].type
    assert features == gi.ListType(
        gi.TaggedUnionType("Feature", "type", (gi.RefType("Feature"),), ("Feature",))
    )


def test_conflicting_names():
    class Both(msgspec.Struct):
        a: Any
        b: Any

    codec = Envelope(
        "Both",
        Record(
            Both,
            Member("a", get_schema().geometry),
            Member("b", get_schema(strict=True).geometry),
        ),
        Point,
    )
    with pytest.raises(ValueError, match="share the name 'Geometry'"):
        gi.codec_info(codec)


def test_unsupported_codec():
    class Custom(Codec):
        pass

    with pytest.raises(TypeError, match="Can't describe codec"):
        gi.codec_info(Custom())
