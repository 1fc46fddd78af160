import msgspec

# One document per object kind, plus a few with foreign members, bounding
# boxes and nesting. Numbers are written the way the encoder writes them, so
# encoding a decoded document reproduces these exactly (up to member order).
DOCUMENTS = {
    "point": {"type": "Point", "coordinates": [1, 2]},
    "point-3d": {"type": "Point", "coordinates": [1.5, -2.25, 30]},
    "multi-point": {"type": "MultiPoint", "coordinates": [[0, 0], [1, 1]]},
    "line-string": {"type": "LineString", "coordinates": [[0, 0], [1, 1], [2, 0]]},
    "multi-line-string": {
        "type": "MultiLineString",
        "coordinates": [[[0, 0], [1, 1]], [[2, 2], [3, 3]]],
    },
    "polygon": {
        "type": "Polygon",
        "coordinates": [[[0, 0], [1, 0], [1, 1], [0, 0]]],
    },
    "multi-polygon": {
        "type": "MultiPolygon",
        "coordinates": [
            [[[0, 0], [1, 0], [1, 1], [0, 0]]],
            [[[5, 5], [6, 5], [6, 6], [5, 5]]],
        ],
    },
    "geometry-collection": {
        "type": "GeometryCollection",
        "geometries": [
            {"type": "Point", "coordinates": [1, 2]},
            {
                "type": "GeometryCollection",
                "geometries": [{"type": "LineString", "coordinates": [[0, 0], [1, 1]]}],
            },
        ],
    },
    "feature": {
        "type": "Feature",
        "id": 7,
        "geometry": {"type": "Point", "coordinates": [102, 0.5]},
        "properties": {"name": "dinagat", "tags": ["a", "b"], "nested": {"x": None}},
    },
    "feature-null-geometry": {
        "type": "Feature",
        "id": "f-1",
        "geometry": None,
        "properties": None,
    },
    "feature-empty": {"type": "Feature"},
    "feature-collection": {
        "type": "FeatureCollection",
        "bbox": [100, 0, 105, 1],
        "features": [
            {
                "type": "Feature",
                "geometry": {"type": "Point", "coordinates": [102, 0.5]},
                "properties": {"prop0": "value0"},
            },
            {
                "type": "Feature",
                "geometry": {
                    "type": "LineString",
                    "coordinates": [[102, 0], [103, 1], [104, 0], [105, 1]],
                },
                "properties": {"prop0": "value0", "prop1": 0.0},
            },
        ],
    },
    "foreign-members": {
        "type": "Point",
        "coordinates": [1, 2],
        "bbox": [1, 2, 1, 2],
        "title": "Example point",
        "crs": {"type": "name", "properties": {"name": "EPSG:4326"}},
        "count": 3,
        "flags": [True, False, None],
    },
}


def as_bytes(doc):
    return msgspec.json.encode(doc)


def nested_collection(depth):
    """A Point wrapped in ``depth`` levels of GeometryCollection, as bytes"""
    head = b'{"type":"GeometryCollection","geometries":['
    point = b'{"type":"Point","coordinates":[0,0]}'
    return head * depth + point + b"]}" * depth
