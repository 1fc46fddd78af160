from __future__ import annotations

import re
from typing import Any

from . import inspect as gi
from ._core import Codec

__all__ = ("schema",)


def schema(codec: Codec, ref_template: str = "#/$defs/{name}") -> dict[str, Any]:
    """Generate a JSON Schema for a codec.

    Named types (GeoJSON objects and unions of several of them) are extracted
    and stored in a top-level ``"$defs"`` field.

    Parameters
    ----------
    codec : Codec
        The codec to generate the schema for.
    ref_template : str, optional
        A template to use when generating ``"$ref"`` fields. This template is
        formatted with the type name as ``template.format(name=name)``.

    Returns
    -------
    schema : dict
        The generated JSON Schema.
    """
    info = gi.codec_info(codec)

    components = _collect_component_types(info)

    name_map = _build_name_map(components)

    out = _to_schema(info, name_map, ref_template)
    if components:
        out["$defs"] = {
            name_map[kind]: _to_schema(t, name_map, ref_template, check_ref=False)
            for kind, t in components.items()
        }
    return out


def _is_component(t: gi.Type) -> bool:
    """Objects and unions of several objects get their own ``$defs`` entry.

    A union with a single case is described by that case.
    """
    if isinstance(t, gi.ObjectType):
        return True
    return isinstance(t, gi.TaggedUnionType) and len(t.cases) > 1


def _collect_component_types(info: gi.Type) -> dict[str, gi.Type]:
    """Find all named types in the type tree.

    `codec_info` describes each named type once and references it with a
    `RefType` afterwards, so every name maps to exactly one description.
    """
    components = {}

    def collect(t):
        if _is_component(t):
            components[t.kind] = t
        if isinstance(t, gi.ObjectType):
            for f in t.fields:
                collect(f.type)
        elif isinstance(t, gi.TaggedUnionType):
            for c in t.cases:
                collect(c)
        elif isinstance(t, gi.ListType):
            collect(t.item_type)
        elif isinstance(t, gi.NullableType):
            collect(t.type)
        elif isinstance(t, gi.UnionType):
            for st in t.types:
                collect(st)

    collect(info)
    return components


def _build_name_map(components: dict[str, gi.Type]) -> dict[str, str]:
    """A mapping from type names to normalized, unique component names."""

    def normalize(name):
        return re.sub(r"[^a-zA-Z0-9.\-_]", "_", name)

    names: dict[str, str] = {}
    used: set[str] = set()
    for kind in components:
        name = base = normalize(kind)
        i = 1
        while name in used:
            i += 1
            name = f"{base}_{i}"
        used.add(name)
        names[kind] = name
    return names


def _to_schema(
    t: gi.Type, name_map: dict[str, str], ref_template: str, check_ref: bool = True
) -> dict[str, Any]:
    """Converts a Type to a json-schema."""
    schema: dict[str, Any] = {}

    if isinstance(t, gi.RefType) or (check_ref and _is_component(t)):
        schema["$ref"] = ref_template.format(name=name_map[t.kind])
        return schema

    if isinstance(t, gi.AnyType):
        pass
    elif isinstance(t, gi.NumberType):
        schema["type"] = "number"
    elif isinstance(t, gi.StringType):
        schema["type"] = "string"
    elif isinstance(t, gi.MappingType):
        schema["type"] = "object"
    elif isinstance(t, gi.FloatArrayType):
        schema["type"] = "array"
        schema["items"] = {"type": "number"}
        if t.lengths is not None:
            schema["minItems"] = min(t.lengths)
            schema["maxItems"] = max(t.lengths)
    elif isinstance(t, gi.ListType):
        schema["type"] = "array"
        schema["items"] = _to_schema(t.item_type, name_map, ref_template)
    elif isinstance(t, gi.NullableType):
        schema["anyOf"] = [
            _to_schema(t.type, name_map, ref_template),
            {"type": "null"},
        ]
    elif isinstance(t, gi.UnionType):
        schema["anyOf"] = [_to_schema(st, name_map, ref_template) for st in t.types]
    elif isinstance(t, gi.ObjectType):
        schema["title"] = t.kind
        schema["type"] = "object"
        properties = {}
        required = []
        for field in t.fields:
            if field.name == t.tag_field:
                field_schema = {"enum": [t.tag]}
            else:
                field_schema = _to_schema(field.type, name_map, ref_template)
            properties[field.name] = field_schema
            if field.required:
                required.append(field.name)
        schema["properties"] = properties
        if required:
            schema["required"] = required
    elif isinstance(t, gi.TaggedUnionType):
        if len(t.cases) == 1:
            return _to_schema(t.cases[0], name_map, ref_template)
        options = [_to_schema(c, name_map, ref_template) for c in t.cases]
        schema["title"] = t.kind
        schema["anyOf"] = options
        schema["discriminator"] = {
            "propertyName": t.tag_field,
            "mapping": {
                tag: opt["$ref"]
                for tag, opt in zip(t.tags, options)
                if "$ref" in opt
            },
        }
    else:
        raise TypeError(f"Can't generate a JSON schema for {t!r}")

    return schema
