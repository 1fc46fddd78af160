from __future__ import annotations

from typing import Any, Dict, Tuple, Union

from msgspec import Struct

from . import _core

__all__ = (
    "codec_info",
    "Type",
    "AnyType",
    "NumberType",
    "StringType",
    "MappingType",
    "FloatArrayType",
    "ListType",
    "NullableType",
    "UnionType",
    "Field",
    "ObjectType",
    "TaggedUnionType",
    "RefType",
)


def __dir__():
    return __all__


class Type(Struct, frozen=True):
    """The base Type."""


class AnyType(Type, frozen=True):
    """Any JSON value."""


class NumberType(Type, frozen=True):
    """A JSON number."""


class StringType(Type, frozen=True):
    """A JSON string."""


class MappingType(Type, frozen=True):
    """Any JSON object, kept uninterpreted."""


class FloatArrayType(Type, frozen=True):
    """An array of numbers, like a position or a bounding box.

    Parameters
    ----------
    kind: str
        The array's name (e.g. ``"Position"``).
    lengths: Tuple[int, ...], optional
        If set, the accepted array lengths.
    """

    kind: str
    lengths: Union[Tuple[int, ...], None] = None


class ListType(Type, frozen=True):
    """An array whose items share a type.

    Parameters
    ----------
    item_type: Type
        The item type.
    """

    item_type: Type


class NullableType(Type, frozen=True):
    """A type that may also be ``null``.

    Parameters
    ----------
    type: Type
        The non-null type.
    """

    type: Type


class UnionType(Type, frozen=True):
    """A union of scalar types, selected by JSON type.

    Parameters
    ----------
    kind: str
        The union's name (e.g. ``"id"``).
    types: Tuple[Type, ...]
        The possible types.
    """

    kind: str
    types: Tuple[Type, ...]


class Field(Struct, frozen=True):
    """A record describing an object member.

    Parameters
    ----------
    name: str
        The member name.
    type: Type
        The member type.
    required: bool, optional
        Whether the member must be present.
    """

    name: str
    type: Type
    required: bool = True


class ObjectType(Type, frozen=True):
    """A GeoJSON object: an envelope around a payload.

    Parameters
    ----------
    kind: str
        The object's name, also its discriminator value.
    tag_field: str
        The discriminator member name.
    tag: str
        The discriminator value.
    fields: Tuple[Field, ...]
        The members defined for this object, ``bbox`` included. Any other
        member is kept as an unknown member.
    """

    kind: str
    tag_field: str
    tag: str
    fields: Tuple[Field, ...]


class TaggedUnionType(Type, frozen=True):
    """A union of objects discriminated by a string member.

    Parameters
    ----------
    kind: str
        The union's name.
    tag_field: str
        The discriminator member name.
    cases: Tuple[Type, ...]
        The case types, usually `ObjectType` or `RefType` instances.
    tags: Tuple[str, ...]
        The discriminator value of each case, in the same order.
    """

    kind: str
    tag_field: str
    cases: Tuple[Type, ...]
    tags: Tuple[str, ...]


class RefType(Type, frozen=True):
    """A reference to a named type described elsewhere in the tree.

    Named types (objects and unions of several objects) are described in full
    where they're first reached, and referenced by name afterwards. This is
    also how recursive types are described.

    Parameters
    ----------
    kind: str
        The referenced type's name.
    """

    kind: str


def codec_info(codec: _core.Codec) -> Type:
    """Get information about a codec.

    Parameters
    ----------
    codec: Codec
        The codec to describe, e.g. ``get_schema().geojson``.

    Returns
    -------
    Type
    """
    return _Translator().run(codec)


def _is_named(codec) -> bool:
    if isinstance(codec, _core.Envelope):
        return True
    return isinstance(codec, _core.TaggedUnion) and len(codec.cases) > 1


class _Translator:
    def __init__(self):
        self.seen: Dict[int, str] = {}
        self.kinds: Dict[str, Any] = {}

    def run(self, codec):
        while isinstance(codec, _core.Lazy):
            codec = codec.codec

        if _is_named(codec):
            if id(codec) in self.seen:
                return RefType(codec.kind)
            other = self.kinds.get(codec.kind)
            if other is not None and other is not codec:
                raise ValueError(
                    f"Different codecs share the name {codec.kind!r}, "
                    "they can't be described in one tree"
                )
            self.seen[id(codec)] = codec.kind
            self.kinds[codec.kind] = codec

        if isinstance(codec, _core.AnyJson):
            return AnyType()
        elif isinstance(codec, _core.Number):
            return NumberType()
        elif isinstance(codec, _core.String):
            return StringType()
        elif isinstance(codec, _core.JsonObject):
            return MappingType()
        elif isinstance(codec, _core.FloatArray):
            return FloatArrayType(codec.kind, codec.lengths)
        elif isinstance(codec, _core.ListOf):
            return ListType(self.run(codec.item))
        elif isinstance(codec, _core.Nullable):
            return NullableType(self.run(codec.codec))
        elif isinstance(codec, _core.AnyOf):
            types = tuple(
                self.run(c) for c in (codec.number, codec.string) if c is not None
            )
            return UnionType(codec.kind, types)
        elif isinstance(codec, _core.Envelope):
            fields = [Field(codec.tag_field, StringType())]
            fields.extend(self._members(codec.payload))
            fields.append(Field("bbox", self.run(codec.bbox), required=False))
            return ObjectType(codec.kind, codec.tag_field, codec.tag, tuple(fields))
        elif isinstance(codec, _core.TaggedUnion):
            return TaggedUnionType(
                codec.kind,
                codec.tag_field,
                tuple(self.run(c.codec) for c in codec.cases),
                codec.tags,
            )
        else:
            raise TypeError(f"Can't describe codec {codec!r}")

    def _members(self, payload):
        if isinstance(payload, _core.Member):
            members = (payload,)
        else:
            members = payload.members
        return [Field(m.name, self.run(m.codec), not m.optional) for m in members]
