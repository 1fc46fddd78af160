from __future__ import annotations

import math
from collections import deque
from typing import Any, Callable, Collection, Dict, Iterable, Optional, Tuple

import msgspec
from msgspec import UNSET

__all__ = (
    "MalformedJson",
    "SchemaViolation",
    "UnknownVariant",
    "Codec",
    "Number",
    "String",
    "AnyJson",
    "JsonObject",
    "FloatArray",
    "ListOf",
    "Nullable",
    "AnyOf",
    "Lazy",
    "Member",
    "Record",
    "Envelope",
    "Case",
    "TaggedUnion",
)


def __dir__():
    return __all__


# --------------------------------------------------------------------------
# Errors
# --------------------------------------------------------------------------


class MalformedJson(msgspec.DecodeError):
    """The input is not syntactically valid JSON."""


class _LocatedError(msgspec.ValidationError):
    """A validation error that records where in the document it happened.

    Container codecs extend ``path`` on the way up, so the innermost codec
    only reports what went wrong and the outermost caller sees the full
    location (e.g. ``$.features[0].geometry``).
    """

    def __init__(self, msg: str, path: Iterable[Any] = ()):
        super().__init__(msg)
        self.msg = msg
        self.path = deque(path)

    def _push(self, segment):
        self.path.appendleft(segment)

    @property
    def location(self) -> str:
        """The JSON path of the failing node, ``$`` being the document root"""
        parts = ["$"]
        for seg in self.path:
            parts.append(f"[{seg}]" if type(seg) is int else f".{seg}")
        return "".join(parts)

    def __str__(self):
        if self.path:
            return f"{self.msg} - at `{self.location}`"
        return self.msg


class SchemaViolation(_LocatedError):
    """A member is missing, has the wrong JSON type, or has the wrong shape."""


class UnknownVariant(_LocatedError):
    """A discriminator value doesn't match any case of a tagged union.

    Parameters
    ----------
    tag: str
        The offending discriminator value.
    context: str
        The ``kind`` of the dispatcher that rejected it.
    """

    def __init__(self, tag: str, context: str, path: Iterable[Any] = ()):
        super().__init__(f"Unknown {context} type {tag!r}", path)
        self.tag = tag
        self.context = context


_JSON_TYPE_NAMES = {
    dict: "object",
    list: "array",
    str: "string",
    int: "number",
    float: "number",
    bool: "bool",
    type(None): "null",
}


def _json_type(node) -> str:
    return _JSON_TYPE_NAMES.get(type(node), type(node).__name__)


def _expected(name, node) -> SchemaViolation:
    return SchemaViolation(f"Expected `{name}`, got `{_json_type(node)}`")


def _expected_array(value) -> msgspec.EncodeError:
    return msgspec.EncodeError(
        f"Expected `list` or `tuple`, got `{type(value).__name__}`"
    )


def _encode_number(x):
    # Integral floats are written without a fraction so `[1.0, 2.0]` round
    # trips to `[1,2]`. -0.0 and values beyond 2**53 keep the float form.
    t = type(x)
    if t is float:
        if (
            x.is_integer()
            and abs(x) < 9007199254740992.0
            and not (x == 0.0 and math.copysign(1.0, x) < 0)
        ):
            return int(x)
        return x
    if t is int:
        return x
    raise msgspec.EncodeError(f"Expected `float`, got `{t.__name__}`")


# --------------------------------------------------------------------------
# Codecs
# --------------------------------------------------------------------------


class Codec:
    """Base class of all codecs.

    A codec converts between generic JSON values (as produced by
    ``msgspec.json.decode``) and typed values. ``decode`` raises
    `SchemaViolation` or `UnknownVariant`, ``encode`` raises
    ``msgspec.EncodeError``.
    """

    __slots__ = ()

    kind = "value"

    def decode(self, node: Any) -> Any:
        raise NotImplementedError

    def encode(self, value: Any) -> Any:
        raise NotImplementedError

    def __repr__(self):
        return f"{type(self).__name__}<{self.kind}>"


class Number(Codec):
    """A JSON number, decoded as a `float`."""

    __slots__ = ()

    kind = "number"

    def decode(self, node):
        t = type(node)
        if t is float:
            return node
        if t is int:
            try:
                return float(node)
            except OverflowError:
                raise SchemaViolation("Number out of range") from None
        raise _expected("number", node)

    def encode(self, value):
        return _encode_number(value)


class String(Codec):
    """A JSON string."""

    __slots__ = ()

    kind = "string"

    def decode(self, node):
        if type(node) is not str:
            raise _expected("string", node)
        return node

    def encode(self, value):
        if type(value) is not str:
            raise msgspec.EncodeError(
                f"Expected `str`, got `{type(value).__name__}`"
            )
        return value


class AnyJson(Codec):
    """Any JSON value, kept as is."""

    __slots__ = ()

    kind = "any"

    def decode(self, node):
        return node

    def encode(self, value):
        return value


class JsonObject(Codec):
    """Any JSON object, kept as a `dict` without interpretation."""

    __slots__ = ()

    kind = "object"

    def decode(self, node):
        if type(node) is not dict:
            raise _expected("object", node)
        return node

    def encode(self, value):
        if not isinstance(value, dict):
            raise msgspec.EncodeError(
                f"Expected `dict`, got `{type(value).__name__}`"
            )
        return value


class FloatArray(Codec):
    """A JSON array of numbers, decoded as a tuple of floats.

    Parameters
    ----------
    kind: str
        A name for the array, used in error messages (e.g. ``"Position"``).
    lengths: collection of int, optional
        If set, the accepted array lengths. By default any length is accepted.
    """

    __slots__ = ("kind", "lengths")

    def __init__(self, kind: str, lengths: Optional[Collection[int]] = None):
        self.kind = kind
        self.lengths = None if lengths is None else tuple(sorted(lengths))

    def decode(self, node):
        if type(node) is not list:
            raise _expected("array", node)
        if self.lengths is not None and len(node) not in self.lengths:
            allowed = " or ".join(map(str, self.lengths))
            raise SchemaViolation(
                f"Expected {self.kind} of length {allowed}, got {len(node)}"
            )
        out = []
        for i, x in enumerate(node):
            t = type(x)
            if t is float:
                out.append(x)
            elif t is int:
                try:
                    out.append(float(x))
                except OverflowError:
                    raise SchemaViolation("Number out of range", [i]) from None
            else:
                raise SchemaViolation(
                    f"Expected `number`, got `{_json_type(x)}`", [i]
                )
        return tuple(out)

    def encode(self, value):
        if not isinstance(value, (tuple, list)):
            raise _expected_array(value)
        return [_encode_number(x) for x in value]


class ListOf(Codec):
    """A JSON array whose items all use the same codec, decoded as a `list`."""

    __slots__ = ("item",)

    def __init__(self, item: Codec):
        self.item = item

    @property
    def kind(self):
        return f"array of {self.item.kind}"

    def decode(self, node):
        if type(node) is not list:
            raise _expected("array", node)
        decode = self.item.decode
        out = []
        i = 0
        try:
            for i, x in enumerate(node):
                out.append(decode(x))
        except _LocatedError as exc:
            exc._push(i)
            raise
        return out

    def encode(self, value):
        if not isinstance(value, (list, tuple)):
            raise _expected_array(value)
        encode = self.item.encode
        return [encode(x) for x in value]


class Nullable(Codec):
    """Either JSON ``null`` (decoded as `None`) or a value of ``codec``."""

    __slots__ = ("codec",)

    def __init__(self, codec: Codec):
        self.codec = codec

    @property
    def kind(self):
        return f"{self.codec.kind} or null"

    def decode(self, node):
        if node is None:
            return None
        return self.codec.decode(node)

    def encode(self, value):
        if value is None:
            return None
        return self.codec.encode(value)


class AnyOf(Codec):
    """A union of a number and a string codec, selected by the JSON type.

    Decoded values keep the Python type of the branch that produced them
    (`float` or `str`) and are encoded back through the same branch. There's
    no conversion between the two.
    """

    __slots__ = ("kind", "number", "string")

    def __init__(
        self,
        kind: str,
        *,
        number: Optional[Codec] = None,
        string: Optional[Codec] = None,
    ):
        if number is None and string is None:
            raise ValueError("AnyOf requires at least one of `number` or `string`")
        self.kind = kind
        self.number = number
        self.string = string

    def _expected_names(self):
        return " | ".join(
            name
            for name, c in [("number", self.number), ("string", self.string)]
            if c is not None
        )

    def decode(self, node):
        t = type(node)
        if (t is int or t is float) and self.number is not None:
            return self.number.decode(node)
        if t is str and self.string is not None:
            return self.string.decode(node)
        raise _expected(self._expected_names(), node)

    def encode(self, value):
        t = type(value)
        if (t is int or t is float) and self.number is not None:
            return self.number.encode(value)
        if t is str and self.string is not None:
            return self.string.encode(value)
        raise msgspec.EncodeError(
            f"Expected `{self._expected_names()}`, got `{t.__name__}`"
        )


class Lazy(Codec):
    """A forward reference to a codec that isn't built yet.

    ``thunk`` is called on first use and its result cached. This is how a
    schema refers to itself, e.g. a geometry collection holding geometries.

    Parameters
    ----------
    thunk: callable
        A zero-argument callable returning the referenced codec.
    """

    __slots__ = ("_thunk", "_codec")

    def __init__(self, thunk: Callable[[], Codec]):
        self._thunk = thunk
        self._codec = None

    @property
    def codec(self) -> Codec:
        """The referenced codec, resolving it if needed"""
        return self.resolve()

    def resolve(self) -> Codec:
        """Resolve the reference, returning the referenced codec."""
        if self._codec is None:
            codec = self._thunk()
            if not isinstance(codec, Codec):
                raise RuntimeError(
                    f"Lazy codec reference resolved to {codec!r}, expected a Codec"
                )
            self._codec = codec
        return self._codec

    @property
    def kind(self):
        return self.codec.kind

    def decode(self, node):
        return self.codec.decode(node)

    def encode(self, value):
        return self.codec.encode(value)

    def __repr__(self):
        if self._codec is None:
            return "Lazy<unresolved>"
        return f"Lazy<{self._codec.kind}>"


# --------------------------------------------------------------------------
# Objects
# --------------------------------------------------------------------------


class Member:
    """A payload made of a single object member.

    Object-member codecs don't take a whole JSON node. They read the members
    they understand out of an object, record their names in ``consumed``, and
    on encode write their members into an output `dict`.

    Parameters
    ----------
    name: str
        The member name.
    codec: Codec
        The codec for the member's value.
    optional: bool, optional
        If ``True`` a missing member decodes as ``UNSET``, and ``UNSET`` isn't
        written on encode. Otherwise a missing member is an error.
    """

    __slots__ = ("name", "codec", "optional")

    def __init__(self, name: str, codec: Codec, *, optional: bool = False):
        self.name = name
        self.codec = codec
        self.optional = optional

    @property
    def names(self) -> Tuple[str, ...]:
        return (self.name,)

    def decode_members(self, obj: dict, consumed: set):
        consumed.add(self.name)
        try:
            node = obj[self.name]
        except KeyError:
            if self.optional:
                return UNSET
            raise SchemaViolation(
                f"Object missing required field `{self.name}`"
            ) from None
        try:
            return self.codec.decode(node)
        except _LocatedError as exc:
            exc._push(self.name)
            raise

    def encode_members(self, value, out: dict) -> None:
        if value is UNSET:
            if not self.optional:
                raise msgspec.EncodeError(f"Missing required field `{self.name}`")
            return
        out[self.name] = self.codec.encode(value)

    def __repr__(self):
        return f"Member({self.name!r}, {self.codec!r})"


class Record:
    """A payload built from several object members.

    The decoded payload is ``cls(**{member.name: value, ...})``; on encode the
    members are read back as attributes of the same name.
    """

    __slots__ = ("cls", "members")

    def __init__(self, cls: type, *members: Member):
        self.cls = cls
        self.members = members

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(m.name for m in self.members)

    def decode_members(self, obj: dict, consumed: set):
        return self.cls(
            **{m.name: m.decode_members(obj, consumed) for m in self.members}
        )

    def encode_members(self, value, out: dict) -> None:
        for m in self.members:
            m.encode_members(getattr(value, m.name), out)

    def __repr__(self):
        return f"Record({self.cls.__name__}, {', '.join(self.names)})"


class Envelope(Codec):
    """An object codec adding the shared GeoJSON members around a payload.

    Besides the payload members, an envelope understands the discriminator
    member (always written as ``tag``, never checked on decode; that's the
    dispatcher's job) and an optional ``"bbox"``. Every other member is
    captured untouched and written back on encode. Captured members that reuse
    a known member name are rejected on encode.

    Parameters
    ----------
    tag: str
        The discriminator value written on encode. Also used as ``kind``.
    payload: Member or Record
        The object-member codec for the type-specific data.
    make: callable
        Builds the decoded value as ``make(payload, bbox, unknown)``. The value
        must expose ``payload``, ``bbox`` and ``unknown`` attributes for
        encoding.
    tag_field: str, optional
        The discriminator member name. Defaults to ``"type"``.
    bbox: Codec, optional
        The codec for the ``"bbox"`` member.
    """

    __slots__ = ("tag", "payload", "make", "tag_field", "bbox")

    def __init__(
        self,
        tag: str,
        payload,
        make: Callable[[Any, Any, Dict[str, Any]], Any],
        *,
        tag_field: str = "type",
        bbox: Optional[Codec] = None,
    ):
        if tag_field in payload.names or "bbox" in payload.names:
            raise ValueError(
                f"Payload of {tag!r} can't define the `{tag_field}` or `bbox` members"
            )
        self.tag = tag
        self.payload = payload
        self.make = make
        self.tag_field = tag_field
        self.bbox = FloatArray("Bbox") if bbox is None else bbox

    @property
    def kind(self):
        return self.tag

    def decode(self, node):
        if type(node) is not dict:
            raise _expected("object", node)
        consumed = {self.tag_field, "bbox"}
        bbox = None
        if "bbox" in node:
            try:
                bbox = self.bbox.decode(node["bbox"])
            except _LocatedError as exc:
                exc._push("bbox")
                raise
        payload = self.payload.decode_members(node, consumed)
        unknown = {k: v for k, v in node.items() if k not in consumed}
        return self.make(payload, bbox, unknown)

    def encode(self, value):
        out = {self.tag_field: self.tag}
        reserved = {self.tag_field, "bbox", *self.payload.names}
        for name, node in value.unknown.items():
            if name in reserved:
                raise msgspec.EncodeError(
                    f"Unknown member `{name}` of a {self.tag} "
                    "collides with a known member"
                )
            out[name] = node
        if value.bbox is not None:
            out["bbox"] = self.bbox.encode(value.bbox)
        self.payload.encode_members(value.payload, out)
        return out


# --------------------------------------------------------------------------
# Tagged unions
# --------------------------------------------------------------------------


def _kind_of(value):
    try:
        return value.kind
    except AttributeError:
        raise msgspec.EncodeError(
            f"Can't determine the variant of a `{type(value).__name__}`"
        ) from None


class Case(msgspec.Struct, frozen=True):
    """One case of a `TaggedUnion`.

    Parameters
    ----------
    tag: str
        The discriminator value selecting this case.
    codec: Codec
        The codec for the whole object, discriminator member included.
    inject: callable, optional
        Wraps the decoded case value into the union's value. Defaults to the
        identity.
    project: callable, optional
        Extracts the case value from a union value before encoding. Defaults
        to the identity.
    """

    tag: str
    codec: Codec
    inject: Optional[Callable[[Any], Any]] = None
    project: Optional[Callable[[Any], Any]] = None


class TaggedUnion(Codec):
    """A union of object codecs discriminated by a string member.

    Parameters
    ----------
    kind: str
        A name for the union, used in error messages.
    cases: iterable of Case
        The cases. Tags must be unique within a union.
    tag_field: str, optional
        The discriminator member name. Defaults to ``"type"``.
    tag_of: callable, optional
        Returns the tag of a value to encode. Defaults to reading the value's
        ``kind`` attribute.
    """

    __slots__ = ("kind", "cases", "tag_field", "tag_of", "_table")

    def __init__(
        self,
        kind: str,
        cases: Iterable[Case],
        *,
        tag_field: str = "type",
        tag_of: Callable[[Any], str] = _kind_of,
    ):
        table = {}
        for case in cases:
            if case.tag in table:
                raise ValueError(f"Duplicate tag {case.tag!r} in {kind!r}")
            # A case codec writes its own discriminator; it must be the one
            # this union reads back.
            written = getattr(case.codec, "tag", case.tag)
            if written != case.tag:
                raise ValueError(
                    f"Case {case.tag!r} of {kind!r} uses a codec tagged {written!r}"
                )
            table[case.tag] = case
        if not table:
            raise ValueError(f"{kind!r} requires at least one case")
        self.kind = kind
        self.cases = tuple(table.values())
        self.tag_field = tag_field
        self.tag_of = tag_of
        self._table = table

    @property
    def tags(self) -> Tuple[str, ...]:
        return tuple(self._table)

    def decode(self, node):
        if type(node) is not dict:
            raise _expected("object", node)
        try:
            tag = node[self.tag_field]
        except KeyError:
            raise SchemaViolation(
                f"Object missing required field `{self.tag_field}`"
            ) from None
        if type(tag) is not str:
            raise SchemaViolation(
                f"Expected `string`, got `{_json_type(tag)}`", [self.tag_field]
            )
        case = self._table.get(tag)
        if case is None:
            raise UnknownVariant(tag, self.kind, [self.tag_field])
        value = case.codec.decode(node)
        return value if case.inject is None else case.inject(value)

    def encode(self, value):
        tag = self.tag_of(value)
        case = self._table.get(tag)
        if case is None:
            raise msgspec.EncodeError(f"Unsupported {self.kind} variant {tag!r}")
        if case.project is not None:
            value = case.project(value)
        return case.codec.encode(value)
