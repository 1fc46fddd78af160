from __future__ import annotations

from typing import Any, Literal, Optional, Union

import msgspec

from ._core import Codec, MalformedJson, SchemaViolation
from ._json_schema import schema as _schema
from .geojson import GeoJSON, get_schema

__all__ = ("Decoder", "Encoder", "decode", "encode", "schema", "FORMATS")


def __dir__():
    return __all__


FORMATS = ("minify", "indent")

Format = Literal["minify", "indent"]

_TOO_DEEP = "Maximum nesting depth exceeded"


def _document_codec(codec: Optional[Codec], strict: bool) -> Codec:
    return get_schema(strict).geojson if codec is None else codec


class Decoder:
    """A GeoJSON decoder.

    Parameters
    ----------
    codec: Codec, optional
        The codec to decode with. Defaults to the document codec of the
        schema selected by ``strict``, accepting any GeoJSON object.
    strict: bool, optional
        Whether to use the strict schema (see `geocodec.geojson.get_schema`).
        Ignored if ``codec`` is given.
    """

    def __init__(self, codec: Optional[Codec] = None, *, strict: bool = False):
        self.codec = _document_codec(codec, strict)
        self._json_decoder = msgspec.json.Decoder()

    def __repr__(self):
        return f"Decoder({self.codec!r})"

    def decode(self, buf: Union[bytes, str]) -> Any:
        """Deserialize a GeoJSON document.

        Parameters
        ----------
        buf : bytes-like or str
            The message to decode.

        Returns
        -------
        obj : Any
            The decoded value, e.g. a `geocodec.geojson.Feature`.

        Raises
        ------
        MalformedJson
            If ``buf`` isn't valid JSON.
        SchemaViolation, UnknownVariant
            If the JSON doesn't match the codec.
            Documents nested deeper than the interpreter's recursion limit
            allows are reported as a `SchemaViolation`.
        """
        try:
            node = self._json_decoder.decode(buf)
        except msgspec.DecodeError as exc:
            raise MalformedJson(str(exc)) from None
        except RecursionError:
            raise MalformedJson(_TOO_DEEP) from None
        try:
            return self.codec.decode(node)
        except RecursionError:
            raise SchemaViolation(_TOO_DEEP) from None


class Encoder:
    """A GeoJSON encoder.

    Parameters
    ----------
    codec: Codec, optional
        The codec to encode with. Defaults to the document codec.
    format: {"minify", "indent"}, optional
        The output layout. ``"minify"`` (the default) writes compact JSON,
        ``"indent"`` writes one member per line with 2 space indentation.
    """

    def __init__(self, codec: Optional[Codec] = None, *, format: Format = "minify"):
        if format not in FORMATS:
            raise ValueError(f"format must be one of {FORMATS}, got {format!r}")
        self.codec = _document_codec(codec, False)
        self.format = format
        self._json_encoder = msgspec.json.Encoder()

    def __repr__(self):
        return f"Encoder({self.codec!r}, format={self.format!r})"

    def encode(self, obj: Any) -> bytes:
        """Serialize a value as GeoJSON.

        Parameters
        ----------
        obj : Any
            The value to serialize.

        Returns
        -------
        data : bytes
            The serialized value.

        Raises
        ------
        msgspec.EncodeError
            If ``obj`` doesn't match the codec, or is nested too deeply.
        """
        try:
            buf = self._json_encoder.encode(self.codec.encode(obj))
        except RecursionError:
            raise msgspec.EncodeError(_TOO_DEEP) from None
        if self.format == "indent":
            buf = msgspec.json.format(buf, indent=2)
        return buf


def decode(
    buf: Union[bytes, str], *, codec: Optional[Codec] = None, strict: bool = False
) -> GeoJSON:
    """Deserialize a GeoJSON document.

    Parameters
    ----------
    buf : bytes-like or str
        The message to decode.
    codec : Codec, optional
        The codec to decode with. Defaults to the document codec.
    strict : bool, optional
        Whether to use the strict schema. Ignored if ``codec`` is given.

    Returns
    -------
    obj : GeoJSON

    See Also
    --------
    Decoder.decode
    """
    return Decoder(codec, strict=strict).decode(buf)


def encode(
    obj: Any, *, codec: Optional[Codec] = None, format: Format = "minify"
) -> bytes:
    """Serialize a value as GeoJSON.

    Parameters
    ----------
    obj : Any
        The value to serialize.
    codec : Codec, optional
        The codec to encode with. Defaults to the document codec.
    format : {"minify", "indent"}, optional
        The output layout.

    Returns
    -------
    data : bytes

    See Also
    --------
    Encoder.encode
    """
    return Encoder(codec, format=format).encode(obj)


def schema(codec: Optional[Codec] = None, *, strict: bool = False) -> dict:
    """Generate a JSON Schema for a codec.

    Parameters
    ----------
    codec : Codec, optional
        The codec to describe. Defaults to the document codec.
    strict : bool, optional
        Whether to describe the strict schema. Ignored if ``codec`` is given.

    Returns
    -------
    schema : dict
    """
    return _schema(_document_codec(codec, strict))
