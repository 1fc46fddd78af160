from __future__ import annotations

import logging
from typing import BinaryIO

from .json import Decoder, Encoder, Format

__all__ = ("trip",)

logger = logging.getLogger(__name__)


def trip(
    reader: BinaryIO,
    writer: BinaryIO,
    *,
    format: Format = "minify",
    strict: bool = False,
) -> None:
    """Decode a GeoJSON document from ``reader`` and encode it to ``writer``.

    The whole input is decoded before anything is written, so a document that
    fails to decode leaves ``writer`` untouched. The output is followed by a
    newline and ``writer`` is flushed. A failure while writing isn't rolled
    back.

    Parameters
    ----------
    reader : binary file-like
        The input stream, read to the end.
    writer : binary file-like
        The output stream.
    format : {"minify", "indent"}, optional
        The output layout.
    strict : bool, optional
        Whether to decode with the strict schema.
    """
    encoder = Encoder(format=format)
    buf = reader.read()
    logger.debug("Read %d bytes", len(buf))
    doc = Decoder(strict=strict).decode(buf)
    logger.debug("Decoded a %s", doc.kind)
    out = encoder.encode(doc)
    writer.write(out)
    writer.write(b"\n")
    writer.flush()
    logger.debug("Wrote %d bytes", len(out) + 1)
