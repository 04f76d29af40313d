"""Binary cell stream codec.

Layout (little-endian)::

    preamble   b"CSFT" u16 version
    frame      u8 kind, u32 length, payload[length]

Exactly one header frame (kind ``H``) comes first, followed by zero or
more cell frames (kind ``C``). A clean end of stream on a frame boundary
ends the stream; anything else that does not parse is a WireFormatError.
"""

import io
import logging
import struct
from pathlib import Path
from typing import BinaryIO, Iterator, Union

import numpy as np

from cellsift.cells.cell import Cell
from cellsift.cells.header import CellHeader, Tag, TagCategory
from cellsift.contracts.failure import WireFormatError

__all__ = ['CellWriter', 'CellReader', 'encode_header', 'decode_header',
           'encode_cell', 'decode_cell', 'MAGIC', 'FORMAT_VERSION']

logger = logging.getLogger(__name__)

MAGIC = b"CSFT"
FORMAT_VERSION = 1

HEADER_FRAME = b"H"
CELL_FRAME = b"C"

_PREAMBLE = struct.Struct("<4sH")
_FRAME = struct.Struct("<cI")
_CELL = struct.Struct("<QQQffI")
_U16 = struct.Struct("<H")
_U32 = struct.Struct("<I")


# =============================================================================
# Payload codecs
# =============================================================================

def _pack_str(s: str, prefix: struct.Struct) -> bytes:
    data = s.encode("utf-8")
    return prefix.pack(len(data)) + data


class _Cursor:
    """Bounds-checked reader over one frame payload."""

    def __init__(self, payload: bytes, what: str):
        self.payload = payload
        self.pos = 0
        self.what = what

    def take(self, n: int) -> bytes:
        end = self.pos + n
        if end > len(self.payload):
            raise WireFormatError(
                f"Truncated {self.what} payload: need {end} bytes, have {len(self.payload)}"
            )
        chunk = self.payload[self.pos:end]
        self.pos = end
        return chunk

    def unpack(self, fmt: struct.Struct):
        return fmt.unpack(self.take(fmt.size))

    def string(self, prefix: struct.Struct) -> str:
        (n,) = self.unpack(prefix)
        try:
            return self.take(n).decode("utf-8")
        except UnicodeDecodeError as e:
            raise WireFormatError(f"Invalid UTF-8 in {self.what} payload") from e

    def finish(self):
        if self.pos != len(self.payload):
            raise WireFormatError(
                f"{len(self.payload) - self.pos} trailing bytes in {self.what} payload"
            )


def encode_header(header: CellHeader) -> bytes:
    parts = [_U32.pack(len(header.tags))]
    for tag in header.tags:
        parts.append(TagCategory(tag.category).value.encode("ascii"))
        parts.append(_pack_str(tag.name, _U16))
        parts.append(_pack_str(tag.value, _U16))
    parts.append(_U32.pack(len(header.provenance)))
    parts.extend(_pack_str(entry, _U32) for entry in header.provenance)
    return b"".join(parts)


def decode_header(payload: bytes) -> CellHeader:
    cur = _Cursor(payload, "header")
    (n_tags,) = cur.unpack(_U32)
    tags = []
    for _ in range(n_tags):
        code = cur.take(2)
        try:
            category = TagCategory(code.decode("ascii"))
        except (UnicodeDecodeError, ValueError) as e:
            raise WireFormatError(f"Unknown tag category {code!r}") from e
        name = cur.string(_U16)
        value = cur.string(_U16)
        try:
            tags.append(Tag(name, category, value))
        except ValueError as e:
            raise WireFormatError(str(e)) from e
    (n_prov,) = cur.unpack(_U32)
    provenance = [cur.string(_U32) for _ in range(n_prov)]
    cur.finish()
    return CellHeader(tags, provenance)


def encode_cell(cell: Cell) -> bytes:
    cols = np.asarray(cell.cols, dtype="<f4")
    try:
        fixed = _CELL.pack(cell.id, cell.cflag, cell.pflag, cell.x, cell.y, len(cols))
    except struct.error as e:
        raise WireFormatError(f"Cell fields do not fit the wire format: {e}") from e
    return fixed + cols.tobytes()


def decode_cell(payload: bytes) -> Cell:
    if len(payload) < _CELL.size:
        raise WireFormatError(
            f"Truncated cell payload: {len(payload)} bytes, need at least {_CELL.size}"
        )
    cell_id, cflag, pflag, x, y, n = _CELL.unpack_from(payload)
    expected = _CELL.size + 4 * n
    if len(payload) != expected:
        raise WireFormatError(
            f"Cell payload length {len(payload)} does not match {n} values ({expected} bytes)"
        )
    cols = np.frombuffer(payload, dtype="<f4", count=n, offset=_CELL.size).astype(np.float32)
    return Cell(cell_id, cflag, pflag, x, y, cols)


# =============================================================================
# Stream writer / reader
# =============================================================================

class CellWriter:
    """Write a header followed by cells to a binary stream.

    Parameters
    ----------
    stream : binary file-like
        Destination. Not closed by ``close()`` unless opened through
        ``CellWriter.open``.

    Examples
    --------
    >>> buf = io.BytesIO()
    >>> writer = CellWriter(buf)
    >>> writer.write_header(CellHeader.from_features(["CD3"]))
    >>> writer.write_cell(Cell.create(0, 1, 2.0, 3.0, [4.0]))
    >>> writer.close()
    """

    def __init__(self, stream: BinaryIO, _owns_stream: bool = False):
        self.stream = stream
        self._owns_stream = _owns_stream
        self._header_written = False
        self._closed = False
        self.cells_written = 0

    @classmethod
    def open(cls, path: Union[str, Path]) -> "CellWriter":
        return cls(open(path, "wb"), _owns_stream=True)

    def _write_frame(self, kind: bytes, payload: bytes):
        self.stream.write(_FRAME.pack(kind, len(payload)))
        self.stream.write(payload)

    def write_header(self, header: CellHeader) -> None:
        if self._header_written:
            raise WireFormatError("Header already written to this stream")
        self.stream.write(_PREAMBLE.pack(MAGIC, FORMAT_VERSION))
        self._write_frame(HEADER_FRAME, encode_header(header))
        self._header_written = True
        logger.debug("Wrote header: %d tags, %d provenance entries",
                     len(header.tags), len(header.provenance))

    def write_cell(self, cell: Cell) -> None:
        if not self._header_written:
            raise WireFormatError("Cell written before header")
        self._write_frame(CELL_FRAME, encode_cell(cell))
        self.cells_written += 1

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.stream.flush()
        if self._owns_stream:
            self.stream.close()
        logger.debug("Closed writer after %d cells", self.cells_written)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()
        return False


class CellReader:
    """Read a header and iterate cells from a binary stream.

    The header is read on construction. Iterating yields cells until a
    clean end of stream.

    Raises
    ------
    WireFormatError
        Bad magic, unsupported version, missing or repeated header,
        unknown frame kind, or a truncated frame.
    """

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.cells_read = 0
        self._read_preamble()
        frame = self._read_frame()
        if frame is None:
            raise WireFormatError("Stream ended before the header frame")
        kind, payload = frame
        if kind != HEADER_FRAME:
            raise WireFormatError(f"Expected header frame first, got kind {kind!r}")
        self.header = decode_header(payload)

    @classmethod
    def from_bytes(cls, data: bytes) -> "CellReader":
        return cls(io.BytesIO(data))

    def _read_exact(self, n: int, what: str) -> bytes:
        data = self.stream.read(n)
        if len(data) != n:
            raise WireFormatError(f"Truncated {what}: expected {n} bytes, got {len(data)}")
        return data

    def _read_preamble(self):
        magic, version = _PREAMBLE.unpack(self._read_exact(_PREAMBLE.size, "preamble"))
        if magic != MAGIC:
            raise WireFormatError(f"Bad magic {magic!r}, not a cell stream")
        if version != FORMAT_VERSION:
            raise WireFormatError(f"Unsupported format version {version}")

    def _read_frame(self):
        first = self.stream.read(1)
        if not first:
            return None
        rest = self._read_exact(_FRAME.size - 1, "frame header")
        kind, length = _FRAME.unpack(first + rest)
        payload = self._read_exact(length, f"frame payload ({kind!r})")
        return kind, payload

    def __iter__(self) -> Iterator[Cell]:
        while True:
            frame = self._read_frame()
            if frame is None:
                logger.debug("End of stream after %d cells", self.cells_read)
                return
            kind, payload = frame
            if kind == HEADER_FRAME:
                raise WireFormatError("Second header frame in stream")
            if kind != CELL_FRAME:
                raise WireFormatError(f"Unknown frame kind {kind!r}")
            self.cells_read += 1
            yield decode_cell(payload)
