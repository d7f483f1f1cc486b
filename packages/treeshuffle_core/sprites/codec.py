"""``SpA1`` multi-frame sprite container.

Layout (little-endian):

    offset  size  field
    0       4     magic "SpA1"
    4       2     version
    6       2     frame width
    8       4     total strip width (frame width x frame count)
    12      4     height
    16      4     reserved
    20      4     frame count
    24      16    reserved

followed by ``height`` rows, each holding every frame's pixels for that row
side by side, 4 bytes RGBA per pixel.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass

MAGIC = b"SpA1"
HEADER_SIZE = 40
DEFAULT_VERSION = 31
BYTES_PER_PIXEL = 4


class SpriteFormatError(ValueError):
    pass


@dataclass(frozen=True)
class SpriteHeader:
    version: int
    frame_width: int
    total_width: int
    height: int
    frame_count: int

    @property
    def body_size(self) -> int:
        return self.total_width * self.height * BYTES_PER_PIXEL


@dataclass(frozen=True)
class Frame:
    """One frame's RGBA pixels, row-major."""

    width: int
    height: int
    data: bytes

    @classmethod
    def transparent(cls, width: int, height: int) -> "Frame":
        return cls(width, height, bytes(width * height * BYTES_PER_PIXEL))


def parse_header(buf: bytes) -> SpriteHeader:
    if len(buf) < HEADER_SIZE:
        raise SpriteFormatError(f"Sprite too short for header: {len(buf)} bytes")
    if buf[:4] != MAGIC:
        raise SpriteFormatError(f"Invalid sprite magic: {buf[:4]!r}")

    version, frame_width = struct.unpack_from("<HH", buf, 4)
    total_width, height = struct.unpack_from("<II", buf, 8)
    (frame_count,) = struct.unpack_from("<I", buf, 20)
    header = SpriteHeader(version, frame_width, total_width, height, frame_count)

    if frame_width * frame_count > total_width:
        raise SpriteFormatError(
            f"Frames overflow strip: {frame_count} x {frame_width} > {total_width}"
        )
    if len(buf) < HEADER_SIZE + header.body_size:
        raise SpriteFormatError(
            f"Sprite body truncated: have {len(buf) - HEADER_SIZE}, need {header.body_size} bytes"
        )
    return header


def extract_frame(buf: bytes, header: SpriteHeader, index: int) -> Frame:
    if not 0 <= index < header.frame_count:
        raise SpriteFormatError(f"Frame {index} out of range ({header.frame_count} frames)")

    row_bytes = header.frame_width * BYTES_PER_PIXEL
    stride = header.total_width * BYTES_PER_PIXEL
    start = HEADER_SIZE + index * row_bytes
    out = bytearray(row_bytes * header.height)
    for y in range(header.height):
        src = start + y * stride
        out[y * row_bytes : (y + 1) * row_bytes] = buf[src : src + row_bytes]
    return Frame(header.frame_width, header.height, bytes(out))


def decode_frames(buf: bytes) -> list[Frame]:
    header = parse_header(buf)
    return [extract_frame(buf, header, idx) for idx in range(header.frame_count)]


def encode_header(frame_width: int, height: int, frame_count: int, version: int = DEFAULT_VERSION) -> bytes:
    header = bytearray(HEADER_SIZE)
    header[0:4] = MAGIC
    struct.pack_into("<HH", header, 4, version, frame_width)
    struct.pack_into("<II", header, 8, frame_width * frame_count, height)
    struct.pack_into("<I", header, 20, frame_count)
    return bytes(header)


def encode_sprite(frames: list[Frame], version: int = DEFAULT_VERSION) -> bytes:
    """Interleave equal-size frames row by row behind a fresh header."""
    if not frames:
        raise SpriteFormatError("Cannot encode a sprite with no frames")
    width, height = frames[0].width, frames[0].height
    for frame in frames:
        if (frame.width, frame.height) != (width, height):
            raise SpriteFormatError(
                f"Frame size mismatch: {frame.width}x{frame.height} vs {width}x{height}"
            )
        if len(frame.data) != width * height * BYTES_PER_PIXEL:
            raise SpriteFormatError(f"Frame data is {len(frame.data)} bytes, expected {width * height * 4}")

    row_bytes = width * BYTES_PER_PIXEL
    body = bytearray()
    for y in range(height):
        for frame in frames:
            body += frame.data[y * row_bytes : (y + 1) * row_bytes]
    return encode_header(width, height, len(frames), version) + bytes(body)


def pad_frame(frame: Frame, width: int, height: int) -> Frame:
    """Place ``frame`` top-left on a transparent ``width`` x ``height`` canvas."""
    if frame.width == width and frame.height == height:
        return frame
    out = bytearray(width * height * BYTES_PER_PIXEL)
    copy_bytes = min(frame.width, width) * BYTES_PER_PIXEL
    src_row = frame.width * BYTES_PER_PIXEL
    dst_row = width * BYTES_PER_PIXEL
    for y in range(min(frame.height, height)):
        out[y * dst_row : y * dst_row + copy_bytes] = frame.data[y * src_row : y * src_row + copy_bytes]
    return Frame(width, height, bytes(out))


def encode_padded(frames: list[Frame], version: int = DEFAULT_VERSION) -> bytes:
    """Encode frames of differing sizes, padding each to the largest."""
    if not frames:
        raise SpriteFormatError("Cannot encode a sprite with no frames")
    width = max(f.width for f in frames)
    height = max(f.height for f in frames)
    return encode_sprite([pad_frame(f, width, height) for f in frames], version)
