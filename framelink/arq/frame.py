"""
Frame Encoding for the framelink Protocol

This module defines the wire frame layout, the additive checksum and the
encoder, together with the exceptions raised on caller misuse.

Frame Layout:

    +-------+--------+-------------------+----------+-------+
    | START | LENGTH |      PAYLOAD      | CHECKSUM |  END  |
    | 0x02  | 1 byte | LENGTH bytes      |  1 byte  | 0x03  |
    +-------+--------+-------------------+----------+-------+

- LENGTH: 1..255, zero is invalid
- CHECKSUM: sum of payload bytes truncated to 8 bits
"""

from typing import Optional

from framelink.config import (
    START_BYTE, END_BYTE, FRAME_OVERHEAD, ENCODE_BUFFER_OVERHEAD, MAX_FRAME_PAYLOAD
)


class FrameError(ValueError):
    """Base class for framing errors."""


class InvalidParamError(FrameError):
    """Raised when a caller passes a missing or out-of-range argument."""


class InvalidLengthError(FrameError):
    """Raised when a payload length cannot be expressed in the length field."""


class BufferTooSmallError(FrameError):
    """Raised when the output buffer cannot hold the encoded frame."""


class ChecksumError(FrameError):
    """Raised when a frame fails checksum or end marker validation."""


class LengthError(FrameError):
    """Raised when a frame carries a zero length field."""


class IncompleteFrameError(FrameError):
    """Raised when data ends before a frame is complete."""


def compute_checksum(payload: Optional[bytes]) -> int:
    """
    Calculate the 8-bit additive checksum of a payload.

    Args:
        payload: Payload bytes (None or empty yields 0)

    Returns:
        Sum of all bytes modulo 256
    """
    if not payload:
        return 0
    return sum(payload) & 0xFF


def encoded_size(payload_length: int) -> int:
    """Get the number of bytes a payload occupies once framed."""
    return payload_length + FRAME_OVERHEAD


def required_buffer_size(payload_length: int) -> int:
    """Get the smallest output buffer encode_into accepts for a payload."""
    return payload_length + ENCODE_BUFFER_OVERHEAD


def _validate_payload(payload) -> None:
    if payload is None:
        raise InvalidParamError("payload must not be None")
    if len(payload) == 0 or len(payload) > MAX_FRAME_PAYLOAD:
        raise InvalidLengthError(
            f"payload length must be 1-{MAX_FRAME_PAYLOAD}, got {len(payload)}"
        )


def encode_into(payload: bytes, buffer: bytearray) -> int:
    """
    Encode a payload into a caller-supplied buffer.

    Nothing is written unless the whole frame fits.

    Args:
        payload: Payload bytes (1-255)
        buffer: Writable output buffer

    Returns:
        Number of bytes written

    Raises:
        InvalidParamError: payload or buffer is None
        InvalidLengthError: payload is empty or longer than 255 bytes
        BufferTooSmallError: buffer is shorter than 5 + payload length
    """
    if buffer is None:
        raise InvalidParamError("buffer must not be None")
    _validate_payload(payload)

    length = len(payload)
    required = required_buffer_size(length)
    if len(buffer) < required:
        raise BufferTooSmallError(
            f"frame needs a {required} byte buffer, buffer holds {len(buffer)}"
        )

    buffer[0] = START_BYTE
    buffer[1] = length
    buffer[2:2 + length] = payload
    buffer[2 + length] = compute_checksum(payload)
    buffer[3 + length] = END_BYTE
    return encoded_size(length)


def encode_frame(payload: bytes) -> bytes:
    """
    Encode a payload into a new frame.

    Args:
        payload: Payload bytes (1-255)

    Returns:
        Encoded frame bytes
    """
    _validate_payload(payload)
    buffer = bytearray(required_buffer_size(len(payload)))
    written = encode_into(payload, buffer)
    return bytes(buffer[:written])


def describe_frame(frame: bytes) -> str:
    """Render frame bytes as a spaced hex string for logs."""
    return frame.hex(" ") if frame else "(empty)"


if __name__ == "__main__":
    print("=" * 60)
    print("FRAME ENCODER TEST")
    print("=" * 60)

    payload = bytes([0x10, 0x20])
    frame = encode_frame(payload)
    print(f"\nPayload: {describe_frame(payload)}")
    print(f"  Checksum: 0x{compute_checksum(payload):02X}")
    print(f"  Frame: {describe_frame(frame)}")
    print(f"  Frame size: {len(frame)} bytes")

    small = bytearray(4)
    try:
        encode_into(payload, small)
    except BufferTooSmallError as e:
        print(f"\nSmall buffer rejected: {e}")
