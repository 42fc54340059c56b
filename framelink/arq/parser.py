"""
Byte-Driven Frame Parser

This module implements the receive half of the frame codec: a five-state
machine fed one byte at a time. The parser never buffers beyond the maximum
payload size and resynchronizes on its own after any malformed input.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List

from framelink.config import START_BYTE, END_BYTE, PAYLOAD_BUFFER_CAPACITY
from .frame import (
    InvalidParamError, ChecksumError, LengthError, IncompleteFrameError
)


class ParserState(Enum):
    """Parser state enumeration."""
    AWAITING_START = 0
    AWAITING_LENGTH = 1
    AWAITING_PAYLOAD = 2
    AWAITING_CHECKSUM = 3
    AWAITING_END = 4


class ParseOutcome(Enum):
    """Result of feeding one byte to the parser."""
    WAITING = 0
    FRAME_READY = 1
    CHECKSUM_INVALID = 2
    LENGTH_INVALID = 3

    @property
    def is_terminal(self) -> bool:
        """Check if the outcome ends an acquisition."""
        return self is not ParseOutcome.WAITING


@dataclass
class ParserContext:
    """
    State carried by the parser between bytes.

    Attributes:
        state: Active parser state
        expected_length: Payload length announced by the length byte
        buffer: Payload accumulator (fixed capacity)
        count: Number of payload bytes accumulated
        running_checksum: Checksum of the bytes accumulated so far
        received_checksum: Checksum byte read from the wire
        frame_ready: Set once per validated frame, cleared on reset
    """
    state: ParserState = ParserState.AWAITING_START
    expected_length: int = 0
    buffer: bytearray = field(
        default_factory=lambda: bytearray(PAYLOAD_BUFFER_CAPACITY)
    )
    count: int = 0
    running_checksum: int = 0
    received_checksum: int = 0
    frame_ready: bool = False

    def reset(self):
        """Return to hunting for a start marker."""
        self.state = ParserState.AWAITING_START
        self.count = 0
        self.running_checksum = 0
        self.frame_ready = False

    @property
    def payload(self) -> bytes:
        """Get the payload accumulated so far."""
        return bytes(self.buffer[:self.count])


def feed(ctx: ParserContext, byte: int) -> ParseOutcome:
    """
    Advance the parser by one input byte.

    Args:
        ctx: Parser context, mutated in place
        byte: Next byte from the wire (0-255)

    Returns:
        Outcome of consuming the byte
    """
    if not 0 <= byte <= 0xFF:
        raise InvalidParamError(f"byte must be 0-255, got {byte}")

    state = ctx.state

    if state is ParserState.AWAITING_START:
        if byte == START_BYTE:
            ctx.count = 0
            ctx.running_checksum = 0
            ctx.frame_ready = False
            ctx.state = ParserState.AWAITING_LENGTH
        return ParseOutcome.WAITING

    if state is ParserState.AWAITING_LENGTH:
        if byte == 0:
            ctx.state = ParserState.AWAITING_START
            return ParseOutcome.LENGTH_INVALID
        ctx.expected_length = byte
        ctx.state = ParserState.AWAITING_PAYLOAD
        return ParseOutcome.WAITING

    if state is ParserState.AWAITING_PAYLOAD:
        ctx.buffer[ctx.count] = byte
        ctx.count += 1
        ctx.running_checksum = (ctx.running_checksum + byte) & 0xFF
        if ctx.count >= ctx.expected_length:
            ctx.state = ParserState.AWAITING_CHECKSUM
        return ParseOutcome.WAITING

    if state is ParserState.AWAITING_CHECKSUM:
        ctx.received_checksum = byte
        ctx.state = ParserState.AWAITING_END
        return ParseOutcome.WAITING

    if state is ParserState.AWAITING_END:
        ctx.state = ParserState.AWAITING_START
        if byte == END_BYTE and ctx.running_checksum == ctx.received_checksum:
            ctx.frame_ready = True
            return ParseOutcome.FRAME_READY
        return ParseOutcome.CHECKSUM_INVALID

    raise AssertionError(f"unhandled parser state {state}")


class FrameParser:
    """
    Streaming parser owning its own context.

    Also keeps simple counters of what it has seen on the wire.
    """

    def __init__(self):
        self.ctx = ParserContext()
        self.frames_ready = 0
        self.checksum_errors = 0
        self.length_errors = 0

    @property
    def state(self) -> ParserState:
        return self.ctx.state

    @property
    def payload(self) -> bytes:
        return self.ctx.payload

    def feed(self, byte: int) -> ParseOutcome:
        outcome = feed(self.ctx, byte)
        if outcome is ParseOutcome.FRAME_READY:
            self.frames_ready += 1
        elif outcome is ParseOutcome.CHECKSUM_INVALID:
            self.checksum_errors += 1
        elif outcome is ParseOutcome.LENGTH_INVALID:
            self.length_errors += 1
        return outcome

    def feed_bytes(self, data: bytes) -> List[bytes]:
        """
        Feed a chunk of bytes and collect every validated payload.

        Args:
            data: Raw bytes from the wire

        Returns:
            Payloads of the frames completed within the chunk
        """
        payloads = []
        for byte in data:
            if self.feed(byte) is ParseOutcome.FRAME_READY:
                payloads.append(self.ctx.payload)
        return payloads

    def reset(self):
        self.ctx.reset()


def decode_frame(data: bytes) -> bytes:
    """
    Decode the first frame found in a complete buffer.

    Bytes before the start marker are skipped.

    Args:
        data: Buffer holding at least one whole frame

    Returns:
        Payload of the frame

    Raises:
        ChecksumError: checksum mismatch or bad end marker
        LengthError: zero length field
        IncompleteFrameError: data ended before the frame did
    """
    if data is None:
        raise InvalidParamError("data must not be None")

    ctx = ParserContext()
    for byte in data:
        outcome = feed(ctx, byte)
        if outcome is ParseOutcome.FRAME_READY:
            return ctx.payload
        if outcome is ParseOutcome.CHECKSUM_INVALID:
            raise ChecksumError("checksum mismatch or missing end marker")
        if outcome is ParseOutcome.LENGTH_INVALID:
            raise LengthError("zero length field")

    raise IncompleteFrameError(f"data ended in state {ctx.state.name}")


if __name__ == "__main__":
    from .frame import encode_frame

    print("=" * 60)
    print("FRAME PARSER TEST")
    print("=" * 60)

    parser = FrameParser()
    wire = b"\xff\x00" + encode_frame(b"\x10\x20") + b"\x02\x00"
    for b in wire:
        outcome = parser.feed(b)
        print(f"  byte 0x{b:02X} -> {outcome.name:16s} state={parser.state.name}")

    print(f"\nFrames ready: {parser.frames_ready}")
    print(f"Length errors: {parser.length_errors}")
