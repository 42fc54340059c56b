"""
ARQ package - Framing and stop-and-wait reliability components.

Contains implementations for:
- Frame checksum and encoding
- Byte-driven frame parser
- Acknowledgment timer and clocks
- Reliable transmitter and receiver tasks
- Cooperative scheduler
"""

from .frame import (
    FrameError, InvalidParamError, InvalidLengthError, BufferTooSmallError,
    ChecksumError, LengthError, IncompleteFrameError,
    compute_checksum, encode_frame, encode_into, encoded_size, required_buffer_size
)
from .parser import (
    ParserState, ParseOutcome, ParserContext, FrameParser, feed, decode_frame
)
from .timer import AckTimer, TimerState, LogicalClock, MonotonicClock
from .link import Link, ResultCode
from .sender import ReliableTransmitter, TransmissionSession, TxState
from .receiver import ReliableReceiver, ReceptionSession, RxResumePoint
from .scheduler import Scheduler

__all__ = [
    'FrameError',
    'InvalidParamError',
    'InvalidLengthError',
    'BufferTooSmallError',
    'ChecksumError',
    'LengthError',
    'IncompleteFrameError',
    'compute_checksum',
    'encode_frame',
    'encode_into',
    'encoded_size',
    'required_buffer_size',
    'ParserState',
    'ParseOutcome',
    'ParserContext',
    'FrameParser',
    'feed',
    'decode_frame',
    'AckTimer',
    'TimerState',
    'LogicalClock',
    'MonotonicClock',
    'Link',
    'ResultCode',
    'ReliableTransmitter',
    'TransmissionSession',
    'TxState',
    'ReliableReceiver',
    'ReceptionSession',
    'RxResumePoint',
    'Scheduler'
]
