"""
Reliable Transmitter

This module implements the sending task of the protocol: it frames a
payload, puts it on the channel and holds it until the receiver
acknowledges it, retransmitting on NAK or timeout up to a fixed number of
attempts.

The task is resumable. Its position is kept as a TxState inside the
session, and every call to step() dispatches on that state, does whatever
work is possible without waiting, and returns.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from framelink.config import ACK_BYTE, NAK_BYTE, ProtocolConfig
from framelink.utils.logger import SimulationLogger, get_logger
from .frame import FrameError, InvalidParamError, encode_into
from .link import Link, ResultCode
from .timer import AckTimer


class TxState(Enum):
    """
    Transmitter states.

    SENDING and RETRYING only last while the frame is being put on the
    wire, so step() resumes from AWAITING_ACK or a terminal state.
    """
    IDLE = 0
    SENDING = 1
    AWAITING_ACK = 2
    RETRYING = 3
    SUCCEEDED = 4
    FAILED = 5


@dataclass
class TransmissionSession:
    """
    State of one send request.

    Attributes:
        payload: Payload being sent
        frame: Encoded frame bytes (empty if encoding failed)
        retry_count: Retries performed so far
        complete: Set exactly once when the session ends
        result: Terminal result (None while in progress)
        state: Resume point of the transmitter
        timer: Acknowledgment timer
        transmissions: Number of times the frame went on the wire
        started_at: Clock time of the start request (ms)
        completed_at: Clock time of completion (ms)
    """
    payload: bytes
    frame: bytes = b''
    retry_count: int = 0
    complete: bool = False
    result: Optional[ResultCode] = None
    state: TxState = TxState.IDLE
    timer: AckTimer = field(default_factory=AckTimer)
    transmissions: int = 0
    started_at: int = 0
    completed_at: Optional[int] = None

    @property
    def duration(self) -> Optional[int]:
        """Get elapsed time from start to completion (ms)."""
        if self.completed_at is None:
            return None
        return self.completed_at - self.started_at


class ReliableTransmitter:
    """
    Stop-and-wait transmitter with bounded retries.

    Attributes:
        config: Protocol parameters
        session: Current transmission session (None before the first start)
    """

    def __init__(
        self,
        config: Optional[ProtocolConfig] = None,
        logger: Optional[SimulationLogger] = None
    ):
        """
        Initialize the transmitter.

        Args:
            config: Protocol parameters (defaults if None)
            logger: Logger for protocol events (global logger if None)
        """
        self.config = config or ProtocolConfig()
        self.logger = logger or get_logger()
        self.session: Optional[TransmissionSession] = None

        # Statistics
        self.frames_sent = 0
        self.retransmissions = 0
        self.acks_received = 0
        self.naks_received = 0
        self.unknown_acks = 0
        self.timeouts = 0
        self.transmissions_succeeded = 0
        self.transmissions_failed = 0

    @property
    def state(self) -> TxState:
        return self.session.state if self.session else TxState.IDLE

    @property
    def is_complete(self) -> bool:
        return self.session is not None and self.session.complete

    @property
    def result(self) -> Optional[ResultCode]:
        return self.session.result if self.session else None

    @property
    def retry_count(self) -> int:
        return self.session.retry_count if self.session else 0

    def start(self, payload: bytes, link: Link) -> TransmissionSession:
        """
        Begin sending a payload, superseding any previous session.

        Args:
            payload: Bytes to send (1 to max_payload_size)
            link: Channel and clock to use

        Returns:
            The new session

        Raises:
            InvalidParamError: payload is None, empty or too long
        """
        if payload is None or len(payload) == 0:
            raise InvalidParamError("payload must not be empty")
        if len(payload) > self.config.max_payload_size:
            raise InvalidParamError(
                f"payload exceeds {self.config.max_payload_size} bytes"
            )

        session = TransmissionSession(payload=bytes(payload), started_at=link.now())
        self.session = session

        buffer = bytearray(self.config.frame_buffer_size)
        try:
            size = encode_into(session.payload, buffer)
        except FrameError as e:
            self.logger.error(f"Cannot encode frame: {e}", "TX")
            self._complete(session, ResultCode.ERROR, link)
            return session

        session.frame = bytes(buffer[:size])
        session.state = TxState.SENDING
        self._transmit(session, link)
        return session

    def step(self, link: Link) -> TxState:
        """
        Resume the task for one scheduler turn.

        Args:
            link: Channel and clock to use

        Returns:
            Resume point after the step
        """
        session = self.session
        if session is None or session.complete:
            return self.state

        if session.state == TxState.AWAITING_ACK:
            self._await_ack(session, link)

        return session.state

    def abandon(self):
        """Drop the current session without waiting for its outcome."""
        if self.session is not None:
            self.session.timer.stop()
            self.session.retry_count = 0
            self.session.complete = False
            self.session.state = TxState.IDLE
        self.session = None

    def _transmit(self, session: TransmissionSession, link: Link):
        """Put the frame on the wire and arm the timer."""
        link.channel.send(session.frame)
        session.transmissions += 1
        self.frames_sent += 1
        if session.transmissions > 1:
            self.retransmissions += 1

        session.timer.start(link.now(), self.config.ack_timeout_ms)
        session.state = TxState.AWAITING_ACK
        self.logger.frame_sent(len(session.frame), session.transmissions)

    def _await_ack(self, session: TransmissionSession, link: Link):
        """Check for an acknowledgment, then for a timeout."""
        ack = link.channel.try_receive_ack()

        if ack == ACK_BYTE:
            self.acks_received += 1
            self.logger.ack_received()
            self._complete(session, ResultCode.SUCCESS, link)
            return

        if ack == NAK_BYTE:
            self.naks_received += 1
            session.retry_count += 1
            self.logger.nak_received(session.retry_count, self.config.max_retries)
            self._retry_or_fail(session, link)
            return

        if ack is not None:
            self.unknown_acks += 1
            self.logger.warning(f"Ignoring unexpected ack byte 0x{ack:02X}", "ACK")

        if session.timer.check_expired(link.now()):
            self.timeouts += 1
            session.retry_count += 1
            self.logger.timeout(session.retry_count, self.config.max_retries)
            self._retry_or_fail(session, link)

    def _retry_or_fail(self, session: TransmissionSession, link: Link):
        if session.retry_count < self.config.max_retries:
            session.state = TxState.RETRYING
            self.logger.retransmit(session.retry_count)
            self._transmit(session, link)
        else:
            self._complete(session, ResultCode.TIMEOUT, link)

    def _complete(self, session: TransmissionSession, result: ResultCode, link: Link):
        session.timer.stop()
        session.result = result
        session.complete = True
        session.completed_at = link.now()

        if result == ResultCode.SUCCESS:
            session.state = TxState.SUCCEEDED
            self.transmissions_succeeded += 1
        else:
            session.state = TxState.FAILED
            self.transmissions_failed += 1

        self.logger.transmission_complete(result.name, session.retry_count)

    def get_statistics(self) -> dict:
        """Get transmitter statistics."""
        return {
            'frames_sent': self.frames_sent,
            'retransmissions': self.retransmissions,
            'acks_received': self.acks_received,
            'naks_received': self.naks_received,
            'unknown_acks': self.unknown_acks,
            'timeouts': self.timeouts,
            'transmissions_succeeded': self.transmissions_succeeded,
            'transmissions_failed': self.transmissions_failed,
        }

    def reset(self):
        """Reset transmitter to initial state."""
        self.abandon()
        self.frames_sent = 0
        self.retransmissions = 0
        self.acks_received = 0
        self.naks_received = 0
        self.unknown_acks = 0
        self.timeouts = 0
        self.transmissions_succeeded = 0
        self.transmissions_failed = 0
