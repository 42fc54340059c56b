"""
Reliable Receiver

This module implements the receiving task: an endless sequence of frame
acquisitions, each pulling bytes from the channel into the frame parser
until the parser reports a complete, invalid or zero-length frame, then
answering with ACK or NAK.

The task suspends when the channel has no byte to offer and yields once
after answering a completed frame, so at most one frame completes per
scheduler turn.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from framelink.config import ACK_BYTE, NAK_BYTE
from framelink.utils.logger import SimulationLogger, get_logger
from .link import Link, ResultCode
from .parser import ParserContext, ParseOutcome, feed


class RxResumePoint(Enum):
    """Receiver resume points."""
    START_ACQUISITION = 0
    RECEIVING = 1
    YIELDED = 2


@dataclass
class ReceptionSession:
    """
    State of the receiving endpoint.

    Attributes:
        parser: Frame parser context
        resume: Where the next step continues
        message_received: Set when the last completed frame was valid
        data: Payload of the last valid frame
        result: Result of the last completed frame
    """
    parser: ParserContext = field(default_factory=ParserContext)
    resume: RxResumePoint = RxResumePoint.START_ACQUISITION
    message_received: bool = False
    data: bytes = b''
    result: Optional[ResultCode] = None

    @property
    def length(self) -> int:
        return len(self.data)


class ReliableReceiver:
    """
    Receiving task answering every frame with ACK or NAK.

    Attributes:
        session: Reception session owned by this task
    """

    def __init__(self, logger: Optional[SimulationLogger] = None):
        """
        Initialize the receiver.

        Args:
            logger: Logger for protocol events (global logger if None)
        """
        self.logger = logger or get_logger()
        self.session = ReceptionSession()

        # Statistics
        self.frames_accepted = 0
        self.checksum_errors = 0
        self.length_errors = 0
        self.acks_sent = 0
        self.naks_sent = 0

    @property
    def message_received(self) -> bool:
        return self.session.message_received

    @property
    def received_data(self) -> bytes:
        return self.session.data

    @property
    def received_size(self) -> int:
        return self.session.length

    @property
    def result(self) -> Optional[ResultCode]:
        return self.session.result

    def step(self, link: Link) -> RxResumePoint:
        """
        Resume the task for one scheduler turn.

        Consumes bytes until the channel runs dry or a frame completes.

        Args:
            link: Channel and clock to use

        Returns:
            Resume point after the step
        """
        session = self.session

        if session.resume == RxResumePoint.YIELDED:
            session.resume = RxResumePoint.START_ACQUISITION

        while True:
            if session.resume == RxResumePoint.START_ACQUISITION:
                session.parser.reset()
                session.resume = RxResumePoint.RECEIVING

            byte = link.channel.try_receive_byte()
            if byte is None:
                return session.resume

            outcome = feed(session.parser, byte)

            if outcome == ParseOutcome.WAITING:
                continue

            if outcome == ParseOutcome.LENGTH_INVALID:
                self.length_errors += 1
                self.logger.frame_rejected("zero length")
                self._send(link, NAK_BYTE)
                session.resume = RxResumePoint.START_ACQUISITION
                continue

            if outcome == ParseOutcome.FRAME_READY:
                self.frames_accepted += 1
                self.logger.frame_accepted(session.parser.count)
                self._send(link, ACK_BYTE)
                session.data = session.parser.payload
                session.result = ResultCode.SUCCESS
                session.message_received = True
            else:
                self.checksum_errors += 1
                self.logger.frame_rejected("checksum or end marker")
                self._send(link, NAK_BYTE)
                session.result = ResultCode.ERROR
                session.message_received = False

            session.resume = RxResumePoint.YIELDED
            return session.resume

    def take_message(self) -> Optional[bytes]:
        """
        Consume the last valid payload.

        Returns:
            Payload if a new message arrived since the last call, else None
        """
        if not self.session.message_received:
            return None
        self.session.message_received = False
        return self.session.data

    def _send(self, link: Link, ack: int):
        link.channel.send_ack(ack)
        if ack == ACK_BYTE:
            self.acks_sent += 1
        else:
            self.naks_sent += 1

    def get_statistics(self) -> dict:
        """Get receiver statistics."""
        return {
            'frames_accepted': self.frames_accepted,
            'checksum_errors': self.checksum_errors,
            'length_errors': self.length_errors,
            'acks_sent': self.acks_sent,
            'naks_sent': self.naks_sent,
        }

    def reset(self):
        """Reset receiver to initial state."""
        self.session = ReceptionSession()
        self.frames_accepted = 0
        self.checksum_errors = 0
        self.length_errors = 0
        self.acks_sent = 0
        self.naks_sent = 0
