"""
Cooperative Scheduler

One tick resumes the transmitter, then the receiver, each for a single
step. The order is fixed: within a tick the receiver always sees what the
transmitter did first.
"""

from typing import Optional

from framelink.config import ProtocolConfig
from .link import Link
from .receiver import ReliableReceiver
from .sender import ReliableTransmitter


class Scheduler:
    """
    Round-robin driver for the two protocol tasks.

    Attributes:
        transmitter: Sending task
        receiver: Receiving task
        link: Channel and clock threaded through both tasks
        ticks: Number of ticks run
    """

    def __init__(
        self,
        transmitter: ReliableTransmitter,
        receiver: ReliableReceiver,
        link: Link
    ):
        self.transmitter = transmitter
        self.receiver = receiver
        self.link = link
        self.ticks = 0

    @classmethod
    def simulated(cls, config: Optional[ProtocolConfig] = None, logger=None) -> 'Scheduler':
        """Build both tasks over an in-memory link."""
        link = Link.simulated(config)
        return cls(
            ReliableTransmitter(link.config, logger=logger),
            ReliableReceiver(logger=logger),
            link
        )

    def send(self, payload: bytes):
        """Start a new transmission on this scheduler's link."""
        return self.transmitter.start(payload, self.link)

    def tick(self):
        """Advance both tasks by one step, transmitter first."""
        self.transmitter.step(self.link)
        self.receiver.step(self.link)
        self.ticks += 1
