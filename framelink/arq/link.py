"""
Link Context

The handles a protocol task needs on every step: the byte channel, the
clock and the protocol configuration. The scheduler owns one and passes it
to both tasks, so nothing reaches for module-level channel or clock state.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

from framelink.config import ProtocolConfig
from framelink.channel.byte_channel import ByteChannel, SimulatedChannel
from .timer import LogicalClock


class ResultCode(IntEnum):
    """Terminal results reported by the transmitter and receiver."""
    SUCCESS = 0
    ERROR = -1
    TIMEOUT = -2
    INVALID_PARAM = -3


@dataclass
class Link:
    """
    Channel, clock and configuration shared by the protocol tasks.

    Attributes:
        channel: Byte channel carrying frames and acknowledgments
        clock: Any object with a now() -> int milliseconds method
        config: Protocol parameters
    """
    channel: ByteChannel
    clock: object
    config: ProtocolConfig = field(default_factory=ProtocolConfig)

    def now(self) -> int:
        """Get current clock time in milliseconds."""
        return self.clock.now()

    @classmethod
    def simulated(cls, config: Optional[ProtocolConfig] = None) -> 'Link':
        """
        Create a link over an in-memory channel and a logical clock.

        Args:
            config: Protocol parameters (defaults if None)

        Returns:
            Link ready for tests and simulation
        """
        return cls(
            channel=SimulatedChannel(),
            clock=LogicalClock(),
            config=config or ProtocolConfig()
        )
