"""
Byte Channel Contract and In-Memory Simulation

The protocol core only needs four operations from a channel: send framed
bytes, pull one byte, send an acknowledgment byte, and poll for one. This
module states that contract and provides the in-memory channel used by the
simulator and the tests.
"""

from collections import deque
from typing import Optional

from .gilbert_elliot import GilbertElliottChannel


class ByteChannel:
    """Interface between the protocol tasks and a transport."""

    def send(self, data: bytes):
        raise NotImplementedError

    def try_receive_byte(self) -> Optional[int]:
        raise NotImplementedError

    def send_ack(self, ack: int):
        raise NotImplementedError

    def try_receive_ack(self) -> Optional[int]:
        raise NotImplementedError


class SimulatedChannel(ByteChannel):
    """
    In-memory byte channel with loss and corruption controls.

    Data bytes travel through a FIFO. Acknowledgments use a single slot:
    a new ACK/NAK overwrites an unread one, and reading clears it.

    Attributes:
        simulate_loss: Drop every data frame while set
        forward_model: Optional error model applied to data frames
        reverse_model: Optional error model applied to ack bytes
    """

    def __init__(
        self,
        forward_model: Optional[GilbertElliottChannel] = None,
        reverse_model: Optional[GilbertElliottChannel] = None
    ):
        self.forward_model = forward_model
        self.reverse_model = reverse_model
        self.simulate_loss = False

        self.rx_bytes: deque = deque()
        self.ack_slot: Optional[int] = None

        # Statistics
        self.frames_sent = 0
        self.frames_dropped = 0
        self.frames_corrupted = 0
        self.bytes_delivered = 0
        self.acks_sent = 0
        self.acks_overwritten = 0
        self.acks_corrupted = 0

    def send(self, data: bytes):
        """
        Put a frame on the wire.

        Args:
            data: Encoded frame bytes
        """
        self.frames_sent += 1

        if self.simulate_loss:
            self.frames_dropped += 1
            return

        if self.forward_model is not None:
            data, bit_errors = self.forward_model.transmit(bytes(data))
            if bit_errors:
                self.frames_corrupted += 1

        self.rx_bytes.extend(data)

    def inject(self, data: bytes):
        """Place raw bytes on the wire, bypassing loss and corruption."""
        self.rx_bytes.extend(data)

    def try_receive_byte(self) -> Optional[int]:
        """
        Pull the next byte from the wire.

        Returns:
            Byte value, or None when nothing is pending
        """
        if not self.rx_bytes:
            return None
        self.bytes_delivered += 1
        return self.rx_bytes.popleft()

    def send_ack(self, ack: int):
        """
        Signal an acknowledgment byte to the transmitter.

        Args:
            ack: ACK or NAK byte
        """
        self.acks_sent += 1

        if self.reverse_model is not None:
            corrupted, _ = self.reverse_model.transmit(bytes([ack]))
            if corrupted[0] != ack:
                self.acks_corrupted += 1
            ack = corrupted[0]

        if self.ack_slot is not None:
            self.acks_overwritten += 1
        self.ack_slot = ack

    def try_receive_ack(self) -> Optional[int]:
        """
        Poll for an acknowledgment byte, consuming it.

        Returns:
            Ack byte, or None when no acknowledgment is pending
        """
        ack = self.ack_slot
        self.ack_slot = None
        return ack

    @property
    def pending_bytes(self) -> int:
        """Get number of unread data bytes."""
        return len(self.rx_bytes)

    def get_statistics(self) -> dict:
        """Get channel statistics."""
        return {
            'frames_sent': self.frames_sent,
            'frames_dropped': self.frames_dropped,
            'frames_corrupted': self.frames_corrupted,
            'bytes_delivered': self.bytes_delivered,
            'acks_sent': self.acks_sent,
            'acks_overwritten': self.acks_overwritten,
            'acks_corrupted': self.acks_corrupted,
        }

    def reset(self):
        """Clear pending data, the ack slot and statistics."""
        self.rx_bytes.clear()
        self.ack_slot = None
        self.simulate_loss = False
        self.frames_sent = 0
        self.frames_dropped = 0
        self.frames_corrupted = 0
        self.bytes_delivered = 0
        self.acks_sent = 0
        self.acks_overwritten = 0
        self.acks_corrupted = 0
