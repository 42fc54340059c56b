"""
Channel package - Byte channel contract and wire models.

Contains implementations for:
- In-memory simulated byte channel with acknowledgment slot
- Gilbert-Elliot burst error channel model
"""

from .byte_channel import ByteChannel, SimulatedChannel
from .gilbert_elliot import GilbertElliottChannel, ChannelState

__all__ = [
    'ByteChannel',
    'SimulatedChannel',
    'GilbertElliottChannel',
    'ChannelState'
]
