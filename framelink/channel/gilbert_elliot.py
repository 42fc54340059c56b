"""
Gilbert-Elliott Burst Error Channel Model

Two-state Markov chain that corrupts bytes on the simulated wire. The chain
steps once per bit: in the Good state bits flip with a small probability,
in the Bad state with a large one, so errors arrive in bursts that can
straddle byte and frame boundaries.
"""

import numpy as np
from enum import Enum
from typing import Tuple, Optional

from framelink.config import (
    GOOD_STATE_BER, BAD_STATE_BER,
    P_GOOD_TO_BAD, P_BAD_TO_GOOD
)


class ChannelState(Enum):
    """Channel state enumeration."""
    GOOD = 0
    BAD = 1


class GilbertElliottChannel:
    """
    Per-bit Gilbert-Elliott error source for byte streams.

    Attributes:
        pg: Bit error rate in Good state
        pb: Bit error rate in Bad state
        p_gb: Good to Bad probability per bit
        p_bg: Bad to Good probability per bit
        state: Current channel state
        rng: numpy random generator
    """

    def __init__(
        self,
        pg: float = GOOD_STATE_BER,
        pb: float = BAD_STATE_BER,
        p_gb: float = P_GOOD_TO_BAD,
        p_bg: float = P_BAD_TO_GOOD,
        seed: Optional[int] = None
    ):
        self.pg = pg
        self.pb = pb
        self.p_gb = p_gb
        self.p_bg = p_bg

        self.rng = np.random.default_rng(seed)
        self.state = self._draw_initial_state()

        self.bits_seen = 0
        self.bit_errors = 0
        self.bytes_corrupted = 0
        self.bits_in_bad = 0
        self.bursts_entered = 0

    def _draw_initial_state(self) -> ChannelState:
        pi_good, _ = self.get_steady_state_probabilities()
        return ChannelState.GOOD if self.rng.random() < pi_good else ChannelState.BAD

    def get_steady_state_probabilities(self) -> Tuple[float, float]:
        """
        Get the long-run share of bits spent in each state.

        Returns:
            Tuple of (pi_good, pi_bad)
        """
        total = self.p_gb + self.p_bg
        if total == 0:
            return 1.0, 0.0
        return self.p_bg / total, self.p_gb / total

    def get_average_ber(self) -> float:
        """Get the steady-state bit error rate."""
        pi_good, pi_bad = self.get_steady_state_probabilities()
        return pi_good * self.pg + pi_bad * self.pb

    def transition_state(self):
        """Advance the chain by one bit."""
        if self.state == ChannelState.GOOD:
            if self.rng.random() < self.p_gb:
                self.state = ChannelState.BAD
                self.bursts_entered += 1
        else:
            self.bits_in_bad += 1
            if self.rng.random() < self.p_bg:
                self.state = ChannelState.GOOD

    def error_mask(self, size_bytes: int) -> np.ndarray:
        """
        Draw the bits to flip for a block of bytes, MSB first.

        Args:
            size_bytes: Number of bytes to cover

        Returns:
            uint8 array, one mask byte per data byte
        """
        bits = np.zeros(size_bytes * 8, dtype=np.uint8)
        for i in range(bits.size):
            ber = self.pg if self.state == ChannelState.GOOD else self.pb
            if self.rng.random() < ber:
                bits[i] = 1
            self.transition_state()

        self.bits_seen += bits.size
        self.bit_errors += int(bits.sum())
        return np.packbits(bits)

    def transmit(self, data: bytes) -> Tuple[bytes, int]:
        """
        Pass bytes through the channel, flipping erroneous bits.

        Args:
            data: Bytes entering the channel

        Returns:
            Tuple of (bytes leaving the channel, number of flipped bits)
        """
        if not data:
            return data, 0

        mask = self.error_mask(len(data))
        flipped = int(np.unpackbits(mask).sum())
        if flipped == 0:
            return data, 0

        self.bytes_corrupted += int(np.count_nonzero(mask))
        return (np.frombuffer(data, dtype=np.uint8) ^ mask).tobytes(), flipped

    def get_statistics(self) -> dict:
        """Get channel statistics."""
        return {
            'total_bits': self.bits_seen,
            'bit_errors': self.bit_errors,
            'bytes_corrupted': self.bytes_corrupted,
            'observed_ber': self.bit_errors / self.bits_seen if self.bits_seen else 0,
            'bursts_entered': self.bursts_entered,
            'fraction_in_bad': self.bits_in_bad / self.bits_seen if self.bits_seen else 0,
            'theoretical_avg_ber': self.get_average_ber()
        }

    def reset(self, seed: Optional[int] = None):
        """
        Reset counters and redraw the starting state.

        Args:
            seed: New random seed (optional)
        """
        if seed is not None:
            self.rng = np.random.default_rng(seed)
        self.state = self._draw_initial_state()
        self.bits_seen = 0
        self.bit_errors = 0
        self.bytes_corrupted = 0
        self.bits_in_bad = 0
        self.bursts_entered = 0


if __name__ == "__main__":
    print("=" * 60)
    print("GILBERT-ELLIOT CHANNEL MODEL TEST")
    print("=" * 60)

    channel = GilbertElliottChannel(p_gb=0.01, seed=42)
    pi_good, pi_bad = channel.get_steady_state_probabilities()
    print(f"\n  pi(Good): {pi_good:.4f}  pi(Bad): {pi_bad:.4f}")
    print(f"  Theoretical Avg BER: {channel.get_average_ber():.2e}")

    frame = bytes(range(64))
    corrupted = sum(channel.transmit(frame)[1] > 0 for _ in range(500))

    stats = channel.get_statistics()
    print(f"\n  Observed BER: {stats['observed_ber']:.2e}")
    print(f"  Corrupted frames: {corrupted}/500")
    print(f"  Bursts entered: {stats['bursts_entered']}")
