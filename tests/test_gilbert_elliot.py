"""
Unit tests for the Gilbert-Elliot channel model.
"""

import numpy as np
import pytest

from framelink.channel.gilbert_elliot import (
    GilbertElliottChannel, ChannelState
)


class TestGilbertElliottChannel:
    """Tests for Gilbert-Elliot channel model."""

    def test_initialization(self):
        """Test channel initialization with default parameters."""
        channel = GilbertElliottChannel(seed=42)

        assert channel.pg == 1e-6
        assert channel.pb == 5e-3
        assert channel.p_gb == 0.002
        assert channel.p_bg == 0.05
        assert channel.state in [ChannelState.GOOD, ChannelState.BAD]

    def test_steady_state_probabilities(self):
        """Test steady-state probability calculation."""
        channel = GilbertElliottChannel()

        pi_good, pi_bad = channel.get_steady_state_probabilities()

        assert abs(pi_good + pi_bad - 1.0) < 1e-10
        # pi_good = 0.05 / 0.052
        assert 0.95 < pi_good < 0.98
        assert 0.02 < pi_bad < 0.05

    def test_no_transitions_stays_good(self):
        """Test that a zero onset probability never enters the Bad state."""
        channel = GilbertElliottChannel(p_gb=0.0, seed=1)

        assert channel.get_steady_state_probabilities() == (1.0, 0.0)
        for _ in range(1000):
            channel.transition_state()
        assert channel.state == ChannelState.GOOD

    def test_average_ber(self):
        """Test average BER calculation."""
        channel = GilbertElliottChannel()

        avg_ber = channel.get_average_ber()

        assert 5e-5 < avg_ber < 5e-4

    def test_state_transitions(self):
        """Test that state transitions occur."""
        channel = GilbertElliottChannel(seed=42)

        states_seen = set()
        for _ in range(5000):
            channel.transition_state()
            states_seen.add(channel.state)

        assert len(states_seen) == 2

    def test_error_mask_shape(self):
        """Test that the error mask covers every byte."""
        channel = GilbertElliottChannel(seed=42)

        mask = channel.error_mask(16)

        assert mask.dtype == np.uint8
        assert len(mask) == 16
        assert channel.get_statistics()['total_bits'] == 128

    def test_clean_channel_passes_data(self):
        """Test that zero error rates leave data unchanged."""
        channel = GilbertElliottChannel(pg=0.0, pb=0.0, seed=7)
        data = bytes(range(64))

        received, bit_errors = channel.transmit(data)

        assert received == data
        assert bit_errors == 0

    def test_always_wrong_channel_inverts(self):
        """Test that a BER of one flips every bit."""
        channel = GilbertElliottChannel(pg=1.0, pb=1.0, seed=7)
        data = bytes([0x00, 0x0F, 0xFF])

        received, bit_errors = channel.transmit(data)

        assert received == bytes([0xFF, 0xF0, 0x00])
        assert bit_errors == 24
        assert channel.get_statistics()['bytes_corrupted'] == 3

    def test_empty_transmit(self):
        """Test that nothing in means nothing out."""
        channel = GilbertElliottChannel(seed=7)
        assert channel.transmit(b"") == (b"", 0)

    def test_bursts_counted(self):
        """Test that entering the Bad state is counted as a burst."""
        channel = GilbertElliottChannel(pg=0.0, pb=1.0, p_gb=0.1, p_bg=0.5, seed=3)

        channel.transmit(bytes(128))
        stats = channel.get_statistics()

        assert stats['bursts_entered'] > 0
        assert 0.0 < stats['fraction_in_bad'] < 1.0
        assert stats['bit_errors'] > 0

    def test_reset(self):
        """Test channel reset."""
        channel = GilbertElliottChannel(seed=42)
        channel.transmit(bytes(256))

        channel.reset(seed=123)

        stats = channel.get_statistics()
        assert stats['total_bits'] == 0
        assert stats['bit_errors'] == 0
        assert stats['bytes_corrupted'] == 0

    def test_reproducibility(self):
        """Test that same seed produces same results."""
        channel1 = GilbertElliottChannel(pb=0.05, seed=42)
        channel2 = GilbertElliottChannel(pb=0.05, seed=42)

        results1 = [channel1.transmit(bytes(64)) for _ in range(10)]
        results2 = [channel2.transmit(bytes(64)) for _ in range(10)]

        assert results1 == results2


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
