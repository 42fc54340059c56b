"""
Unit tests for the simulated byte channel.
"""

import pytest

from framelink.config import ACK_BYTE, NAK_BYTE
from framelink.channel.byte_channel import ByteChannel, SimulatedChannel
from framelink.channel.gilbert_elliot import GilbertElliottChannel


class TestSimulatedChannel:
    """Tests for the in-memory channel."""

    def test_bytes_arrive_in_order(self):
        """Test that sent bytes come out one at a time, in order."""
        channel = SimulatedChannel()
        channel.send(b"\x01\x02")
        channel.send(b"\x03")

        received = [channel.try_receive_byte() for _ in range(3)]

        assert received == [1, 2, 3]
        assert channel.try_receive_byte() is None
        assert channel.get_statistics()['bytes_delivered'] == 3

    def test_loss_drops_frames(self):
        """Test that loss mode silently discards frames."""
        channel = SimulatedChannel()
        channel.simulate_loss = True

        channel.send(b"gone")

        assert channel.pending_bytes == 0
        assert channel.frames_sent == 1
        assert channel.frames_dropped == 1

    def test_inject_bypasses_loss(self):
        """Test that injected noise reaches the wire even in loss mode."""
        channel = SimulatedChannel()
        channel.simulate_loss = True

        channel.inject(b"\xff")

        assert channel.try_receive_byte() == 0xFF

    def test_ack_slot_is_edge_triggered(self):
        """Test that an ack is read once and a newer one overwrites it."""
        channel = SimulatedChannel()
        channel.send_ack(NAK_BYTE)
        channel.send_ack(ACK_BYTE)

        assert channel.try_receive_ack() == ACK_BYTE
        assert channel.try_receive_ack() is None
        assert channel.acks_overwritten == 1

    def test_forward_model_corrupts(self):
        """Test that a forward error model flips data bits."""
        model = GilbertElliottChannel(pg=1.0, pb=1.0, seed=3)
        channel = SimulatedChannel(forward_model=model)

        channel.send(b"\x00")

        assert channel.try_receive_byte() == 0xFF
        assert channel.frames_corrupted == 1

    def test_reverse_model_corrupts_acks(self):
        """Test that a reverse error model garbles ack bytes."""
        model = GilbertElliottChannel(pg=1.0, pb=1.0, seed=3)
        channel = SimulatedChannel(reverse_model=model)

        channel.send_ack(ACK_BYTE)

        assert channel.try_receive_ack() == ACK_BYTE ^ 0xFF
        assert channel.acks_corrupted == 1

    def test_reset(self):
        """Test that reset empties the wire and clears statistics."""
        channel = SimulatedChannel()
        channel.simulate_loss = True
        channel.inject(b"abc")
        channel.send_ack(ACK_BYTE)

        channel.reset()

        assert channel.pending_bytes == 0
        assert channel.try_receive_ack() is None
        assert not channel.simulate_loss
        assert all(v == 0 for v in channel.get_statistics().values())

    def test_base_channel_is_abstract(self):
        """Test that the contract class cannot be used directly."""
        channel = ByteChannel()
        with pytest.raises(NotImplementedError):
            channel.send(b"x")
        with pytest.raises(NotImplementedError):
            channel.try_receive_ack()


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
