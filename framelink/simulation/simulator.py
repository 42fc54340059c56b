"""
Link Simulator - Tick-Driven End-to-End Simulation

This module wires the transmitter and receiver tasks to a simulated noisy
channel and a logical clock, sends a sequence of messages one at a time and
verifies what arrives at the far end.
"""

from typing import Optional, Dict, List
from dataclasses import dataclass
import time

import numpy as np

from framelink.config import (
    GOOD_STATE_BER, BAD_STATE_BER, P_GOOD_TO_BAD, P_BAD_TO_GOOD,
    ACK_TIMEOUT_MS, MAX_RETRIES, TICK_MS, MAX_TICKS_PER_MESSAGE,
    MESSAGES_PER_RUN, RNG_SEED_BASE, ProtocolConfig
)
from framelink.arq.link import Link, ResultCode
from framelink.arq.receiver import ReliableReceiver
from framelink.arq.scheduler import Scheduler
from framelink.arq.sender import ReliableTransmitter
from framelink.arq.timer import LogicalClock
from framelink.channel.byte_channel import SimulatedChannel
from framelink.channel.gilbert_elliot import GilbertElliottChannel
from framelink.utils.logger import SimulationLogger, LogLevel
from framelink.utils.metrics import MetricsCollector


@dataclass
class SimulatorConfig:
    """Configuration for the simulator."""
    # Traffic
    payload_size: int = 32
    messages: int = MESSAGES_PER_RUN

    # Channel model
    good_ber: float = GOOD_STATE_BER
    bad_ber: float = BAD_STATE_BER
    p_good_to_bad: float = P_GOOD_TO_BAD
    p_bad_to_good: float = P_BAD_TO_GOOD
    corrupt_acks: bool = True

    # Protocol
    ack_timeout_ms: int = ACK_TIMEOUT_MS
    max_retries: int = MAX_RETRIES

    # Simulation parameters
    tick_ms: int = TICK_MS
    max_ticks_per_message: int = MAX_TICKS_PER_MESSAGE
    seed: int = RNG_SEED_BASE
    log_level: int = LogLevel.WARNING
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.tick_ms <= 0:
            raise ValueError("tick_ms must be positive")
        if self.messages < 0:
            raise ValueError("messages must be non-negative")

    def protocol_config(self) -> ProtocolConfig:
        """Build the protocol parameters for this run."""
        return ProtocolConfig(
            ack_timeout_ms=self.ack_timeout_ms,
            max_retries=self.max_retries
        )


def generate_payloads(count: int, size: int, seed: Optional[int] = None) -> List[bytes]:
    """
    Generate random test payloads.

    Args:
        count: Number of payloads
        size: Bytes per payload
        seed: Random seed

    Returns:
        List of payloads
    """
    rng = np.random.default_rng(seed)
    return [
        rng.integers(0, 256, size=size, dtype=np.uint8).tobytes()
        for _ in range(count)
    ]


class Simulator:
    """
    Tick-driven simulator for one transmitter/receiver pair.

    Each tick runs the scheduler once and then advances the logical clock
    by tick_ms. The receiver is polled for a delivered message after every
    tick.
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        """Initialize simulator."""
        self.config = config or SimulatorConfig()

        self.logger = SimulationLogger(
            name="Sim", level=self.config.log_level, log_file=self.config.log_file
        )

        # Forward path corrupts frames, reverse path corrupts ack bytes
        self.forward_model = GilbertElliottChannel(
            pg=self.config.good_ber,
            pb=self.config.bad_ber,
            p_gb=self.config.p_good_to_bad,
            p_bg=self.config.p_bad_to_good,
            seed=self.config.seed
        )
        self.reverse_model = None
        if self.config.corrupt_acks:
            self.reverse_model = GilbertElliottChannel(
                pg=self.config.good_ber,
                pb=self.config.bad_ber,
                p_gb=self.config.p_good_to_bad,
                p_bg=self.config.p_bad_to_good,
                seed=self.config.seed + 1000
            )

        self.channel = SimulatedChannel(self.forward_model, self.reverse_model)
        self.clock = LogicalClock()
        self.link = Link(self.channel, self.clock, self.config.protocol_config())

        self.transmitter = ReliableTransmitter(self.link.config, logger=self.logger)
        self.receiver = ReliableReceiver(logger=self.logger)
        self.scheduler = Scheduler(self.transmitter, self.receiver, self.link)

        self.metrics = MetricsCollector()

    def _tick(self):
        self.scheduler.tick()
        self.clock.advance(self.config.tick_ms)
        self.logger.set_sim_time(self.clock.now())

    def _send_message(self, payload: bytes):
        """Drive one message to completion or until the tick budget runs out."""
        self.metrics.record_message_offered(len(payload))
        session = self.transmitter.start(payload, self.link)

        delivered = False
        ticks = 0
        while not session.complete and ticks < self.config.max_ticks_per_message:
            self._tick()
            ticks += 1

            message = self.receiver.take_message()
            if message is None:
                continue
            if message != payload:
                self.metrics.record_mismatch()
                self.logger.warning("Receiver delivered an unexpected payload", "SIM")
            elif delivered:
                self.metrics.record_duplicate()
            else:
                delivered = True
                self.metrics.record_delivery(len(payload))

        for attempt in range(session.transmissions):
            self.metrics.record_frame_sent(len(payload), retransmission=attempt > 0)

        if not session.complete:
            self.logger.error(
                f"Message not completed within {self.config.max_ticks_per_message} ticks",
                "SIM"
            )
            self.transmitter.abandon()
            # Drop any ack addressed to the abandoned message
            self.channel.try_receive_ack()
            self.metrics.record_failure()
        elif session.result == ResultCode.SUCCESS:
            self.metrics.record_latency(session.duration)
        else:
            self.metrics.record_failure()

    def run(self, payloads: Optional[List[bytes]] = None) -> Dict:
        """
        Run the simulation.

        Args:
            payloads: Messages to send (random payloads if None)

        Returns:
            Dictionary with configuration, metrics and verification
        """
        if payloads is None:
            payloads = generate_payloads(
                self.config.messages,
                self.config.payload_size,
                seed=self.config.seed
            )

        self.reset()
        self.logger.simulation_start({
            'messages': len(payloads),
            'payload_size': self.config.payload_size,
            'p_good_to_bad': self.config.p_good_to_bad,
            'seed': self.config.seed
        })

        self.metrics.start(self.clock.now())
        sim_start_real = time.time()

        for payload in payloads:
            self._send_message(payload)

        self.metrics.finish(self.clock.now())
        self.metrics.record_transmitter_statistics(self.transmitter.get_statistics())
        sim_end_real = time.time()

        metrics_summary = self.metrics.get_summary()
        self.logger.simulation_end(metrics_summary)

        valid = (self.metrics.messages_delivered == len(payloads)
                 and self.metrics.mismatches == 0)

        return {
            'config': {
                'payload_size': self.config.payload_size,
                'messages': len(payloads),
                'p_good_to_bad': self.config.p_good_to_bad,
                'p_bad_to_good': self.config.p_bad_to_good,
                'ack_timeout_ms': self.config.ack_timeout_ms,
                'max_retries': self.config.max_retries,
                'seed': self.config.seed
            },
            'metrics': metrics_summary,
            'transmitter': self.transmitter.get_statistics(),
            'receiver': self.receiver.get_statistics(),
            'channel': self.channel.get_statistics(),
            'verification': {
                'valid': valid,
                'delivered': self.metrics.messages_delivered,
                'expected': len(payloads),
                'mismatches': self.metrics.mismatches
            },
            'real_time': sim_end_real - sim_start_real,
            'simulation_time': self.clock.now(),
            'ticks': self.scheduler.ticks,
            'complete': self.metrics.messages_failed == 0
        }

    def reset(self, seed: Optional[int] = None):
        """Reset simulator."""
        if seed is not None:
            self.config.seed = seed
        self.forward_model.reset(self.config.seed)
        if self.reverse_model is not None:
            self.reverse_model.reset(self.config.seed + 1000)
        self.channel.reset()
        self.clock.reset()
        self.logger.set_sim_time(0)
        self.transmitter.reset()
        self.receiver.reset()
        self.scheduler.ticks = 0
        self.metrics.reset()


if __name__ == "__main__":
    print("=" * 60)
    print("SIMULATOR TEST")
    print("=" * 60)

    config = SimulatorConfig(
        payload_size=64,
        messages=20,
        p_good_to_bad=0.002,
        seed=42,
        log_level=LogLevel.INFO
    )

    print(f"\nConfiguration:")
    print(f"  Payload size: {config.payload_size} bytes")
    print(f"  Messages: {config.messages}")
    print(f"  P(G->B): {config.p_good_to_bad}")
    print(f"  ACK timeout: {config.ack_timeout_ms} ms")

    sim = Simulator(config)
    print("\nRunning simulation...")

    results = sim.run()

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    print(f"\nTransfer:")
    print(f"  Complete: {results['complete']}")
    print(f"  Data valid: {results['verification']['valid']}")
    print(f"  Simulation time: {results['simulation_time']} ms")
    print(f"  Real time: {results['real_time']:.4f} s")

    metrics = results['metrics']
    print(f"\nMetrics:")
    print(f"  Delivery rate: {metrics['delivery_rate']*100:.1f}%")
    print(f"  Efficiency: {metrics['efficiency']*100:.2f}%")
    print(f"  Retransmissions: {metrics['retransmissions']}")
    print(f"  Duplicates: {metrics['duplicates']}")
