"""
Metrics Collection and Calculation

This module provides utilities for tracking link performance over a
simulation: delivery rate, retransmission rate, efficiency on the wire and
per-message latency.
"""

from typing import List, Optional, Dict
import statistics

from framelink.config import FRAME_OVERHEAD


class MetricsCollector:
    """
    Collects and calculates performance metrics for a simulation.

    Primary metric: Delivery rate = Messages Delivered / Messages Offered

    Attributes:
        start_time: Simulation start time (ms)
        end_time: Simulation end time (ms)
    """

    def __init__(self):
        # Time tracking
        self.start_time: Optional[int] = None
        self.end_time: Optional[int] = None

        # Message counters
        self.messages_offered = 0
        self.messages_delivered = 0
        self.messages_failed = 0
        self.duplicates = 0
        self.mismatches = 0

        # Byte counters
        self.payload_bytes_offered = 0
        self.payload_bytes_delivered = 0
        self.wire_bytes_sent = 0

        # Frame counters
        self.frames_sent = 0
        self.retransmissions = 0
        self.timeouts = 0
        self.acks_received = 0
        self.naks_received = 0

        # Latency samples (ms from start request to completion)
        self.latency_samples: List[int] = []

    def start(self, time_ms: int):
        """Mark simulation start."""
        self.start_time = time_ms

    def finish(self, time_ms: int):
        """Mark simulation end."""
        self.end_time = time_ms

    def record_message_offered(self, payload_bytes: int):
        """
        Record a message handed to the transmitter.

        Args:
            payload_bytes: Payload length
        """
        self.messages_offered += 1
        self.payload_bytes_offered += payload_bytes

    def record_frame_sent(self, payload_bytes: int, retransmission: bool = False):
        """
        Record a frame put on the wire.

        Args:
            payload_bytes: Payload length of the frame
            retransmission: True if the frame was sent before
        """
        self.frames_sent += 1
        self.wire_bytes_sent += payload_bytes + FRAME_OVERHEAD
        if retransmission:
            self.retransmissions += 1

    def record_delivery(self, payload_bytes: int):
        """
        Record a correct payload handed up by the receiver.

        Args:
            payload_bytes: Delivered payload length
        """
        self.messages_delivered += 1
        self.payload_bytes_delivered += payload_bytes

    def record_mismatch(self):
        """Record a payload that differs from the one being sent."""
        self.mismatches += 1

    def record_duplicate(self):
        """Record a payload delivered more than once."""
        self.duplicates += 1

    def record_failure(self):
        """Record a message the transmitter gave up on."""
        self.messages_failed += 1

    def record_transmitter_statistics(self, stats: Dict):
        """
        Copy acknowledgment and timeout counters from the transmitter.

        Args:
            stats: Result of ReliableTransmitter.get_statistics()
        """
        self.timeouts = stats["timeouts"]
        self.acks_received = stats["acks_received"]
        self.naks_received = stats["naks_received"]

    def record_latency(self, latency_ms: int):
        """
        Record the completion latency of one message.

        Args:
            latency_ms: Time from start request to completion
        """
        self.latency_samples.append(latency_ms)

    def calculate_delivery_rate(self) -> float:
        """
        Calculate delivery rate.

        Returns:
            Fraction of offered messages delivered (0-1)
        """
        if self.messages_offered <= 0:
            return 0.0
        return min(self.messages_delivered, self.messages_offered) / self.messages_offered

    def calculate_retransmission_rate(self) -> float:
        """
        Calculate retransmission rate.

        Returns:
            Retransmissions / Messages Offered
        """
        if self.messages_offered <= 0:
            return 0.0
        return self.retransmissions / self.messages_offered

    def calculate_efficiency(self) -> float:
        """
        Calculate transmission efficiency.

        Efficiency = Payload Bytes Delivered / Wire Bytes Sent

        Returns:
            Efficiency ratio (0-1)
        """
        if self.wire_bytes_sent <= 0:
            return 0.0
        return self.payload_bytes_delivered / self.wire_bytes_sent

    def calculate_goodput(self) -> float:
        """
        Calculate goodput in payload bytes per simulated second.

        Returns:
            Goodput in bytes per second
        """
        if self.start_time is None or self.end_time is None:
            return 0.0
        total_ms = self.end_time - self.start_time
        if total_ms <= 0:
            return 0.0
        return self.payload_bytes_delivered / (total_ms / 1000.0)

    def get_latency_statistics(self) -> Dict[str, float]:
        """
        Get latency statistics.

        Returns:
            Dictionary with min, max, mean, median, stdev latency (ms)
        """
        if not self.latency_samples:
            return {
                'min': 0, 'max': 0, 'mean': 0,
                'median': 0, 'stdev': 0, 'samples': 0
            }

        return {
            'min': min(self.latency_samples),
            'max': max(self.latency_samples),
            'mean': statistics.mean(self.latency_samples),
            'median': statistics.median(self.latency_samples),
            'stdev': statistics.stdev(self.latency_samples) if len(self.latency_samples) > 1 else 0,
            'samples': len(self.latency_samples)
        }

    def get_summary(self) -> Dict:
        """
        Get comprehensive metrics summary.

        Returns:
            Dictionary with all metrics
        """
        total_time = 0
        if self.start_time is not None and self.end_time is not None:
            total_time = self.end_time - self.start_time

        return {
            # Time
            'total_time_ms': total_time,

            # Primary metric
            'delivery_rate': self.calculate_delivery_rate(),

            # Secondary metrics
            'goodput': self.calculate_goodput(),
            'efficiency': self.calculate_efficiency(),
            'retransmission_rate': self.calculate_retransmission_rate(),

            # Message counts
            'messages_offered': self.messages_offered,
            'messages_delivered': self.messages_delivered,
            'messages_failed': self.messages_failed,
            'duplicates': self.duplicates,
            'mismatches': self.mismatches,

            # Byte counts
            'payload_bytes_offered': self.payload_bytes_offered,
            'payload_bytes_delivered': self.payload_bytes_delivered,
            'wire_bytes_sent': self.wire_bytes_sent,

            # Frame counts
            'frames_sent': self.frames_sent,
            'retransmissions': self.retransmissions,
            'timeouts': self.timeouts,
            'acks_received': self.acks_received,
            'naks_received': self.naks_received,

            # Latency
            'latency': self.get_latency_statistics()
        }

    def to_csv_row(self) -> Dict:
        """
        Get metrics as a flat dictionary suitable for CSV export.

        Returns:
            Dictionary with flattened metrics
        """
        summary = self.get_summary()
        latency = summary.pop('latency')

        flat = {**summary}
        for key, value in latency.items():
            flat[f'latency_{key}'] = value

        return flat

    def reset(self):
        """Reset all metrics."""
        self.__init__()


if __name__ == "__main__":
    print("=" * 60)
    print("METRICS COLLECTOR TEST")
    print("=" * 60)

    metrics = MetricsCollector()
    metrics.start(0)

    for i in range(20):
        metrics.record_message_offered(32)
        metrics.record_frame_sent(32)
        if i % 5 == 0:
            metrics.record_frame_sent(32, retransmission=True)
        metrics.record_delivery(32)
        metrics.record_latency(20 + (i % 5) * 10)

    metrics.finish(2000)

    summary = metrics.get_summary()
    print("\nMetrics Summary:")
    for key, value in summary.items():
        if isinstance(value, dict):
            print(f"  {key}:")
            for k, v in value.items():
                print(f"    {k}: {v}")
        elif isinstance(value, float):
            print(f"  {key}: {value:.6f}")
        else:
            print(f"  {key}: {value}")
