"""
Timer Management for the Reliable Transmitter

This module provides the acknowledgment timer and the clock sources it reads.
Timers never look at wall time themselves: they compare against whatever
clock the link hands them, so tests can drive time explicitly.
"""

from dataclasses import dataclass
from enum import Enum
import time


class LogicalClock:
    """
    Millisecond clock advanced only by explicit calls.

    Attributes:
        current_ms: Current logical time in milliseconds
    """

    def __init__(self, start_ms: int = 0):
        self.current_ms = start_ms

    def now(self) -> int:
        """Get current logical time in milliseconds."""
        return self.current_ms

    def advance(self, ms: int):
        """
        Move logical time forward.

        Args:
            ms: Milliseconds to advance (non-negative)
        """
        if ms < 0:
            raise ValueError("Cannot move logical time backwards")
        self.current_ms += ms

    def reset(self, start_ms: int = 0):
        """Reset logical time."""
        self.current_ms = start_ms


class MonotonicClock:
    """Millisecond clock backed by the system monotonic source."""

    def __init__(self):
        self._origin = time.monotonic()

    def now(self) -> int:
        return int((time.monotonic() - self._origin) * 1000)


class TimerState(Enum):
    """Timer state enumeration."""
    STOPPED = 0
    RUNNING = 1
    EXPIRED = 2


@dataclass
class AckTimer:
    """
    Single-shot acknowledgment timer.

    Attributes:
        start_time: Time when timer was armed (ms)
        timeout: Timeout duration (ms)
        state: Current timer state
        generation: Incremented on each arm
    """
    start_time: int = 0
    timeout: int = 0
    state: TimerState = TimerState.STOPPED
    generation: int = 0

    @property
    def active(self) -> bool:
        """Check if the timer is armed (running or expired, not stopped)."""
        return self.state != TimerState.STOPPED

    def start(self, current_time: int, timeout: int):
        """
        Arm the timer.

        Args:
            current_time: Current clock time (ms)
            timeout: Duration until expiry (ms)
        """
        self.start_time = current_time
        self.timeout = timeout
        self.state = TimerState.RUNNING
        self.generation += 1

    def stop(self):
        """Stop the timer."""
        self.state = TimerState.STOPPED

    def check_expired(self, current_time: int) -> bool:
        """
        Check if timer has expired.

        Expiry depends only on elapsed logical time:
        current_time - start_time >= timeout.

        Args:
            current_time: Current clock time (ms)

        Returns:
            True if timer has expired
        """
        if self.state == TimerState.STOPPED:
            return False

        if current_time - self.start_time >= self.timeout:
            self.state = TimerState.EXPIRED
            return True

        return False

    def get_remaining_time(self, current_time: int) -> int:
        """
        Get remaining time until expiration.

        Returns:
            Remaining time in ms (0 if expired or stopped)
        """
        if self.state != TimerState.RUNNING:
            return 0
        return max(0, (self.start_time + self.timeout) - current_time)

    def get_expiry_time(self) -> int:
        """Get the absolute expiry time."""
        return self.start_time + self.timeout


if __name__ == "__main__":
    print("=" * 60)
    print("ACK TIMER TEST")
    print("=" * 60)

    clock = LogicalClock()
    timer = AckTimer()
    timer.start(clock.now(), 100)

    for step in [50, 49, 1, 10]:
        clock.advance(step)
        print(f"t={clock.now():4d}ms expired={timer.check_expired(clock.now())} "
              f"remaining={timer.get_remaining_time(clock.now())}ms")
