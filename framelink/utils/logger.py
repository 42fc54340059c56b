"""
Simulation Logger

Leveled console logger for the transmitter, receiver and simulator. Lines
are stamped with the logical clock when one is set and with wall-clock
time otherwise, and can be mirrored to a plain-text file.
"""

from typing import Optional, TextIO
from datetime import datetime
from enum import IntEnum
import os

from framelink.config import DEFAULT_LOG_LEVEL


class LogLevel(IntEnum):
    """Log level enumeration."""
    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3
    CRITICAL = 4


class SimulationLogger:
    """
    Logger for link events.

    Attributes:
        name: Logger name shown on every line
        level: Minimum level printed
        sim_time: Logical time in ms (None before the first tick)
        message_counts: Lines emitted per level
    """

    COLORS = {
        LogLevel.DEBUG: '\033[36m',
        LogLevel.INFO: '\033[32m',
        LogLevel.WARNING: '\033[33m',
        LogLevel.ERROR: '\033[31m',
        LogLevel.CRITICAL: '\033[35m',
    }
    RESET = '\033[0m'

    def __init__(
        self,
        name: str = "framelink",
        level: int = DEFAULT_LOG_LEVEL,
        log_file: Optional[str] = None,
        use_colors: bool = True
    ):
        """
        Initialize logger.

        Args:
            name: Logger name
            level: Minimum log level
            log_file: Optional path that receives an uncolored copy
            use_colors: Use ANSI colors on the console
        """
        self.name = name
        self.level = level
        self.use_colors = use_colors
        self.sim_time: Optional[int] = None
        self.message_counts = {level: 0 for level in LogLevel}

        self.file: Optional[TextIO] = None
        if log_file:
            directory = os.path.dirname(log_file)
            if directory:
                os.makedirs(directory, exist_ok=True)
            self.file = open(log_file, 'w')

    def set_sim_time(self, time_ms: int):
        """Set current logical time for log messages."""
        self.sim_time = time_ms

    def _stamp(self) -> str:
        if self.sim_time is not None:
            return f"[{self.sim_time:8d}ms]"
        return f"[{datetime.now().strftime('%H:%M:%S.%f')[:-3]}]"

    def _log(self, level: LogLevel, message: str, category: Optional[str] = None):
        if level < self.level:
            return
        self.message_counts[level] += 1

        tail = f"[{self.name}]" + (f" [{category}]" if category else "") + f" {message}"
        level_str = level.name.ljust(8)

        if self.use_colors:
            print(f"{self._stamp()} {self.COLORS[level]}{level_str}{self.RESET} {tail}")
        else:
            print(f"{self._stamp()} {level_str} {tail}")

        if self.file:
            self.file.write(f"{self._stamp()} {level_str} {tail}\n")
            self.file.flush()

    def debug(self, message: str, category: Optional[str] = None):
        self._log(LogLevel.DEBUG, message, category)

    def info(self, message: str, category: Optional[str] = None):
        self._log(LogLevel.INFO, message, category)

    def warning(self, message: str, category: Optional[str] = None):
        self._log(LogLevel.WARNING, message, category)

    def error(self, message: str, category: Optional[str] = None):
        self._log(LogLevel.ERROR, message, category)

    def critical(self, message: str, category: Optional[str] = None):
        self._log(LogLevel.CRITICAL, message, category)

    # Link events
    def frame_sent(self, size: int, attempt: int):
        self.debug(f"Frame sent, {size}B on the wire, attempt {attempt}", "TX")

    def ack_received(self):
        self.debug("ACK received", "ACK")

    def nak_received(self, retry_count: int, max_retries: int):
        self.info(f"NAK received, retry {retry_count}/{max_retries}", "NAK")

    def timeout(self, retry_count: int, max_retries: int):
        self.warning(f"Timeout, retry {retry_count}/{max_retries}", "TIMEOUT")

    def retransmit(self, retry_count: int):
        self.info(f"Retransmitting frame (retry #{retry_count})", "RETX")

    def frame_accepted(self, length: int):
        self.debug(f"Valid frame received, {length}B payload, sending ACK", "RX")

    def frame_rejected(self, reason: str):
        self.info(f"Invalid frame ({reason}), sending NAK", "RX")

    def transmission_complete(self, result: str, retries: int):
        """Log the terminal result of a transmission."""
        if result == "SUCCESS":
            self.debug(f"Transmission complete after {retries} retries", "TX")
        else:
            self.warning(f"Transmission failed: {result} after {retries} retries", "TX")

    def simulation_start(self, params: dict):
        param_str = ", ".join(f"{k}={v}" for k, v in params.items())
        self.info(f"Simulation started: {param_str}", "SIM")

    def simulation_end(self, metrics: dict):
        self.info(
            f"Simulation ended: delivery rate={metrics.get('delivery_rate', 0):.2%}",
            "SIM"
        )

    def get_summary(self) -> dict:
        """Get counts of emitted lines."""
        return {
            'message_counts': {level.name: count for level, count in self.message_counts.items()},
            'total_messages': sum(self.message_counts.values())
        }

    def close(self):
        """Close log file if open."""
        if self.file:
            self.file.close()
            self.file = None


# Global logger instance
_global_logger: Optional[SimulationLogger] = None


def get_logger() -> SimulationLogger:
    """Get the process-wide logger, creating it on first use."""
    global _global_logger
    if _global_logger is None:
        _global_logger = SimulationLogger()
    return _global_logger


def set_logger(logger: SimulationLogger):
    """Replace the process-wide logger."""
    global _global_logger
    _global_logger = logger
