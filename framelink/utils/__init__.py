"""
Utility modules for the framed link simulation.
"""

from .logger import SimulationLogger, LogLevel, get_logger, set_logger
from .metrics import MetricsCollector

__all__ = [
    'SimulationLogger',
    'LogLevel',
    'get_logger',
    'set_logger',
    'MetricsCollector'
]
