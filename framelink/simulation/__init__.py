"""
Simulation package - Link simulator and batch runners.

Contains:
- Tick-driven link simulator
- Batch runner for parameter sweeps
"""

from .simulator import Simulator, SimulatorConfig, generate_payloads
from .runner import BatchRunner, RunConfig, run_single_simulation

__all__ = [
    'Simulator',
    'SimulatorConfig',
    'generate_payloads',
    'BatchRunner',
    'RunConfig',
    'run_single_simulation'
]
