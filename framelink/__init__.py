"""
framelink - Framed stop-and-wait link over a noisy byte channel.

Contains:
- Frame codec and byte-driven parser (framelink.arq)
- Reliable transmitter/receiver tasks and their scheduler (framelink.arq)
- Simulated byte channel and Gilbert-Elliot error model (framelink.channel)
- Simulation, parameter sweep and visualization tools
"""

__version__ = "1.0.0"
