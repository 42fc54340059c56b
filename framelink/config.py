"""
Configuration file for the framelink reliable framing protocol.
Contains the wire constants, protocol defaults and simulation parameters.
"""

import os
from dataclasses import dataclass

# =============================================================================
# WIRE FORMAT
# =============================================================================

START_BYTE = 0x02  # STX
END_BYTE = 0x03    # ETX
ACK_BYTE = 0x06
NAK_BYTE = 0x15

# start + length + checksum + end
FRAME_OVERHEAD = 4

# The encoder requires one byte of headroom beyond the frame it writes
ENCODE_BUFFER_OVERHEAD = FRAME_OVERHEAD + 1

# Length field is a single byte, 0 is reserved as invalid
MAX_FRAME_PAYLOAD = 255

# Receive accumulator capacity (>= 256)
PAYLOAD_BUFFER_CAPACITY = 256

# =============================================================================
# PROTOCOL DEFAULTS
# =============================================================================

MAX_PAYLOAD_SIZE = MAX_FRAME_PAYLOAD
ACK_TIMEOUT_MS = 1000
MAX_RETRIES = 3

# Transmit buffer size handed to the encoder
FRAME_BUFFER_SIZE = PAYLOAD_BUFFER_CAPACITY + 10

# =============================================================================
# GILBERT-ELLIOT BURST ERROR MODEL PARAMETERS
# =============================================================================

# Bit Error Rates
GOOD_STATE_BER = 1e-6
BAD_STATE_BER = 5e-3

# State Transition Probabilities (per bit)
P_GOOD_TO_BAD = 0.002
P_BAD_TO_GOOD = 0.05

# =============================================================================
# SIMULATION SETTINGS
# =============================================================================

# Logical milliseconds advanced after every scheduler tick
TICK_MS = 10

# Failsafe per message, in ticks
MAX_TICKS_PER_MESSAGE = 10_000

# Default number of messages per simulation run
MESSAGES_PER_RUN = 20

# Default RNG seed base (actual seed = base + offsets per run)
RNG_SEED_BASE = 42

# =============================================================================
# PARAMETER SWEEP CONFIGURATION
# =============================================================================

# Good -> Bad transition probabilities to evaluate
LOSS_PROBABILITIES = [0.0, 0.0005, 0.001, 0.002, 0.005, 0.01]

# Payload sizes to evaluate (in bytes)
PAYLOAD_SIZES = [8, 32, 64, 128, 200, 255]

# Number of simulation runs per (p, L) pair
RUNS_PER_CONFIGURATION = 5

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL_DEBUG = 0
LOG_LEVEL_INFO = 1
LOG_LEVEL_WARNING = 2
LOG_LEVEL_ERROR = 3

DEFAULT_LOG_LEVEL = LOG_LEVEL_INFO

# =============================================================================
# OUTPUT PATHS
# =============================================================================

BASE_DIR = os.getcwd()
OUTPUT_DIR = os.path.join(BASE_DIR, "data", "output")
PLOTS_DIR = os.path.join(OUTPUT_DIR, "plots")
RESULTS_CSV = os.path.join(OUTPUT_DIR, "results.csv")


@dataclass
class ProtocolConfig:
    """
    Overridable protocol parameters shared by the transmitter and receiver.

    Attributes:
        max_payload_size: Largest payload the transmitter accepts
        ack_timeout_ms: Time to wait for ACK/NAK before retrying
        max_retries: Attempts before the transmission fails
        frame_buffer_size: Size of the transmit frame buffer
    """
    max_payload_size: int = MAX_PAYLOAD_SIZE
    ack_timeout_ms: int = ACK_TIMEOUT_MS
    max_retries: int = MAX_RETRIES
    frame_buffer_size: int = FRAME_BUFFER_SIZE

    def __post_init__(self):
        """Validate configuration after initialization."""
        if self.max_payload_size < 1:
            raise ValueError("max_payload_size must be positive")
        if self.ack_timeout_ms < 0:
            raise ValueError("ack_timeout_ms must be non-negative")
        if self.max_retries < 1:
            raise ValueError("max_retries must be at least 1")


def frame_size(payload_size: int) -> int:
    """Calculate total frame size on the wire for a payload size."""
    return payload_size + FRAME_OVERHEAD


def calculate_steady_state_probabilities(
    p_gb: float = P_GOOD_TO_BAD,
    p_bg: float = P_BAD_TO_GOOD
):
    """
    Calculate steady-state probabilities for Good and Bad states.
    π_G = P(B→G) / (P(G→B) + P(B→G))
    π_B = P(G→B) / (P(G→B) + P(B→G))
    """
    sum_transitions = p_gb + p_bg
    if sum_transitions == 0:
        return 1.0, 0.0
    return p_bg / sum_transitions, p_gb / sum_transitions


def calculate_average_ber(p_gb: float = P_GOOD_TO_BAD, p_bg: float = P_BAD_TO_GOOD) -> float:
    """
    Calculate average BER based on steady-state probabilities.
    BER_avg = π_G * pg + π_B * pb
    """
    pi_good, pi_bad = calculate_steady_state_probabilities(p_gb, p_bg)
    return pi_good * GOOD_STATE_BER + pi_bad * BAD_STATE_BER


def calculate_frame_error_probability(payload_size: int, ber: float) -> float:
    """
    Estimate frame error probability for independent bit errors.
    P_frame_error = 1 - (1 - BER)^frame_bits
    """
    return 1 - (1 - ber) ** (frame_size(payload_size) * 8)
