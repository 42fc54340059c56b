#!/usr/bin/env python3
"""
Framed Link Protocol Simulator - Main Entry Point

This is the main CLI interface for the framed stop-and-wait link.
It provides options for:
- Single simulation runs over a burst-error channel
- Parameter sweep over burst onset probability and payload size
- Heatmap generation from sweep results
- Encoding and decoding individual frames

Usage:
    framelink --single --payload 64 --p-gb 0.002
    framelink --sweep --runs 5
    framelink --visualize --csv results.csv
    framelink --encode 1020
    framelink --decode "02 02 10 20 30 03"
"""

import argparse
import os
import time

from framelink import config as cfg
from framelink.config import (
    LOSS_PROBABILITIES, PAYLOAD_SIZES, RUNS_PER_CONFIGURATION,
    MESSAGES_PER_RUN, RESULTS_CSV, PLOTS_DIR
)


def run_single_simulation(args):
    """Run a single simulation with specified parameters."""
    from framelink.simulation.simulator import Simulator, SimulatorConfig
    from framelink.utils.logger import LogLevel

    config = SimulatorConfig(
        payload_size=args.payload,
        messages=args.messages,
        p_good_to_bad=args.p_gb,
        ack_timeout_ms=args.timeout,
        max_retries=args.retries,
        seed=args.seed,
        log_level=LogLevel.INFO if args.verbose else LogLevel.WARNING,
        log_file=args.log_file
    )

    print("=" * 60)
    print("FRAMED LINK SIMULATOR")
    print("=" * 60)
    print(f"\nConfiguration:")
    print(f"  Payload size: {config.payload_size} bytes")
    print(f"  Messages: {config.messages}")
    print(f"  P(G->B): {config.p_good_to_bad}")
    print(f"  ACK timeout: {config.ack_timeout_ms} ms")
    print(f"  Max retries: {config.max_retries}")
    print(f"  Seed: {config.seed}")

    print("\nRunning simulation...")

    sim = Simulator(config)
    start_time = time.time()
    try:
        results = sim.run()
    finally:
        sim.logger.close()
    elapsed = time.time() - start_time

    print("\n" + "=" * 60)
    print("RESULTS")
    print("=" * 60)

    print(f"\nTransfer Status:")
    print(f"  Complete: {results['complete']}")
    print(f"  Data Valid: {results['verification']['valid']}")
    print(f"  Simulation Time: {results['simulation_time']} ms")
    print(f"  Real Time: {elapsed:.2f} s")

    metrics = results['metrics']
    print(f"\nPerformance Metrics:")
    print(f"  Delivery Rate: {metrics['delivery_rate'] * 100:.2f}%")
    print(f"  Goodput: {metrics['goodput']:.2f} B/s")
    print(f"  Efficiency: {metrics['efficiency'] * 100:.2f}%")

    print(f"\nFrame Statistics:")
    print(f"  Frames Sent: {metrics['frames_sent']}")
    print(f"  Retransmissions: {metrics['retransmissions']}")
    print(f"  Timeouts: {metrics['timeouts']}")
    print(f"  NAKs Received: {metrics['naks_received']}")
    print(f"  Failed Messages: {metrics['messages_failed']}")
    print(f"  Duplicates: {metrics['duplicates']}")

    if metrics['latency']['samples'] > 0:
        print(f"\nLatency Statistics:")
        print(f"  Mean: {metrics['latency']['mean']:.1f} ms")
        print(f"  Min: {metrics['latency']['min']} ms")
        print(f"  Max: {metrics['latency']['max']} ms")

    return results


def run_parameter_sweep(args):
    """Run parameter sweep."""
    from framelink.simulation.runner import BatchRunner

    print("=" * 60)
    print("PARAMETER SWEEP")
    print("=" * 60)

    if args.quick:
        loss_probabilities = [0.0, 0.002, 0.01]
        payload_sizes = [16, 64, 255]
        runs = 2
        messages = 10
    else:
        loss_probabilities = LOSS_PROBABILITIES
        payload_sizes = PAYLOAD_SIZES
        runs = args.runs
        messages = args.messages

    output = args.output or RESULTS_CSV
    runner = BatchRunner(
        loss_probabilities=loss_probabilities,
        payload_sizes=payload_sizes,
        runs_per_config=runs,
        messages=messages,
        ack_timeout_ms=args.timeout,
        max_retries=args.retries,
        output_file=output
    )

    print(f"\nConfiguration:")
    print(f"  P(G->B): {loss_probabilities}")
    print(f"  Payload sizes: {payload_sizes}")
    print(f"  Runs per config: {runs}")
    print(f"  Total simulations: {runner.total_runs}")
    print(f"  Messages per run: {messages}")
    print(f"  ACK timeout: {args.timeout} ms, max retries: {args.retries}")
    print(f"  Output: {output}")

    print("\nStarting parameter sweep...")

    if args.parallel:
        results = runner.run_parallel(max_workers=args.workers)
    else:
        results = runner.run_sequential()

    runner.save_results()

    best = runner.get_most_reliable_configuration()

    print("\n" + "=" * 60)
    print("MOST RELIABLE CONFIGURATION")
    print("=" * 60)
    if 'error' in best:
        print(f"  {best['error']}")
    else:
        print(f"  P(G->B): {best['p_good_to_bad']}")
        print(f"  Payload Size: {best['payload_size']} bytes")
        print(f"  Mean Delivery Rate: {best['mean_delivery_rate'] * 100:.2f}%")
        print(f"  Mean Retransmissions: {best['mean_retransmissions']:.2f}")

    return results


def generate_visualizations(args):
    """Generate heatmaps from sweep results."""
    from framelink.visualization.heatmap import DeliveryHeatmap

    print("=" * 60)
    print("GENERATING VISUALIZATIONS")
    print("=" * 60)

    csv_file = args.csv or RESULTS_CSV

    if not os.path.exists(csv_file):
        print(f"Error: Results file not found: {csv_file}")
        print("Run a parameter sweep first: framelink --sweep")
        return 1

    heatmap = DeliveryHeatmap(csv_file=csv_file)
    print(f"Loaded {len(heatmap.frame)} results from {csv_file}")

    os.makedirs(PLOTS_DIR, exist_ok=True)
    delivery_file = heatmap.plot(
        output_file=os.path.join(PLOTS_DIR, 'delivery_rate_heatmap.png')
    )
    retx_file = heatmap.plot(
        output_file=os.path.join(PLOTS_DIR, 'retransmission_rate_heatmap.png'),
        metric='retransmission_rate',
        title="Retransmission Rate vs Burst Onset Probability and Payload Size",
        cmap="magma"
    )

    print("\n" + "=" * 60)
    print("VISUALIZATIONS GENERATED")
    print("=" * 60)
    print(f"  Delivery rate: {delivery_file}")
    print(f"  Retransmission rate: {retx_file}")
    return 0


def show_config(args):
    """Display current configuration."""
    print("=" * 60)
    print("FRAMED LINK CONFIGURATION")
    print("=" * 60)

    print(f"\nWire Format:")
    print(f"  Start / End: 0x{cfg.START_BYTE:02X} / 0x{cfg.END_BYTE:02X}")
    print(f"  ACK / NAK: 0x{cfg.ACK_BYTE:02X} / 0x{cfg.NAK_BYTE:02X}")
    print(f"  Frame overhead: {cfg.FRAME_OVERHEAD} bytes")
    print(f"  Max payload: {cfg.MAX_FRAME_PAYLOAD} bytes")

    print(f"\nProtocol:")
    print(f"  ACK timeout: {cfg.ACK_TIMEOUT_MS} ms")
    print(f"  Max retries: {cfg.MAX_RETRIES}")
    print(f"  Frame buffer: {cfg.FRAME_BUFFER_SIZE} bytes")

    print(f"\nGilbert-Elliot Channel:")
    print(f"  Good State BER: {cfg.GOOD_STATE_BER:.2e}")
    print(f"  Bad State BER: {cfg.BAD_STATE_BER:.2e}")
    print(f"  P(Good->Bad): {cfg.P_GOOD_TO_BAD}")
    print(f"  P(Bad->Good): {cfg.P_BAD_TO_GOOD}")
    avg_ber = cfg.calculate_average_ber()
    print(f"  Average BER: {avg_ber:.2e}")

    print(f"\nParameter Sweep:")
    print(f"  P(G->B): {cfg.LOSS_PROBABILITIES}")
    print(f"  Payload Sizes: {cfg.PAYLOAD_SIZES}")
    print(f"  Runs per config: {cfg.RUNS_PER_CONFIGURATION}")
    print(f"  Total simulations: "
          f"{len(cfg.LOSS_PROBABILITIES) * len(cfg.PAYLOAD_SIZES) * cfg.RUNS_PER_CONFIGURATION}")

    print(f"\nFrame error probability at average BER:")
    for payload in cfg.PAYLOAD_SIZES:
        fer = cfg.calculate_frame_error_probability(payload, avg_ber)
        print(f"  {payload} bytes: {fer:.4f}")
    return 0


def encode_hex(args):
    """Encode a hex payload into a frame."""
    from framelink.arq.frame import FrameError, describe_frame, encode_frame

    try:
        payload = bytes.fromhex(args.encode)
        frame = encode_frame(payload)
    except (ValueError, FrameError) as e:
        print(f"Error: {e}")
        return 1

    print(describe_frame(frame))
    return 0


def decode_hex(args):
    """Run hex bytes through the frame parser and print what it finds."""
    from framelink.arq.parser import FrameParser

    try:
        data = bytes.fromhex(args.decode)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    parser = FrameParser()
    payloads = parser.feed_bytes(data)

    for payload in payloads:
        print(f"FRAME_READY len={len(payload)} payload={payload.hex(' ').upper()}")
    if parser.checksum_errors:
        print(f"CHECKSUM_INVALID x{parser.checksum_errors}")
    if parser.length_errors:
        print(f"LENGTH_INVALID x{parser.length_errors}")
    if not payloads:
        print(f"No complete frame (parser state: {parser.state.name})")
        return 1
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Framed Stop-and-Wait Link Simulator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Single simulation:
    framelink --single --payload 64 --p-gb 0.002

  Quick parameter sweep (for testing):
    framelink --sweep --quick

  Parallel parameter sweep:
    framelink --sweep --parallel --workers 4

  Generate visualizations:
    framelink --visualize

  Encode / decode one frame:
    framelink --encode 1020
    framelink --decode "02 02 10 20 30 03"
        """
    )

    # Mode selection
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument('--single', action='store_true',
                      help='Run single simulation')
    mode.add_argument('--sweep', action='store_true',
                      help='Run parameter sweep')
    mode.add_argument('--visualize', action='store_true',
                      help='Generate visualizations')
    mode.add_argument('--config', action='store_true',
                      help='Show configuration')
    mode.add_argument('--encode', type=str, metavar='HEX',
                      help='Encode a hex payload into a frame')
    mode.add_argument('--decode', type=str, metavar='HEX',
                      help='Parse hex bytes as frames')

    # Single simulation options
    parser.add_argument('--payload', '-p', type=int, default=32,
                        help='Payload size in bytes (default: 32)')
    parser.add_argument('--p-gb', type=float, default=cfg.P_GOOD_TO_BAD,
                        help=f'Good->Bad probability (default: {cfg.P_GOOD_TO_BAD})')
    parser.add_argument('--timeout', type=int, default=cfg.ACK_TIMEOUT_MS,
                        help=f'ACK timeout in ms (default: {cfg.ACK_TIMEOUT_MS})')
    parser.add_argument('--retries', type=int, default=cfg.MAX_RETRIES,
                        help=f'Max retries (default: {cfg.MAX_RETRIES})')
    parser.add_argument('--seed', '-s', type=int, default=cfg.RNG_SEED_BASE,
                        help=f'Random seed (default: {cfg.RNG_SEED_BASE})')
    parser.add_argument('--messages', '-m', type=int, default=MESSAGES_PER_RUN,
                        help=f'Messages per run (default: {MESSAGES_PER_RUN})')

    # Parameter sweep options
    parser.add_argument('--runs', '-r', type=int,
                        default=RUNS_PER_CONFIGURATION,
                        help=f'Runs per configuration (default: {RUNS_PER_CONFIGURATION})')
    parser.add_argument('--parallel', action='store_true',
                        help='Run simulations in parallel')
    parser.add_argument('--workers', type=int, default=None,
                        help='Number of parallel workers')
    parser.add_argument('--quick', action='store_true',
                        help='Quick test with reduced parameters')

    # Output options
    parser.add_argument('--output', '-o', type=str,
                        help='Output file path')
    parser.add_argument('--csv', type=str,
                        help='CSV file for visualization')
    parser.add_argument('--log-file', type=str, default=None,
                        help='Also write simulator log lines to this file')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Verbose output')

    args = parser.parse_args(argv)

    if args.single:
        run_single_simulation(args)
    elif args.sweep:
        run_parameter_sweep(args)
    elif args.visualize:
        return generate_visualizations(args)
    elif args.config:
        return show_config(args)
    elif args.encode is not None:
        return encode_hex(args)
    elif args.decode is not None:
        return decode_hex(args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
