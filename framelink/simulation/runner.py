"""
Batch Runner for Parameter Sweep Simulations

Runs the link simulator over every (P(G->B), payload size) pair with a
fixed acknowledgment timeout and retry limit, several seeded runs per pair,
and collects one result row per run for CSV export and aggregation.
"""

import os
import csv
import time
import statistics
from typing import Optional, Iterable, List, Dict
from dataclasses import dataclass
from concurrent.futures import ProcessPoolExecutor, as_completed
import multiprocessing

from tqdm import tqdm

from framelink.config import (
    LOSS_PROBABILITIES, PAYLOAD_SIZES, RUNS_PER_CONFIGURATION,
    MESSAGES_PER_RUN, RNG_SEED_BASE, OUTPUT_DIR, RESULTS_CSV,
    ACK_TIMEOUT_MS, MAX_RETRIES
)
from framelink.simulation.simulator import Simulator, SimulatorConfig
from framelink.utils.logger import LogLevel


@dataclass
class RunConfig:
    """Parameters of one seeded run."""
    p_good_to_bad: float
    payload_size: int
    run_id: int
    seed: int
    messages: int
    ack_timeout_ms: int = ACK_TIMEOUT_MS
    max_retries: int = MAX_RETRIES


def run_single_simulation(run_config: RunConfig) -> Dict:
    """
    Run one simulation and flatten it into a result row.

    Runs execute in worker processes, so a failure comes back as a row with
    the error text instead of being raised.
    """
    row = {
        'p_good_to_bad': run_config.p_good_to_bad,
        'payload_size': run_config.payload_size,
        'run_id': run_config.run_id,
        'seed': run_config.seed,
    }

    try:
        results = Simulator(SimulatorConfig(
            p_good_to_bad=run_config.p_good_to_bad,
            payload_size=run_config.payload_size,
            messages=run_config.messages,
            ack_timeout_ms=run_config.ack_timeout_ms,
            max_retries=run_config.max_retries,
            seed=run_config.seed,
            log_level=LogLevel.CRITICAL
        )).run()
    except Exception as e:
        row.update(delivery_rate=0, error=str(e))
        return row

    metrics = results['metrics']
    transmitter = results['transmitter']
    row.update(
        delivery_rate=metrics['delivery_rate'],
        goodput=metrics['goodput'],
        efficiency=metrics['efficiency'],
        retransmissions=metrics['retransmissions'],
        retransmission_rate=metrics['retransmission_rate'],
        timeouts=transmitter['timeouts'],
        naks_received=transmitter['naks_received'],
        unknown_acks=transmitter['unknown_acks'],
        messages_failed=metrics['messages_failed'],
        duplicates=metrics['duplicates'],
        mismatches=metrics['mismatches'],
        latency_mean=metrics['latency']['mean'],
        total_time_ms=results['simulation_time'],
        data_valid=results['verification']['valid'],
        complete=results['complete'],
        error=None
    )
    return row


class BatchRunner:
    """
    Sweep of burst onset probability against payload size.

    Attributes:
        loss_probabilities: P(G->B) values to test
        payload_sizes: Payload sizes to test (bytes)
        runs_per_config: Seeded runs per pair
        messages: Messages sent per run
        results: Result rows of the last sweep
    """

    def __init__(
        self,
        loss_probabilities: Optional[List[float]] = None,
        payload_sizes: Optional[List[int]] = None,
        runs_per_config: int = RUNS_PER_CONFIGURATION,
        messages: int = MESSAGES_PER_RUN,
        ack_timeout_ms: int = ACK_TIMEOUT_MS,
        max_retries: int = MAX_RETRIES,
        output_file: str = RESULTS_CSV,
        show_progress: bool = True
    ):
        self.loss_probabilities = loss_probabilities or LOSS_PROBABILITIES
        self.payload_sizes = payload_sizes or PAYLOAD_SIZES
        self.runs_per_config = runs_per_config
        self.messages = messages
        self.ack_timeout_ms = ack_timeout_ms
        self.max_retries = max_retries
        self.output_file = output_file
        self.show_progress = show_progress

        self.results: List[Dict] = []
        self.total_runs = (len(self.loss_probabilities) *
                           len(self.payload_sizes) *
                           self.runs_per_config)

    def _generate_run_configs(self) -> List[RunConfig]:
        configs = []
        for p_index, p_good_to_bad in enumerate(self.loss_probabilities):
            for payload_size in self.payload_sizes:
                for run_id in range(self.runs_per_config):
                    configs.append(RunConfig(
                        p_good_to_bad=p_good_to_bad,
                        payload_size=payload_size,
                        run_id=run_id,
                        seed=RNG_SEED_BASE + p_index * 1000 + payload_size + run_id * 10000,
                        messages=self.messages,
                        ack_timeout_ms=self.ack_timeout_ms,
                        max_retries=self.max_retries
                    ))
        return configs

    def _collect(self, rows: Iterable[Dict], mode: str) -> List[Dict]:
        started = time.time()
        print(f"Running {self.total_runs} simulations {mode}...")

        self.results = list(tqdm(rows, total=self.total_runs, desc="Simulations",
                                 disable=not self.show_progress))

        print(f"Completed {self.total_runs} simulations in {time.time() - started:.1f}s")
        return self.results

    def run_sequential(self) -> List[Dict]:
        """Run every configuration in this process."""
        configs = self._generate_run_configs()
        return self._collect((run_single_simulation(c) for c in configs), "sequentially")

    def run_parallel(self, max_workers: Optional[int] = None) -> List[Dict]:
        """
        Run every configuration in a process pool.

        Args:
            max_workers: Number of worker processes (default: CPU count)

        Returns:
            Result rows in completion order
        """
        max_workers = max_workers or multiprocessing.cpu_count()
        configs = self._generate_run_configs()

        with ProcessPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(run_single_simulation, c) for c in configs]
            return self._collect(
                (f.result() for f in as_completed(futures)),
                f"with {max_workers} workers"
            )

    def save_results(self, filepath: Optional[str] = None) -> Optional[str]:
        """
        Save results to CSV file.

        Args:
            filepath: Output file path (default: self.output_file)

        Returns:
            Path written, or None when there is nothing to save
        """
        filepath = filepath or self.output_file

        if not self.results:
            print("No results to save!")
            return None

        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)

        # Error rows carry fewer columns than successful ones
        fieldnames = []
        for result in self.results:
            for key in result:
                if key not in fieldnames:
                    fieldnames.append(key)

        with open(filepath, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            writer.writerows(self.results)

        print(f"Results saved to: {filepath}")
        return filepath

    def get_aggregated_results(self) -> Dict:
        """
        Get per-pair statistics over successful runs.

        Returns:
            Dictionary keyed by (p_good_to_bad, payload_size)
        """
        grouped: Dict[tuple, List[Dict]] = {}
        for result in self.results:
            if not result.get('error'):
                key = (result['p_good_to_bad'], result['payload_size'])
                grouped.setdefault(key, []).append(result)

        aggregated = {}
        for (p, size), rows in grouped.items():
            rates = [r['delivery_rate'] for r in rows]
            latencies = [r['latency_mean'] for r in rows if r['latency_mean'] > 0]
            aggregated[(p, size)] = {
                'p_good_to_bad': p,
                'payload_size': size,
                'runs': len(rows),
                'delivery_rate_mean': statistics.mean(rates),
                'delivery_rate_std': statistics.stdev(rates) if len(rates) > 1 else 0,
                'delivery_rate_min': min(rates),
                'retx_mean': statistics.mean(r['retransmissions'] for r in rows),
                'efficiency_mean': statistics.mean(r['efficiency'] for r in rows),
                'failures': sum(r['messages_failed'] for r in rows),
                'latency_mean_avg': statistics.mean(latencies) if latencies else None
            }

        return aggregated

    def get_most_reliable_configuration(self) -> Dict:
        """
        Find the pair with the highest mean delivery rate.

        Ties go to fewer retransmissions.
        """
        aggregated = self.get_aggregated_results()

        if not aggregated:
            return {'error': 'No results available'}

        best_key = max(
            aggregated,
            key=lambda k: (aggregated[k]['delivery_rate_mean'],
                           -aggregated[k]['retx_mean'])
        )
        best = aggregated[best_key]

        return {
            'p_good_to_bad': best_key[0],
            'payload_size': best_key[1],
            'mean_delivery_rate': best['delivery_rate_mean'],
            'delivery_rate_std': best['delivery_rate_std'],
            'mean_efficiency': best['efficiency_mean'],
            'mean_retransmissions': best['retx_mean']
        }


if __name__ == "__main__":
    print("=" * 60)
    print("BATCH RUNNER TEST")
    print("=" * 60)

    runner = BatchRunner(
        loss_probabilities=[0.0, 0.005],
        payload_sizes=[16, 128],
        runs_per_config=2,
        messages=10,
        output_file=os.path.join(OUTPUT_DIR, "test_results.csv")
    )
    print(f"\n  P(G->B): {runner.loss_probabilities}")
    print(f"  Payload sizes: {runner.payload_sizes}")
    print(f"  Total runs: {runner.total_runs}")

    runner.run_sequential()
    runner.save_results()

    print("\nAggregated results:")
    for (p, size), data in runner.get_aggregated_results().items():
        print(f"  p={p}, L={size}: "
              f"Delivery={data['delivery_rate_mean']*100:.1f}%, "
              f"Efficiency={data['efficiency_mean']*100:.1f}%")

    best = runner.get_most_reliable_configuration()
    print(f"\nMost reliable: p={best['p_good_to_bad']}, L={best['payload_size']}, "
          f"{best['mean_delivery_rate']*100:.1f}% delivered")
