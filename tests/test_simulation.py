"""
Tests for the simulator, the batch runner, the heatmap and the CLI.
"""

import csv
import os

import pytest

from framelink.main import main
from framelink.simulation.runner import BatchRunner, RunConfig, run_single_simulation
from framelink.simulation.simulator import Simulator, SimulatorConfig, generate_payloads
from framelink.utils.logger import LogLevel
from framelink.utils.metrics import MetricsCollector
from framelink.visualization.heatmap import DeliveryHeatmap


def clean_config(**kwargs):
    """Simulator configuration for a channel that never corrupts."""
    params = dict(
        good_ber=0.0, bad_ber=0.0, p_good_to_bad=0.0,
        messages=5, payload_size=16, log_level=LogLevel.CRITICAL
    )
    params.update(kwargs)
    return SimulatorConfig(**params)


class TestMetricsCollector:
    """Tests for metrics calculation."""

    def test_empty_summary(self):
        """Test that an unused collector reports zeros."""
        summary = MetricsCollector().get_summary()

        assert summary['delivery_rate'] == 0.0
        assert summary['efficiency'] == 0.0
        assert summary['latency']['samples'] == 0

    def test_rates(self):
        """Test delivery, retransmission and efficiency figures."""
        metrics = MetricsCollector()
        metrics.start(0)
        for _ in range(4):
            metrics.record_message_offered(10)
            metrics.record_frame_sent(10)
        metrics.record_frame_sent(10, retransmission=True)
        for _ in range(3):
            metrics.record_delivery(10)
        metrics.finish(1000)

        assert metrics.calculate_delivery_rate() == 0.75
        assert metrics.calculate_retransmission_rate() == 0.25
        assert metrics.wire_bytes_sent == 5 * (10 + 4)
        assert metrics.calculate_efficiency() == 30 / 70
        assert metrics.calculate_goodput() == 30.0

    def test_csv_row_is_flat(self):
        """Test that the CSV row flattens latency statistics."""
        metrics = MetricsCollector()
        metrics.record_latency(10)
        metrics.record_latency(30)

        row = metrics.to_csv_row()

        assert row['latency_mean'] == 20
        assert 'latency' not in row


class TestSimulator:
    """Tests for the tick-driven simulator."""

    def test_clean_channel(self):
        """Test that every message is delivered once on a clean channel."""
        results = Simulator(clean_config()).run()
        metrics = results['metrics']

        assert results['complete']
        assert results['verification']['valid']
        assert metrics['delivery_rate'] == 1.0
        assert metrics['frames_sent'] == 5
        assert metrics['wire_bytes_sent'] == 5 * (16 + 4)
        assert metrics['retransmissions'] == 0
        assert metrics['duplicates'] == 0
        assert metrics['latency']['mean'] == 10
        assert results['ticks'] == 10
        assert results['simulation_time'] == 100

    def test_explicit_payloads(self):
        """Test sending caller-supplied payloads."""
        results = Simulator(clean_config()).run([b"a", b"bc", b"def"])

        assert results['verification']['delivered'] == 3
        assert results['metrics']['payload_bytes_delivered'] == 6

    def test_tick_budget_abandons(self):
        """Test that messages exceeding the tick budget count as failed."""
        results = Simulator(clean_config(max_ticks_per_message=1)).run()

        assert not results['complete']
        assert results['metrics']['messages_failed'] == 5

    def test_noisy_channel_retransmits(self):
        """Test that a bursty channel forces retransmissions."""
        config = SimulatorConfig(
            payload_size=64, messages=10, p_good_to_bad=0.05, bad_ber=0.05,
            ack_timeout_ms=50, seed=7, log_level=LogLevel.CRITICAL
        )
        results = Simulator(config).run()
        metrics = results['metrics']

        assert metrics['retransmissions'] > 0
        assert 0.0 <= metrics['delivery_rate'] <= 1.0
        assert metrics['messages_offered'] == 10

    def test_reproducible(self):
        """Test that the same seed gives the same outcome."""
        config = dict(payload_size=32, messages=5, p_good_to_bad=0.02,
                      ack_timeout_ms=50, seed=11, log_level=LogLevel.CRITICAL)

        first = Simulator(SimulatorConfig(**config)).run()
        second = Simulator(SimulatorConfig(**config)).run()

        assert first['metrics'] == second['metrics']
        assert first['simulation_time'] == second['simulation_time']

    def test_log_file(self, tmp_path):
        """Test that simulator events are copied to a log file."""
        path = tmp_path / "sim.log"
        sim = Simulator(clean_config(messages=1, log_level=LogLevel.INFO, log_file=str(path)))

        sim.run()
        sim.logger.close()

        text = path.read_text()
        assert "Simulation started" in text
        assert "Simulation ended" in text

    def test_generate_payloads(self):
        """Test payload generation sizes and determinism."""
        payloads = generate_payloads(3, 12, seed=5)

        assert [len(p) for p in payloads] == [12, 12, 12]
        assert payloads == generate_payloads(3, 12, seed=5)

    def test_invalid_tick(self):
        """Test that a non-positive tick length is rejected."""
        with pytest.raises(ValueError):
            SimulatorConfig(tick_ms=0)


class TestBatchRunner:
    """Tests for the parameter sweep runner."""

    def test_sequential_sweep(self, tmp_path):
        """Test a small sweep end to end, including CSV output."""
        output = str(tmp_path / "results.csv")
        runner = BatchRunner(
            loss_probabilities=[0.0, 0.01],
            payload_sizes=[8, 32],
            runs_per_config=1,
            messages=3,
            output_file=output,
            show_progress=False
        )

        results = runner.run_sequential()
        runner.save_results()

        assert len(results) == runner.total_runs == 4
        assert all(r['error'] is None for r in results)
        assert os.path.exists(output)
        with open(output, newline='') as f:
            assert len(list(csv.DictReader(f))) == 4

        aggregated = runner.get_aggregated_results()
        assert set(aggregated) == {(0.0, 8), (0.0, 32), (0.01, 8), (0.01, 32)}
        assert aggregated[(0.0, 8)]['runs'] == 1
        assert aggregated[(0.0, 8)]['failures'] == 0

        best = runner.get_most_reliable_configuration()
        assert best['mean_delivery_rate'] == 1.0

    def test_failed_run_is_recorded(self):
        """Test that an exception inside a run becomes an error row."""
        result = run_single_simulation(
            RunConfig(p_good_to_bad=0.0, payload_size=0, run_id=0, seed=1, messages=1)
        )

        assert result['error']
        assert result['delivery_rate'] == 0

    def test_no_results(self):
        """Test reporting before any run."""
        runner = BatchRunner(show_progress=False)

        assert runner.save_results() is None
        assert 'error' in runner.get_most_reliable_configuration()


class TestDeliveryHeatmap:
    """Tests for heatmap generation."""

    @staticmethod
    def sample_results():
        results = []
        for p in (0.0, 0.01):
            for size in (8, 64):
                for run in range(2):
                    results.append({
                        'p_good_to_bad': p,
                        'payload_size': size,
                        'run_id': run,
                        'delivery_rate': 1.0 - p * size / 2,
                        'error': None
                    })
        return results

    def test_matrix(self):
        """Test pivoting results into a rate matrix."""
        heatmap = DeliveryHeatmap(results=self.sample_results())

        matrix = heatmap.create_matrix()

        assert matrix.shape == (2, 2)
        assert list(matrix.index) == [0.01, 0.0]
        assert matrix.loc[0.01, 64] == pytest.approx(0.68)

    def test_find_best(self):
        """Test locating the highest delivery rate."""
        p, size, value = DeliveryHeatmap(results=self.sample_results()).find_best()

        assert p == 0.0
        assert value == 1.0

    def test_plot_from_csv(self, tmp_path):
        """Test rendering a heatmap from a results file."""
        csv_file = tmp_path / "results.csv"
        rows = self.sample_results()
        with open(csv_file, 'w', newline='') as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)

        output = DeliveryHeatmap(csv_file=str(csv_file)).plot(
            output_file=str(tmp_path / "plots" / "heatmap.png")
        )

        assert os.path.exists(output)

    def test_empty_results(self):
        """Test that plotting nothing is an error."""
        with pytest.raises(ValueError):
            DeliveryHeatmap().create_matrix()


class TestCommandLine:
    """Tests for the framelink command."""

    def test_encode(self, capsys):
        """Test encoding a hex payload."""
        assert main(["--encode", "1020"]) == 0
        assert capsys.readouterr().out == "02 02 10 20 30 03\n"

    def test_encode_invalid(self, capsys):
        """Test that an empty payload is reported."""
        assert main(["--encode", ""]) == 1

    def test_decode(self, capsys):
        """Test decoding a frame preceded by noise."""
        assert main(["--decode", "ff 02 02 10 20 30 03"]) == 0
        assert "FRAME_READY len=2 payload=10 20" in capsys.readouterr().out

    def test_decode_bad_checksum(self, capsys):
        """Test decoding a frame with a corrupted checksum."""
        assert main(["--decode", "02 02 10 20 ff 03"]) == 1
        assert "CHECKSUM_INVALID" in capsys.readouterr().out

    def test_config(self, capsys):
        """Test printing the configuration."""
        assert main(["--config"]) == 0
        assert "ACK timeout" in capsys.readouterr().out

    def test_visualize_missing_csv(self, tmp_path, capsys):
        """Test visualizing without a results file."""
        assert main(["--visualize", "--csv", str(tmp_path / "none.csv")]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
