"""
Unit tests for the simulation logger.
"""

import pytest

from framelink.utils.logger import SimulationLogger, LogLevel, get_logger, set_logger


class TestSimulationLogger:
    """Tests for SimulationLogger."""

    def test_level_filter(self, capsys):
        """Test that messages below the level are dropped."""
        logger = SimulationLogger(level=LogLevel.WARNING, use_colors=False)

        logger.info("hidden")
        logger.warning("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
        assert logger.get_summary()['total_messages'] == 1

    def test_sim_time_stamp(self, capsys):
        """Test that logical time is printed in milliseconds."""
        logger = SimulationLogger(name="Link", level=LogLevel.DEBUG, use_colors=False)
        logger.set_sim_time(1500)

        logger.timeout(1, 3)

        out = capsys.readouterr().out
        assert "[    1500ms]" in out
        assert "[TIMEOUT]" in out
        assert "retry 1/3" in out

    def test_log_file_strips_colors(self, tmp_path):
        """Test that file output carries no ANSI codes."""
        path = tmp_path / "logs" / "run.log"
        logger = SimulationLogger(level=LogLevel.DEBUG, log_file=str(path))

        logger.frame_rejected("zero length")
        logger.close()

        text = path.read_text()
        assert "zero length" in text
        assert "\033[" not in text

    def test_global_logger(self):
        """Test replacing the process-wide logger."""
        original = get_logger()
        replacement = SimulationLogger(name="Other")
        try:
            set_logger(replacement)
            assert get_logger() is replacement
        finally:
            set_logger(original)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
