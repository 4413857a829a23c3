"""Tests for the command-line interface."""

import json

import pandas as pd
import pytest
from click.testing import CliRunner

from battery_cost_forecaster.cli import main


@pytest.fixture
def runner():
    return CliRunner()


class TestRunCommand:
    """Test the run command."""

    def test_defaults(self, runner):
        """Test default forecast prints table and summary."""
        result = runner.invoke(main, ["run"])
        assert result.exit_code == 0, result.output
        assert "2035" in result.output
        assert "NMC-811" in result.output
        assert "vs baseline" in result.output

    def test_writes_forecast_and_summary(self, runner, tmp_path):
        """Test CSV and JSON outputs."""
        out = tmp_path / "forecast.csv"
        result = runner.invoke(
            main, ["run", "--shape", "s-curve", "--years", "11", "--doublings", "4", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output

        df = pd.read_csv(out)
        assert len(df) == 11
        assert df["doublings"].iloc[5] == pytest.approx(2.0)

        summary = json.loads(out.with_suffix(".json").read_text())
        assert summary["parameters"]["uptake_shape"] == "s-curve"
        assert summary["chemistries"]["lfp"]["baseline_cost"] == 59.0

    def test_timeline_format(self, runner, tmp_path):
        """Test combined timeline output."""
        out = tmp_path / "timeline.csv"
        result = runner.invoke(main, ["run", "-f", "timeline", "-o", str(out)])
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out)
        assert set(df["chemistry"]) == {"lfp", "nmc", "sodium"}
        assert df["year"].min() == 2010

    def test_overrides(self, runner, tmp_path):
        """Test --set overrides reach the forecast."""
        out = tmp_path / "forecast.csv"
        result = runner.invoke(
            main,
            ["run", "--set", "lfp.baseline_cost=70", "--set", "lfp.learning_rate=0.3", "-o", str(out)],
        )
        assert result.exit_code == 0, result.output
        df = pd.read_csv(out)
        assert df["lfp"].iloc[0] == pytest.approx(70.0)

    def test_non_numeric_override_ignored(self, runner):
        """Test non-numeric override values are reported and skipped."""
        result = runner.invoke(main, ["run", "--set", "lfp.learning_rate=fast"])
        assert result.exit_code == 0
        assert "Ignoring non-numeric override" in result.output

    def test_bad_override(self, runner):
        """Test malformed or unknown overrides are usage errors."""
        assert runner.invoke(main, ["run", "--set", "lfp.color=red"]).exit_code != 0
        assert runner.invoke(main, ["run", "--set", "learning_rate=0.2"]).exit_code != 0
        assert runner.invoke(main, ["run", "--set", "lto.floor_cost=10"]).exit_code != 0

    def test_zero_years_rejected(self, runner):
        result = runner.invoke(main, ["run", "--years", "0"])
        assert result.exit_code != 0

    def test_floor_above_baseline_warns(self, runner):
        """Test advisory warning for floor above baseline."""
        result = runner.invoke(main, ["run", "--set", "nmc.floor_cost=90"])
        assert result.exit_code == 0
        assert "Warning [nmc]" in result.output
        assert "▲" in result.output

    def test_config_file(self, runner, tmp_path):
        """Test run from a generated scenario file."""
        config = tmp_path / "scenario.yaml"
        out = tmp_path / "from_config.csv"
        assert runner.invoke(main, ["init-config", "-o", str(config)]).exit_code == 0

        result = runner.invoke(main, ["run", "--config", str(config), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert len(pd.read_csv(out)) == 12

    def test_negative_doublings_rejected(self, runner):
        """Test negative doublings are a usage error, not a rising forecast."""
        result = runner.invoke(main, ["run", "--doublings", "-3"])
        assert result.exit_code == 2
        assert "--doublings" in result.output

    def test_summary_disabled_in_config(self, runner, tmp_path):
        """Test output.summary: false skips the JSON file."""
        config = tmp_path / "scenario.yaml"
        config.write_text("output:\n  summary: false\n")
        out = tmp_path / "forecast.csv"

        result = runner.invoke(main, ["run", "--config", str(config), "-o", str(out)])
        assert result.exit_code == 0, result.output
        assert out.exists()
        assert not out.with_suffix(".json").exists()

    def test_zero_baseline_summary_is_valid_json(self, runner, tmp_path):
        """Test an undefined percent change is written as null."""
        out = tmp_path / "forecast.csv"
        result = runner.invoke(main, ["run", "--set", "lfp.baseline_cost=0", "-o", str(out)])
        assert result.exit_code == 0, result.output

        text = out.with_suffix(".json").read_text()
        assert "NaN" not in text
        summary = json.loads(text)
        assert summary["summaries"]["lfp"]["percent_change"] is None


class TestOtherCommands:
    """Test sweep and listing commands."""

    def test_sweep(self, runner, tmp_path):
        """Test doublings sweep output."""
        out = tmp_path / "sweep.csv"
        result = runner.invoke(
            main, ["sweep", "--steps", "5", "--max-doublings", "4", "--no-progress", "-o", str(out)]
        )
        assert result.exit_code == 0, result.output

        df = pd.read_csv(out)
        assert len(df) == 15
        lfp = df[df["chemistry"] == "lfp"]
        assert lfp["total_doublings"].tolist() == pytest.approx([0.0, 1.0, 2.0, 3.0, 4.0])
        assert lfp["final_cost"].is_monotonic_decreasing

    def test_sweep_bad_range(self, runner, tmp_path):
        result = runner.invoke(
            main, ["sweep", "--min-doublings", "5", "--max-doublings", "2", "-o", str(tmp_path / "s.csv")]
        )
        assert result.exit_code != 0

    def test_sweep_zero_years_rejected(self, runner, tmp_path):
        """Test an empty horizon is a usage error."""
        result = runner.invoke(
            main, ["sweep", "--years", "0", "--no-progress", "-o", str(tmp_path / "s.csv")]
        )
        assert result.exit_code == 2
        assert "--years" in result.output

    def test_sweep_zero_steps_rejected(self, runner, tmp_path):
        result = runner.invoke(
            main, ["sweep", "--steps", "0", "--no-progress", "-o", str(tmp_path / "s.csv")]
        )
        assert result.exit_code == 2

    def test_list_chemistries(self, runner):
        result = runner.invoke(main, ["list-chemistries"])
        assert result.exit_code == 0
        assert "Sodium-ion" in result.output
        assert "20.0% per doubling" in result.output

    def test_list_shapes(self, runner):
        result = runner.invoke(main, ["list-shapes"])
        assert result.exit_code == 0
        for shape in ("linear", "front", "back", "s-curve"):
            assert shape in result.output

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert "1.0.0" in result.output
