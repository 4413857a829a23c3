"""Command-line interface for the battery cost forecaster."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import click
import numpy as np
import pandas as pd
from tqdm import tqdm

from battery_cost_forecaster import __version__
from battery_cost_forecaster.chemistry import EDITABLE_FIELDS, Chemistry
from battery_cost_forecaster.core.adoption import UptakeShape
from battery_cost_forecaster.core.forecast import ForecastParameters, compute_forecast
from battery_cost_forecaster.core.session import ForecastSession
from battery_cost_forecaster.outputs import get_writer
from battery_cost_forecaster.utils.validators import validate_forecast

logger = logging.getLogger(__name__)

SHAPE_CHOICES = [shape.value for shape in UptakeShape]


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _parse_override(text: str) -> tuple[str, str, str]:
    """Split 'lfp.learning_rate=0.25' into ('lfp', 'learning_rate', '0.25')."""
    try:
        target, value = text.split("=", 1)
        chem_id, field_name = target.split(".", 1)
    except ValueError:
        raise click.BadParameter(
            f"'{text}' is not of the form <chemistry>.<field>=<value>", param_hint="--set"
        )
    if field_name not in EDITABLE_FIELDS:
        raise click.BadParameter(
            f"Unknown field '{field_name}'. Available: {list(EDITABLE_FIELDS)}", param_hint="--set"
        )
    return chem_id.strip().lower(), field_name.strip(), value.strip()


def _echo_summary(session: ForecastSession) -> None:
    result = session.result
    click.echo(f"\nForecast {result.years[0]}-{result.years[-1]} "
               f"({result.parameters.uptake_shape.value}, "
               f"{result.parameters.total_doublings:.2f} doublings):")
    for chem_id, summary in result.summaries.items():
        chemistry = session.chemistries[chem_id]
        click.echo(
            f"  {chemistry.name:<12} ${summary.baseline_cost:>7.2f} -> ${summary.final_cost:>7.2f} /kWh  "
            f"{summary.arrow} {abs(summary.percent_change):.1f}% vs baseline  "
            f"(floor ${summary.floor_cost:.2f})"
        )


@click.group()
@click.version_option(version=__version__, prog_name="battery-cost-forecaster")
def main():
    """
    Battery Pack Cost Forecaster

    Project per-kWh pack cost for LFP, NMC-811 and sodium-ion chemistries
    along an experience curve with a materials floor.
    """
    pass


@main.command()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Path to YAML scenario file",
)
@click.option("--start-year", type=int, default=None, help="First projected year")
@click.option(
    "--years", type=click.IntRange(min=1), default=None, help="Number of yearly forecast steps"
)
@click.option(
    "--doublings",
    type=click.FloatRange(min=0),
    default=None,
    help="Total doublings reached by the final year",
)
@click.option(
    "--shape",
    type=click.Choice(SHAPE_CHOICES, case_sensitive=False),
    default=None,
    help="Adoption shape",
)
@click.option(
    "--set",
    "overrides",
    multiple=True,
    help="Chemistry override, e.g. --set lfp.learning_rate=0.25 (repeatable)",
)
@click.option("--no-history", is_flag=True, help="Ignore historical data")
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default=None,
    help="Output CSV path (table is only printed if omitted)",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["forecast", "timeline"]),
    default=None,
    help="Output table layout",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Logging level",
)
def run(
    config: Path | None,
    start_year: int | None,
    years: int | None,
    doublings: float | None,
    shape: str | None,
    overrides: tuple[str, ...],
    no_history: bool,
    output: Path | None,
    output_format: str | None,
    log_level: str | None,
):
    """
    Compute a cost forecast.

    Examples:

    \b
    # Defaults: 2024 start, 12 years, 5 doublings, linear adoption
    battery-cost-forecaster run

    \b
    # Back-loaded adoption with a faster LFP learning rate
    battery-cost-forecaster run --shape back --set lfp.learning_rate=0.25

    \b
    # Scenario file, combined history + forecast written to CSV
    battery-cost-forecaster run --config config/scenario.yaml -f timeline -o out/timeline.csv
    """
    if config:
        from battery_cost_forecaster.utils.config_loader import load_config

        cfg = load_config(config)
        _configure_logging(log_level or cfg.log_level)
        click.echo(f"Loading scenario from: {config}")
        session = ForecastSession.from_config(cfg)
        write_summary = cfg.output.summary
        output_format = output_format or cfg.output.format
        if output is None and cfg.output.directory:
            output = Path(cfg.output.directory) / "forecast.csv"
    else:
        _configure_logging(log_level or "WARNING")
        session = ForecastSession()
        write_summary = True
        output_format = output_format or "forecast"

    if no_history:
        session.history_end_year = None

    try:
        if start_year is not None:
            session.apply_parameter_change("start_year", start_year)
        if years is not None:
            session.apply_parameter_change("forecast_years", years)
        if doublings is not None:
            session.apply_parameter_change("total_doublings", doublings)
        if shape is not None:
            session.apply_parameter_change("uptake_shape", shape.lower())
        for text in overrides:
            chem_id, field_name, value = _parse_override(text)
            if not session.apply_chemistry_change(chem_id, field_name, value):
                click.echo(f"Ignoring non-numeric override: {text}", err=True)
    except ValueError as e:
        raise click.BadParameter(str(e))

    for chem_id, messages in session.validate().items():
        for message in messages:
            logger.warning("%s: %s", chem_id, message)
            click.echo(f"Warning [{chem_id}]: {message}", err=True)

    result = session.recompute()
    for chem_id, checks in validate_forecast(result, session.chemistries).items():
        for check in checks:
            if not check.passed:
                logger.warning("%s: %s", chem_id, check.message)

    table = result.to_dataframe()
    click.echo("")
    click.echo(table.to_string(index=False, float_format=lambda v: f"{v:.2f}"))
    _echo_summary(session)

    if output is None:
        return

    data = session.timeline() if output_format == "timeline" else table
    with get_writer(output_format, output) as writer:
        writer.write_data(data)
        output_path = writer.output_path
    click.echo(f"\nOutput written to: {output_path}")
    if not write_summary:
        return

    summary_path = output_path.with_suffix(".json")
    with open(summary_path, "w") as f:
        json.dump(
            {
                "chemistries": {cid: chem.to_dict() for cid, chem in session.chemistries.items()},
                **result.to_dict(),
            },
            f,
            indent=2,
            allow_nan=False,
        )
    click.echo(f"Summary written to: {summary_path}")


@main.command()
@click.option("--min-doublings", type=float, default=0.0, help="Lowest total doublings")
@click.option("--max-doublings", type=float, default=8.0, help="Highest total doublings")
@click.option("--steps", type=click.IntRange(min=1), default=33, help="Number of sweep points")
@click.option("--years", type=click.IntRange(min=1), default=12, help="Forecast horizon in years")
@click.option(
    "--shape",
    type=click.Choice(SHAPE_CHOICES, case_sensitive=False),
    default=UptakeShape.LINEAR.value,
    help="Adoption shape",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="./output/doublings_sweep.csv",
    help="Output CSV path",
)
@click.option("--no-progress", is_flag=True, help="Disable progress bar")
def sweep(
    min_doublings: float,
    max_doublings: float,
    steps: int,
    years: int,
    shape: str,
    output: Path,
    no_progress: bool,
):
    """
    Sweep total doublings and record final-year cost per chemistry.

    Uses the default chemistry parameters.
    """
    if min_doublings < 0 or max_doublings < min_doublings:
        raise click.BadParameter(
            "need 0 <= --min-doublings <= --max-doublings", param_hint="--min-doublings"
        )

    chemistries = Chemistry.defaults()
    values = np.linspace(min_doublings, max_doublings, steps)
    if not no_progress:
        values = tqdm(values, desc="Sweeping doublings", unit="point")

    rows = []
    for total in values:
        parameters = ForecastParameters(
            forecast_years=years,
            total_doublings=float(total),
            uptake_shape=shape.lower(),
        )
        result = compute_forecast(chemistries, parameters)
        for chem_id, summary in result.summaries.items():
            rows.append(
                {
                    "total_doublings": float(total),
                    "chemistry": chem_id,
                    "final_cost": summary.final_cost,
                    "percent_change": summary.percent_change,
                }
            )

    frame = pd.DataFrame(rows)
    output.parent.mkdir(parents=True, exist_ok=True)
    frame.to_csv(output, index=False, float_format="%.4f")
    click.echo(f"Sweep of {steps} points written to: {output}")


@main.command()
def list_chemistries():
    """List available battery chemistries."""
    click.echo("\nAvailable Chemistries:")
    click.echo("-" * 40)

    for chem_id, chem in Chemistry.defaults().items():
        click.echo(f"\n  {chem_id}  {chem.name}")
        click.echo(f"    {chem.badge}")
        click.echo(f"    Baseline: ${chem.baseline_cost:.2f}/kWh")
        click.echo(f"    Floor: ${chem.floor_cost:.2f}/kWh")
        click.echo(f"    Learning rate: {chem.learning_rate * 100:.1f}% per doubling")


@main.command()
def list_shapes():
    """List available adoption shapes."""
    click.echo("\nAvailable Adoption Shapes:")
    click.echo("-" * 40)

    shapes = [
        ("linear", "Doublings accrue evenly over the horizon"),
        ("front", "Front-loaded: scale arrives early (t^0.65)"),
        ("back", "Back-loaded: scale arrives late (t^1.75)"),
        ("s-curve", "Logistic: slow start, fast middle, slow finish"),
    ]

    for name, description in shapes:
        click.echo(f"\n  {name}")
        click.echo(f"    {description}")


@main.command()
@click.option(
    "--output",
    "-o",
    type=click.Path(path_type=Path),
    default="./config/example_scenario.yaml",
    help="Output path for example scenario",
)
def init_config(output: Path):
    """Generate example scenario file."""
    example_config = """# Battery Cost Forecaster Scenario
# ================================

scenario:
  name: "Default cost outlook"
  log_level: "WARNING"     # DEBUG, INFO, WARNING, ERROR

forecast:
  start_year: 2024
  forecast_years: 12
  total_doublings: 5.0      # Cumulative doublings reached by the final year
  uptake_shape: "linear"    # linear, front, back, or s-curve

history:
  enabled: true
  end_year: 2024            # Last year of observed prices

chemistries:                # Overrides on top of the defaults
  lfp:
    learning_rate: 0.20
  nmc:
    floor_cost: 33.75
  sodium:
    baseline_cost: 87.0

output:
  format: "forecast"        # forecast or timeline
  directory: "./output"
  summary: true             # Write a JSON summary next to the CSV
"""
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w") as f:
        f.write(example_config)

    click.echo(f"Example scenario written to: {output}")
    click.echo("\nEdit this file and run:")
    click.echo(f"  battery-cost-forecaster run --config {output}")


if __name__ == "__main__":
    main()
