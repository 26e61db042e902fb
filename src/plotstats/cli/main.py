"""Main CLI entrypoint using Typer."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import matplotlib
import typer

matplotlib.use("Agg")

from plotstats import __version__
from plotstats.config import StatsOptions, load_options
from plotstats.data.loaders import load_table
from plotstats.exceptions import PlotStatsError
from plotstats.plots import (
    ggbarstats,
    ggbetweenstats,
    gghistostats,
    ggpiestats,
    ggscatterstats,
    ggwithinstats,
    grouped_ggbarstats,
    grouped_ggbetweenstats,
    grouped_gghistostats,
    grouped_ggpiestats,
    grouped_ggscatterstats,
    grouped_ggwithinstats,
)
from plotstats.subtitles.dispatch import subtitle as make_subtitle

app = typer.Typer(
    name="plotstats",
    help="Statistical plots with test results in the subtitle.",
    add_completion=False,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

# kind -> (plot, grouped plot, needs y, column roles)
PLOT_KINDS = {
    "histostats": (gghistostats, grouped_gghistostats, False, ("x",)),
    "scatterstats": (ggscatterstats, grouped_ggscatterstats, True, ("x", "y")),
    "betweenstats": (ggbetweenstats, grouped_ggbetweenstats, True, ("x", "y")),
    "withinstats": (ggwithinstats, grouped_ggwithinstats, True, ("x", "y")),
    "piestats": (ggpiestats, grouped_ggpiestats, False, ("main", "condition")),
    "barstats": (ggbarstats, grouped_ggbarstats, True, ("main", "condition")),
}


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"plotstats {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """plotstats: statistical plots with test results in the subtitle."""
    pass


def _options(config: Optional[Path], **overrides) -> StatsOptions:
    base = load_options(config) if config is not None else StatsOptions()
    return base.updated(**overrides)


@app.command()
def subtitle(
    data: Path = typer.Option(..., "--data", help="Path to data file (.csv, .parquet) or parquet directory."),
    family: str = typer.Option(
        ..., "--family", help="Test family: onesample, twosample, anova, correlation, contingency, proportion."
    ),
    x: str = typer.Option(..., "--x", help="First column (main variable for contingency/proportion)."),
    y: Optional[str] = typer.Option(None, "--y", help="Second column (condition for contingency)."),
    test_type: Optional[str] = typer.Option(
        None, "--type", help="parametric, nonparametric, robust or bayes (p, np, r, bf)."
    ),
    paired: Optional[bool] = typer.Option(None, "--paired/--unpaired", help="Within-subjects design."),
    k: Optional[int] = typer.Option(None, "--k", help="Decimal places."),
    conf_level: Optional[float] = typer.Option(None, "--conf-level", help="Confidence level."),
    nboot: Optional[int] = typer.Option(None, "--nboot", help="Bootstrap resamples."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for bootstrap intervals."),
    test_value: Optional[float] = typer.Option(None, "--test-value", help="One-sample reference value."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with options."),
):
    """Run a test and print its subtitle as plain text."""
    try:
        options = _options(
            config,
            type=test_type,
            paired=paired,
            k=k,
            conf_level=conf_level,
            nboot=nboot,
            seed=seed,
            test_value=test_value,
        )
        df = load_table(data)
        result = make_subtitle(df, family, x, y, options=options)
    except (PlotStatsError, ValueError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.echo(str(result) if result is not None else "")


@app.command()
def plot(
    kind: str = typer.Argument(..., help=f"One of: {', '.join(PLOT_KINDS)}."),
    data: Path = typer.Option(..., "--data", help="Path to data file (.csv, .parquet) or parquet directory."),
    x: str = typer.Option(..., "--x", help="First column (main variable for pie/bar charts)."),
    y: Optional[str] = typer.Option(None, "--y", help="Second column (condition for pie/bar charts)."),
    grouping_var: Optional[str] = typer.Option(None, "--grouping-var", help="Draw one panel per level."),
    out: Path = typer.Option(..., "--out", help="Output image path (.png, .pdf, .svg)."),
    test_type: Optional[str] = typer.Option(None, "--type", help="parametric, nonparametric, robust or bayes."),
    k: Optional[int] = typer.Option(None, "--k", help="Decimal places."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for bootstrap intervals."),
    title: Optional[str] = typer.Option(None, "--title", help="Plot title."),
    config: Optional[Path] = typer.Option(None, "--config", help="YAML file with options."),
    dpi: int = typer.Option(160, "--dpi", help="Output resolution."),
):
    """Render a statistical plot to an image file."""
    if kind not in PLOT_KINDS:
        typer.secho(f"Error: Invalid plot kind '{kind}'. Must be one of: {', '.join(PLOT_KINDS)}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    plot_func, grouped_func, needs_y, roles = PLOT_KINDS[kind]
    if needs_y and y is None:
        typer.secho(f"Error: '{kind}' needs --y", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        options = _options(config, type=test_type, k=k, seed=seed)
        df = load_table(data)

        columns = dict(zip(roles, (x, y)))
        if "condition" in columns and columns["condition"] is None:
            del columns["condition"]

        if grouping_var is not None:
            rendered = grouped_func(df, grouping_var=grouping_var, title=title, options=options, **columns)
        else:
            rendered = plot_func(df, title=title, options=options, **columns)

        path = rendered.savefig(out, dpi=dpi)
    except (PlotStatsError, ValueError, FileNotFoundError) as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    typer.secho(f"✓ Plot saved to {path}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
