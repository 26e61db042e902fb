from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest
from typer.testing import CliRunner

from plotstats import __version__
from plotstats.cli.main import app
from plotstats.subtitles import subtitle_groups


@pytest.fixture
def groups_csv(tmp_path: Path) -> Path:
    np.random.seed(42)
    df = pd.DataFrame(
        {
            "cond": np.repeat(["a", "b", "c"], 20),
            "y": np.concatenate([np.random.normal(m, 1, 20) for m in (0.0, 0.5, 1.0)]),
            "site": np.tile(["north", "south"], 30),
        }
    )
    path = tmp_path / "groups.csv"
    df.to_csv(path, index=False)
    return path


def test_cli_version_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert f"plotstats {__version__}" in result.stdout


def test_cli_subtitle_matches_api(groups_csv: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        [
            "subtitle",
            "--data", str(groups_csv),
            "--family", "anova",
            "--x", "cond",
            "--y", "y",
            "--type", "np",
            "--seed", "1",
            "--k", "3",
        ],
    )
    assert result.exit_code == 0, result.output

    expected = subtitle_groups(pd.read_csv(groups_csv), "cond", "y", type="np", seed=1, k=3)
    assert result.stdout.strip().splitlines()[-1] == str(expected)


def test_cli_subtitle_uses_config(groups_csv: Path, tmp_path: Path) -> None:
    config = tmp_path / "options.yaml"
    config.write_text("conf.level: 0.9\nnboot: 20\nseed: 3\n", encoding="utf-8")

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["subtitle", "--data", str(groups_csv), "--family", "anova", "--x", "cond", "--y", "y", "--config", str(config)],
    )
    assert result.exit_code == 0, result.output
    assert "CI90%" in result.stdout


def test_cli_subtitle_reports_bad_type(groups_csv: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["subtitle", "--data", str(groups_csv), "--family", "anova", "--x", "cond", "--y", "y", "--type", "bogus"],
    )
    assert result.exit_code == 1
    assert "Error: Unsupported test type 'bogus'" in result.output


def test_cli_subtitle_missing_file(tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["subtitle", "--data", str(tmp_path / "missing.csv"), "--family", "onesample", "--x", "y"],
    )
    assert result.exit_code == 1
    assert "Error:" in result.output


def test_cli_plot_smoke(groups_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "plots" / "between.png"
    result = runner.invoke(
        app,
        ["plot", "betweenstats", "--data", str(groups_csv), "--x", "cond", "--y", "y", "--out", str(out), "--seed", "1"],
    )
    assert result.exit_code == 0, result.output
    assert out.exists()
    assert "Plot saved to" in result.stdout


def test_cli_grouped_plot_smoke(groups_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    out = tmp_path / "hist.png"
    result = runner.invoke(
        app,
        ["plot", "histostats", "--data", str(groups_csv), "--x", "y", "--grouping-var", "site", "--out", str(out)],
    )
    assert result.exit_code == 0, result.output
    assert out.exists()


def test_cli_plot_rejects_unknown_kind(groups_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["plot", "heatmap", "--data", str(groups_csv), "--x", "y", "--out", str(tmp_path / "x.png")],
    )
    assert result.exit_code == 1
    assert "Invalid plot kind" in result.output


def test_cli_plot_needs_y(groups_csv: Path, tmp_path: Path) -> None:
    runner = CliRunner()
    result = runner.invoke(
        app,
        ["plot", "scatterstats", "--data", str(groups_csv), "--x", "y", "--out", str(tmp_path / "x.png")],
    )
    assert result.exit_code == 1
    assert "needs --y" in result.output
