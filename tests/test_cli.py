import sys

import matplotlib
import pytest

from blackhole_renders import __main__ as cli


def run_cli(monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", ["blackhole-renders", *args])
    cli.main()


def test_render_flag_writes_png(monkeypatch, tmp_path):
    run_cli(monkeypatch, "--render", "--res", "16", "--passes", "1", "--batch", "500",
            "--iterations", "100", "--workers", "1", "--output", str(tmp_path))
    assert (tmp_path / "blackhole_16x12.png").exists()


def test_verify_flag_passes(monkeypatch):
    # Exits non-zero only on failure
    run_cli(monkeypatch, "--verify")


def test_verify_flag_exits_on_failure(monkeypatch):
    monkeypatch.setattr(cli, "run_physical_verification", lambda renderer: False)
    with pytest.raises(SystemExit) as excinfo:
        run_cli(monkeypatch, "--verify")
    assert excinfo.value.code == 1


def test_paths_flag(monkeypatch, tmp_path):
    matplotlib.use("Agg")
    run_cli(monkeypatch, "--paths", "--iterations", "200", "--output", str(tmp_path))
    assert (tmp_path / "photon_paths.png").exists()


def test_no_flags_prints_help(monkeypatch, capsys):
    run_cli(monkeypatch)
    assert "Black Hole Lensing Renderer CLI" in capsys.readouterr().out
