"""Tests für die Kommandozeile (main.py)."""

from pathlib import Path

from click.testing import CliRunner

from main import cli


def _init(runner: CliRunner) -> None:
    result = runner.invoke(cli, ["init", "--school-name", "Test-Schule"])
    assert result.exit_code == 0, result.output


def _write(name: str, text: str) -> Path:
    path = Path(name)
    path.write_text(text, encoding="utf-8")
    return path


def _seed(runner: CliRunner) -> None:
    _init(runner)
    _write("lehrer.csv", "Name;Kürzel;Qualifikationen;Deputat\nMüller;MÜL;M;10\n")
    _write("klassen.csv", "Klasse;Schülerzahl\n07A;28\n07B;27\n")
    _write("verteilung.csv",
           "Lehrer;Fach;Klasse;Gesamt;Verteilung\nMÜL;M;07A;4;1\nMÜL;M;07B;4;both\n")
    for path, kind in (("lehrer.csv", "teachers"), ("klassen.csv", "classes"),
                       ("verteilung.csv", "distribution")):
        result = runner.invoke(cli, ["import", path, "--kind", kind])
        assert result.exit_code == 0, result.output


class TestCli:
    def test_help(self):
        """main.py --help gibt Usage aus."""
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_init_creates_config_and_data(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _init(runner)
            assert Path("config/engine_config.yaml").exists()
            assert Path("output/school_data.json").exists()
            result = runner.invoke(cli, ["config", "show"])
            assert result.exit_code == 0
            assert "Test-Schule" in result.output

    def test_import_and_workload(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            result = runner.invoke(cli, ["workload"])
            assert result.exit_code == 0
            assert "MÜL" in result.output

    def test_check_blocks_overload(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            ok = runner.invoke(cli, ["check", "MÜL", "M", "0.5"])
            assert ok.exit_code == 0
            over = runner.invoke(cli, ["check", "MÜL", "M", "4"])
            assert over.exit_code == 2
            unqualified = runner.invoke(cli, ["check", "MÜL", "D", "1"])
            assert unqualified.exit_code == 2

    def test_backfill_dry_run_then_apply(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            dry = runner.invoke(cli, ["backfill", "--dry-run"])
            assert dry.exit_code == 0
            assert "dry-run" in dry.output
            applied = runner.invoke(cli, ["backfill"])
            assert applied.exit_code == 0
            again = runner.invoke(cli, ["backfill"])
            assert "Gegenstück" in again.output

    def test_matrix_set_and_show(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            result = runner.invoke(cli, ["matrix", "set", "7a", "MÜL:M=2",
                                         "--semester", "2"])
            assert result.exit_code == 0, result.output
            shown = runner.invoke(cli, ["matrix", "show", "07A", "--semester", "2"])
            assert "Mathematik" in shown.output

    def test_matrix_set_rejects_infinite_hours(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            result = runner.invoke(cli, ["matrix", "set", "07A", "MÜL:M=inf"])
            assert result.exit_code == 1
            workload = runner.invoke(cli, ["workload"])
            assert workload.exit_code == 0, workload.output

    def test_export_and_deactivate(self):
        runner = CliRunner()
        with runner.isolated_filesystem():
            _seed(runner)
            result = runner.invoke(cli, ["export", "out.xlsx"])
            assert result.exit_code == 0
            assert Path("out.xlsx").exists()
            result = runner.invoke(cli, ["deactivate", "MÜL"])
            assert result.exit_code == 0
            assert "deaktiviert" in result.output
