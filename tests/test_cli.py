"""Tests for the command-line interface."""

import json

import pytest
from click.testing import CliRunner

from conftest import ROOT_CHILD_NODES, FixtureResourceManager, write_scene

from i3mscene import cli
from i3mscene.core.config import ConverterConfig


@pytest.fixture
def runner(monkeypatch) -> CliRunner:
    """CliRunner with the engine replaced by the fixture resource manager."""
    monkeypatch.setattr(cli, "create_resource_manager", lambda cfg: FixtureResourceManager())
    return CliRunner()


class TestConvertCommand:
    """Test `i3mscene convert` exit codes and outputs."""

    def test_all_converted(self, runner, tmp_path):
        """Test exit code 0 when every file converts."""
        src = tmp_path / "src"
        write_scene(src / "scene.rgs", ROOT_CHILD_NODES)
        dst = tmp_path / "dst"

        result = runner.invoke(cli.main, ["convert", "-i", str(src), "-o", str(dst)])

        assert result.exit_code == 0, result.output
        payload = json.loads((dst / "scene.i3m").read_text())
        assert payload["nodes"][0]["children"][0]["name"] == "Child"

    def test_empty_source(self, runner, tmp_path):
        """Test an empty source directory succeeds with no outputs."""
        src = tmp_path / "src"
        src.mkdir()
        dst = tmp_path / "dst"

        result = runner.invoke(cli.main, ["convert", "-i", str(src), "-o", str(dst)])

        assert result.exit_code == 0, result.output
        assert list(dst.iterdir()) == []

    def test_partial_failure(self, runner, tmp_path):
        """Test exit code 1 when a file fails but others convert."""
        src = tmp_path / "src"
        write_scene(src / "good.rgs", ROOT_CHILD_NODES)
        (src / "corrupt.rgs").write_text("garbage")
        dst = tmp_path / "dst"

        result = runner.invoke(cli.main, ["convert", "-i", str(src), "-o", str(dst)])

        assert result.exit_code == 1
        assert "1 failed" in result.output
        assert (dst / "good.i3m").is_file()
        assert not (dst / "corrupt.i3m").exists()

    def test_missing_source_is_fatal(self, runner, tmp_path):
        """Test exit code 2 when the source directory does not exist."""
        result = runner.invoke(
            cli.main, ["convert", "-i", str(tmp_path / "nope"), "-o", str(tmp_path / "dst")]
        )
        assert result.exit_code == 2

    def test_missing_required_option(self, runner, tmp_path):
        """Test both directories are required."""
        result = runner.invoke(cli.main, ["convert", "-i", str(tmp_path)])
        assert result.exit_code == 2

    def test_invalid_config_is_fatal(self, runner, tmp_path):
        """Test an invalid configuration file aborts the run."""
        config = tmp_path / "bad.json"
        config.write_text('{"workers": 0}')
        src = tmp_path / "src"
        src.mkdir()

        result = runner.invoke(
            cli.main,
            ["convert", "-i", str(src), "-o", str(tmp_path / "dst"), "-c", str(config)],
        )
        assert result.exit_code == 2

    def test_extension_options(self, runner, tmp_path):
        """Test --source-ext and --target-ext override the defaults."""
        src = tmp_path / "src"
        write_scene(src / "level.scene", ROOT_CHILD_NODES)
        dst = tmp_path / "dst"

        result = runner.invoke(
            cli.main,
            ["convert", "-i", str(src), "-o", str(dst), "--source-ext", ".scene", "--target-ext", "json"],
        )

        assert result.exit_code == 0, result.output
        assert (dst / "level.json").is_file()


class TestInfoCommand:
    """Test `i3mscene info`."""

    def test_source_file(self, runner, tmp_path):
        """Test the node tree of a source file is printed."""
        path = write_scene(tmp_path / "scene.rgs", ROOT_CHILD_NODES, references=["door.mesh"])
        result = runner.invoke(cli.main, ["info", str(path)])
        assert result.exit_code == 0, result.output
        assert "Root" in result.output
        assert "Child" in result.output
        assert "door.mesh" in result.output

    def test_converted_document(self, runner, tmp_path):
        """Test an existing .i3m document can be inspected."""
        src = tmp_path / "src"
        write_scene(src / "scene.rgs", ROOT_CHILD_NODES)
        dst = tmp_path / "dst"
        runner.invoke(cli.main, ["convert", "-i", str(src), "-o", str(dst)])

        result = runner.invoke(cli.main, ["info", str(dst / "scene.i3m")])
        assert result.exit_code == 0, result.output
        assert "2 node(s)" in result.output

    def test_corrupt_file(self, runner, tmp_path):
        """Test a corrupt source reports an error."""
        path = tmp_path / "corrupt.rgs"
        path.write_text("garbage")
        result = runner.invoke(cli.main, ["info", str(path)])
        assert result.exit_code == 1


def test_init_config(tmp_path):
    """Test the default configuration file round-trips."""
    output = tmp_path / "config.json"
    result = CliRunner().invoke(cli.main, ["init-config", "-o", str(output)])
    assert result.exit_code == 0, result.output
    assert ConverterConfig.from_file(output) == ConverterConfig.default()
