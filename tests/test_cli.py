"""Tests for the single-file command line."""

import pytest
from conftest import FakeRecognizer, FakeRenderer, make_probe_log

import vobsrt.cli as cli
from vobsrt.cli import CLIHandler
from vobsrt.converter import VobSubConverter
from vobsrt.exceptions import ExternalToolError

PROBE_LOG = make_probe_log([(1.0, "8F3A12C4"), (4.0, "00000000"), (5.0, "1B2C3D4E")])


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "cli.yaml"
    path.write_text(f"log_dir: null\ntemp_dir: {tmp_path / 'work'}\n", encoding="utf-8")
    return str(path)


def _install_fakes(monkeypatch, renderer, recognizer):
    def fake_components(config):
        return VobSubConverter(config=config, renderer=renderer, recognizer=recognizer)
    monkeypatch.setattr(cli, "build_components", fake_components)


def _exit_code(argv):
    with pytest.raises(SystemExit) as excinfo:
        CLIHandler().run(argv)
    return excinfo.value.code


def test_help_exits_zero():
    assert _exit_code(["-h"]) == 0


@pytest.mark.parametrize("argv", [
    [],
    ["-i", "movie.idx"],
    ["-o", "movie.srt"],
    ["-i", "movie.idx", "-o", "movie.srt", "-q", "best"],
])
def test_usage_errors_exit_one(argv):
    assert _exit_code(argv) == 1


def test_missing_idx_exits_one(tmp_path, config_file):
    argv = ["-i", str(tmp_path / "absent.idx"), "-o", str(tmp_path / "out.srt"), "-c", config_file]
    assert _exit_code(argv) == 1


def test_missing_sub_exits_one(tmp_path, idx_pair, config_file, monkeypatch):
    idx_path, sub_path = idx_pair
    (tmp_path / "movie.sub").unlink()
    renderer = FakeRenderer(PROBE_LOG, 2)
    _install_fakes(monkeypatch, renderer, FakeRecognizer(["Hello world"]))

    assert _exit_code(["-i", idx_path, "-o", str(tmp_path / "out.srt"), "-c", config_file]) == 1
    assert renderer.probe_calls == []


def test_missing_config_exits_one(tmp_path, idx_pair):
    idx_path, _ = idx_pair
    argv = ["-i", idx_path, "-o", str(tmp_path / "out.srt"), "-c", str(tmp_path / "absent.yaml")]
    assert _exit_code(argv) == 1


def test_successful_conversion(tmp_path, idx_pair, config_file, monkeypatch):
    idx_path, _ = idx_pair
    output = tmp_path / "subs" / "movie.srt"
    recognizer = FakeRecognizer(["Hello world", ""])
    _install_fakes(monkeypatch, FakeRenderer(PROBE_LOG, 2), recognizer)

    code = _exit_code(["-i", idx_path, "-o", str(output), "-c", config_file, "-q", "accurate", "-v"])

    assert code == 0
    assert output.read_text(encoding="utf-8") == "1\n00:00:01,000 --> 00:00:04,000\nHello world\n"
    assert recognizer.calls[0][1].level == "accurate"


def test_temp_dir_override(tmp_path, idx_pair, config_file, monkeypatch):
    idx_path, _ = idx_pair
    seen = {}

    def fake_components(config):
        seen['temp_dir'] = config['temp_dir']
        return VobSubConverter(config=config, renderer=FakeRenderer(PROBE_LOG, 2),
                               recognizer=FakeRecognizer(["Hello world"]))
    monkeypatch.setattr(cli, "build_components", fake_components)

    override = str(tmp_path / "scratch")
    argv = ["-i", idx_path, "-o", str(tmp_path / "out.srt"), "-c", config_file, "--temp-dir", override]
    assert _exit_code(argv) == 0
    assert seen['temp_dir'] == override


def test_nothing_recognized_exits_one(tmp_path, idx_pair, config_file, monkeypatch):
    idx_path, _ = idx_pair
    output = tmp_path / "out.srt"
    _install_fakes(monkeypatch, FakeRenderer(PROBE_LOG, 2), FakeRecognizer(["", ""]))

    assert _exit_code(["-i", idx_path, "-o", str(output), "-c", config_file]) == 1
    assert not output.exists()


def test_ffmpeg_failure_exits_one(tmp_path, idx_pair, config_file, monkeypatch):
    idx_path, _ = idx_pair
    renderer = FakeRenderer(PROBE_LOG, 2, render_error=ExternalToolError("ffmpeg frame rendering failed"))
    _install_fakes(monkeypatch, renderer, FakeRecognizer())

    assert _exit_code(["-i", idx_path, "-o", str(tmp_path / "out.srt"), "-c", config_file]) == 1
