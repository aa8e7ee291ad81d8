"""Tests for SRT time formatting, path helpers and the scoped working directory."""

import os

import pytest

from vobsrt.exceptions import FileSystemError
from vobsrt.utils import (
    companion_payload_path,
    ensure_dir_exists,
    format_time_srt,
    parse_time_srt,
    working_directory,
)


@pytest.mark.parametrize("ms, expected", [
    (0, "00:00:00,000"),
    (7, "00:00:00,007"),
    (1000, "00:00:01,000"),
    (61001, "00:01:01,001"),
    (3723456, "01:02:03,456"),
    (360000000, "100:00:00,000"),
])
def test_format_time_srt(ms, expected):
    assert format_time_srt(ms) == expected


def test_format_time_srt_clamps_negative_to_zero():
    assert format_time_srt(-250) == "00:00:00,000"


@pytest.mark.parametrize("ms", [0, 1, 999, 1000, 59999, 3599999, 3600000, 86399999, 362439017])
def test_timestamp_round_trip(ms):
    assert parse_time_srt(format_time_srt(ms)) == ms


@pytest.mark.parametrize("bad", ["00:00:01.000", "0:00:01,000", "00:00:01,00", "garbage", ""])
def test_parse_time_srt_rejects_malformed(bad):
    with pytest.raises(ValueError):
        parse_time_srt(bad)


@pytest.mark.parametrize("index_path, expected", [
    ("/media/movie.idx", "/media/movie.sub"),
    ("/media/MOVIE.IDX", "/media/MOVIE.sub"),
    ("/media/movie.en.idx", "/media/movie.en.sub"),
    ("/media/movie", "/media/movie.sub"),
])
def test_companion_payload_path(index_path, expected):
    assert companion_payload_path(index_path) == expected


def test_ensure_dir_exists_creates_nested_dirs(tmp_path):
    target = tmp_path / "a" / "b"
    ensure_dir_exists(str(target))
    assert target.is_dir()


def test_ensure_dir_exists_rejects_file(tmp_path):
    file_path = tmp_path / "file.txt"
    file_path.write_text("x")
    with pytest.raises(FileSystemError):
        ensure_dir_exists(str(file_path))


def test_working_directory_is_removed_after_use(tmp_path):
    with working_directory(str(tmp_path)) as work_dir:
        assert os.path.isdir(work_dir)
        assert os.path.basename(work_dir).startswith("vobsub-")
        open(os.path.join(work_dir, "frame.png"), "wb").close()
    assert not os.path.exists(work_dir)
    assert os.listdir(tmp_path) == []


def test_working_directory_is_removed_when_body_raises(tmp_path):
    with pytest.raises(RuntimeError):
        with working_directory(str(tmp_path)) as work_dir:
            os.makedirs(os.path.join(work_dir, "frames"))
            raise RuntimeError("boom")
    assert not os.path.exists(work_dir)
