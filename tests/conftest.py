"""
Pytest configuration and shared fixtures.
"""

import os
import stat
from pathlib import Path

import pytest

from gnuplot_pipe.clients.gnuplot import Gnuplot
from gnuplot_pipe.config import PlotterConfig, Settings, get_plotter_config, get_settings
from gnuplot_pipe.services.tmpfiles import TmpFileAllocator
from gnuplot_pipe.utils.platform import POSIX


class RecordingPipe:
    """Stand-in for PlotterPipe that records every command line."""

    def __init__(self, executable: str = "gnuplot") -> None:
        self.executable = executable
        self.lines: list[str] = []
        self.closed = False
        self.exit_status = 0

    def write_line(self, text: str) -> None:
        if self.closed:
            raise BrokenPipeError("pipe closed")
        self.lines.append(text)

    def close(self) -> int:
        self.closed = True
        return self.exit_status


@pytest.fixture(autouse=True)
def clear_cached_config():
    """Keep cached settings from leaking between tests."""
    get_settings.cache_clear()
    get_plotter_config.cache_clear()
    yield
    get_settings.cache_clear()
    get_plotter_config.cache_clear()


@pytest.fixture
def plotter_dir(tmp_path: Path) -> Path:
    """Directory holding an executable file named gnuplot."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    executable = bin_dir / "gnuplot"
    executable.write_text("#!/bin/sh\ncat > /dev/null\n")
    executable.chmod(executable.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return bin_dir


@pytest.fixture
def plotter_config(plotter_dir: Path) -> PlotterConfig:
    """POSIX plotter config pointing at the fake gnuplot."""
    return PlotterConfig(path=str(plotter_dir), filename="gnuplot", terminal="x11", profile=POSIX)


@pytest.fixture
def allocator(tmp_path: Path) -> TmpFileAllocator:
    """Allocator writing into a private scratch directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    return TmpFileAllocator(max_files=64, tmp_dir=str(data_dir))


@pytest.fixture
def settings() -> Settings:
    """Settings with the default policies."""
    return Settings(keep_tmpfiles=True, require_display=True)


@pytest.fixture
def display(monkeypatch: pytest.MonkeyPatch) -> str:
    """Pretend an X11 display is available."""
    monkeypatch.setenv("DISPLAY", ":0")
    return os.environ["DISPLAY"]


@pytest.fixture
def pipes() -> list[RecordingPipe]:
    """Every RecordingPipe handed out by make_session."""
    return []


@pytest.fixture
def session_kwargs(display, plotter_config, allocator, settings, pipes) -> dict:
    """Keyword arguments connecting a Gnuplot to a RecordingPipe."""

    def _pipe_factory(executable: str) -> RecordingPipe:
        pipe = RecordingPipe(executable)
        pipes.append(pipe)
        return pipe

    return {
        "config": plotter_config,
        "allocator": allocator,
        "settings": settings,
        "pipe_factory": _pipe_factory,
    }


@pytest.fixture
def make_session(session_kwargs):
    """Factory for sessions connected to a RecordingPipe."""

    def _make(style: str = "points", **kwargs) -> Gnuplot:
        return Gnuplot(style, **{**session_kwargs, **kwargs})

    return _make


@pytest.fixture
def session(make_session):
    """An open session; its RecordingPipe is pipes[0]."""
    gp = make_session()
    yield gp
    gp.close()
