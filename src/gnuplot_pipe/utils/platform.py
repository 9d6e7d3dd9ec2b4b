"""
Platform capabilities for driving gnuplot.

Everything that differs between operating systems (executable name, install
directory, screen terminal, temp-file cap and location, PATH separator and
how an executable is recognised) is collected in a PlatformProfile so the
rest of the package stays platform-agnostic.
"""

import os
import sys
from dataclasses import dataclass

from .exceptions import DataError


@dataclass(frozen=True)
class PlatformProfile:
    """
    Platform-specific defaults.

    Attributes:
        name: Short platform family name
        plotter_filename: Name of the gnuplot executable
        plotter_path: Directory searched before PATH
        terminal: Default screen terminal
        max_tmp_files: Cap on simultaneously outstanding temp files
        tmp_dir: Directory temp files are created in ("" means cwd)
        path_separator: Separator of the PATH environment variable
        executable_mode: file_exists mode used to accept a plotter binary
        requires_display: Whether the X11 DISPLAY variable must be set
    """

    name: str
    plotter_filename: str
    plotter_path: str
    terminal: str
    max_tmp_files: int
    tmp_dir: str
    path_separator: str
    executable_mode: int
    requires_display: bool


POSIX = PlatformProfile(
    name="posix",
    plotter_filename="gnuplot",
    plotter_path="/usr/local/bin/",
    terminal="x11",
    max_tmp_files=64,
    tmp_dir="/tmp/",
    path_separator=":",
    executable_mode=1,
    requires_display=True,
)

MACOS = PlatformProfile(
    name="macos",
    plotter_filename="gnuplot",
    plotter_path="/usr/local/bin/",
    terminal="aqua",
    max_tmp_files=64,
    tmp_dir="/tmp/",
    path_separator=":",
    executable_mode=1,
    requires_display=False,
)

WINDOWS = PlatformProfile(
    name="windows",
    plotter_filename="pgnuplot.exe",
    plotter_path="C:/program files/gnuplot/bin/",
    terminal="windows",
    max_tmp_files=27,
    tmp_dir="",
    path_separator=";",
    executable_mode=0,
    requires_display=False,
)


def detect_platform(platform: str | None = None) -> PlatformProfile:
    """
    Select the profile for a sys.platform string.

    Args:
        platform: Value to inspect (default: sys.platform)

    Returns:
        WINDOWS for win32/cygwin, MACOS for darwin, POSIX otherwise
    """
    platform = sys.platform if platform is None else platform
    if platform.startswith(("win", "cygwin")):
        return WINDOWS
    if platform == "darwin":
        return MACOS
    return POSIX


def file_exists(filename: str, mode: int = 0) -> bool:
    """
    Check a file for existence and access permissions.

    Args:
        filename: Path to check
        mode: Bitmask in 0..7: 0 existence, 1 execute, 2 write, 4 read

    Returns:
        True if the file exists and grants every requested permission

    Raises:
        ValueError: If mode is outside 0..7
    """
    if mode < 0 or mode > 7:
        raise ValueError(f"file_exists: mode has to be an integer between 0 and 7, got {mode}")

    flags = os.F_OK
    if mode & 1:
        flags |= os.X_OK
    if mode & 2:
        flags |= os.W_OK
    if mode & 4:
        flags |= os.R_OK
    return os.access(filename, flags)


def file_available(filename: str) -> bool:
    """
    Ensure a data file can be read by the plotter.

    Raises:
        DataError: If the file is missing or not readable
    """
    if not file_exists(filename, 0):
        raise DataError(f'File "{filename}" does not exist')
    if not file_exists(filename, 4):
        raise DataError(f'No read permission for File "{filename}"')
    return True


def display_available() -> bool:
    """Return True if an X11 display is configured."""
    return os.environ.get("DISPLAY") is not None
