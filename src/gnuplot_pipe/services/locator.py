"""
Locating the gnuplot executable.

The configured directory is tried first, then every directory on PATH.
"""

import logging
import os

from ..config import PlotterConfig, get_plotter_config
from ..utils.exceptions import PlotterEnvironmentError
from ..utils.platform import display_available, file_exists

logger = logging.getLogger(__name__)


def _is_plotter(directory: str, config: PlotterConfig) -> bool:
    return file_exists(f"{directory}/{config.filename}", config.profile.executable_mode)


def locate_plotter(config: PlotterConfig | None = None) -> bool:
    """
    Find out whether gnuplot lives in the configured directory or on PATH.

    Args:
        config: Plotter config to probe and update (default: process config)

    Returns:
        True once the executable is found. config.path is updated to the
        matching PATH entry when the configured directory misses.

    Raises:
        PlotterEnvironmentError: If PATH is unset or no directory holds gnuplot
    """
    config = config if config is not None else get_plotter_config()

    if _is_plotter(config.path, config):
        return True

    search_path = os.environ.get("PATH")
    if search_path is None:
        raise PlotterEnvironmentError("Path is not set")

    for directory in search_path.split(config.profile.path_separator):
        if not directory:
            continue
        if _is_plotter(directory, config):
            logger.debug(f"Found {config.filename} in {directory}")
            config.path = directory
            return True

    raise PlotterEnvironmentError(
        f"Can't find gnuplot neither in PATH ({search_path}) nor in \"{config.path}\""
    )


def set_plotter_path(path: str, config: PlotterConfig | None = None) -> bool:
    """
    Set the directory gnuplot is looked up in.

    Args:
        path: Directory expected to hold the executable (use '/' on Windows too)
        config: Plotter config to update (default: process config)

    Returns:
        True if the executable is there. Otherwise the configured directory
        is blanked and False is returned.
    """
    config = config if config is not None else get_plotter_config()

    if _is_plotter(path, config):
        config.path = path
        return True

    logger.warning(f"No usable {config.filename} in \"{path}\"")
    config.path = ""
    return False


def set_terminal_std(terminal: str, config: PlotterConfig | None = None) -> None:
    """
    Set the terminal used by showonscreen().

    Args:
        terminal: gnuplot terminal name (x11, aqua, windows, wxt, ...)
        config: Plotter config to update (default: process config)

    Raises:
        PlotterEnvironmentError: If an x11 terminal is requested without DISPLAY
    """
    config = config if config is not None else get_plotter_config()

    if config.profile.name != "windows" and "x11" in terminal and not display_available():
        raise PlotterEnvironmentError("Can't find DISPLAY variable")

    config.terminal = terminal
