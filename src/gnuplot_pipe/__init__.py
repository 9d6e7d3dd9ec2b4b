"""
Drive gnuplot from Python through a pipe.

Example:
    >>> from gnuplot_pipe import Gnuplot
    >>> with Gnuplot("lines") as gp:
    ...     gp.set_title("squares").plot_xy([1, 2, 3], [1, 4, 9], "x^2")
"""

from .clients.gnuplot import Gnuplot
from .config import PlotterConfig, Settings, get_plotter_config, get_settings
from .services.locator import locate_plotter, set_plotter_path, set_terminal_std
from .services.tmpfiles import TmpFileAllocator, get_tmpfile_allocator
from .utils.exceptions import (
    DataError,
    GnuplotError,
    PlotterEnvironmentError,
    PlotterSpawnError,
    TmpFileError,
)
from .utils.log import configure_logging
from .utils.platform import file_available, file_exists

__all__ = [
    "DataError",
    "Gnuplot",
    "GnuplotError",
    "PlotterConfig",
    "PlotterEnvironmentError",
    "PlotterSpawnError",
    "Settings",
    "TmpFileAllocator",
    "TmpFileError",
    "configure_logging",
    "file_available",
    "file_exists",
    "get_plotter_config",
    "get_settings",
    "get_tmpfile_allocator",
    "locate_plotter",
    "set_plotter_path",
    "set_terminal_std",
]
