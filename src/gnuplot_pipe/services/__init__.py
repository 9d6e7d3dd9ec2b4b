"""Services backing a gnuplot session: plotter lookup, temp files and data files."""

from .datafile import check_columns, format_number, write_columns
from .locator import locate_plotter, set_plotter_path, set_terminal_std
from .tmpfiles import TmpFileAllocator, get_tmpfile_allocator

__all__ = [
    "TmpFileAllocator",
    "check_columns",
    "format_number",
    "get_tmpfile_allocator",
    "locate_plotter",
    "set_plotter_path",
    "set_terminal_std",
    "write_columns",
]
