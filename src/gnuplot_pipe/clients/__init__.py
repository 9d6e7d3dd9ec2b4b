"""
Client implementations for the gnuplot child process.

This package contains:
- The write-only pipe transport (PlotterPipe)
- The session client that formats and sends commands (Gnuplot)
"""

from .gnuplot import Gnuplot
from .pipe import PlotterPipe, PlotterPipeInterface

__all__ = ["Gnuplot", "PlotterPipe", "PlotterPipeInterface"]
