"""
Gnuplot session client.

A Gnuplot instance owns one gnuplot child process and streams commands to it
over a write-only pipe. In-memory series are written to temporary data files
which the plot commands then reference by name.
"""

import logging
import re
import types
from collections.abc import Callable, Sequence
from typing import Any

import numpy as np

from ..config import PlotterConfig, Settings, get_plotter_config, get_settings
from ..models.session import SessionState
from ..services.datafile import (
    check_columns,
    format_number,
    image_pixels,
    write_columns,
    write_image,
)
from ..services.locator import locate_plotter
from ..services.tmpfiles import TmpFileAllocator, get_tmpfile_allocator
from ..utils.exceptions import (
    PlotterEnvironmentError,
    PlotterSpawnError,
    TmpFileError,
)
from ..utils.platform import display_available, file_available
from .pipe import PlotterPipe, PlotterPipeInterface

logger = logging.getLogger(__name__)

Series = Sequence[float] | np.ndarray

SMOOTH_MODES = ("unique", "frequency", "csplines", "bezier")
CONTOUR_POSITIONS = ("base", "surface", "both")

# a statement verb ends at whitespace or an inline range
_VERB_END = re.compile(r"[\s\[]")


class Gnuplot:
    """
    One live gnuplot session.

    Setters and plot methods return the session so calls can be chained.

    Example:
        >>> with Gnuplot("lines") as gp:
        ...     gp.set_title("demo").set_grid().plot_xy([1, 2, 3], [4, 5, 6], "data")

    A session is a single-writer resource; do not share one between threads.
    """

    def __init__(
        self,
        style: str = "points",
        *,
        config: PlotterConfig | None = None,
        allocator: TmpFileAllocator | None = None,
        settings: Settings | None = None,
        keep_tmpfiles: bool | None = None,
        pipe_factory: Callable[[str], PlotterPipeInterface | None] | None = None,
    ) -> None:
        """
        Start gnuplot and switch it to the screen terminal.

        Args:
            style: Initial plot style
            config: Plotter location (default: process-wide config)
            allocator: Temp-file allocator (default: process-wide allocator)
            settings: Settings to read policies from (default: get_settings())
            keep_tmpfiles: Leave data files on disk at teardown so gnuplot can
                still read them (default: settings.keep_tmpfiles)
            pipe_factory: Callable starting gnuplot from an executable path

        Raises:
            PlotterEnvironmentError: If DISPLAY is missing or gnuplot is not found
            PlotterSpawnError: If gnuplot cannot be started
        """
        self._state = SessionState()
        self._pipe: PlotterPipeInterface | None = None

        self.settings = settings if settings is not None else get_settings()
        self.config = config if config is not None else get_plotter_config()
        self._allocator = allocator
        self.keep_tmpfiles = (
            keep_tmpfiles if keep_tmpfiles is not None else self.settings.keep_tmpfiles
        )

        self._open(pipe_factory if pipe_factory is not None else PlotterPipe.spawn)
        self.set_style(style)

    def _open(self, pipe_factory: Callable[[str], PlotterPipeInterface | None]) -> None:
        if (
            self.settings.require_display
            and self.config.profile.requires_display
            and not display_available()
        ):
            raise PlotterEnvironmentError("Can't find DISPLAY variable")

        if not locate_plotter(self.config):
            raise PlotterEnvironmentError("Can't find gnuplot")

        pipe = pipe_factory(self.config.executable)
        if pipe is None:
            raise PlotterSpawnError("Couldn't open connection to gnuplot")

        self._pipe = pipe
        self._state.nplots = 0
        self._state.valid = True
        self._state.smooth = ""

        try:
            self.showonscreen()
        except Exception:
            self.close()
            raise

    @property
    def allocator(self) -> TmpFileAllocator:
        if self._allocator is None:
            self._allocator = get_tmpfile_allocator()
        return self._allocator

    @property
    def is_valid(self) -> bool:
        """True while the session can send commands."""
        return self._state.valid

    @property
    def nplots(self) -> int:
        return self._state.nplots

    @property
    def two_dim(self) -> bool:
        return self._state.two_dim

    @property
    def style(self) -> str:
        return self._state.style

    @property
    def smooth(self) -> str:
        return self._state.smooth

    @property
    def tmpfiles(self) -> list[str]:
        """Temporary data files owned by this session."""
        return list(self._state.tmpfile_list)

    def close(self) -> None:
        """
        Close the pipe to gnuplot.

        Closing problems are logged, not raised. Temporary files are removed
        only when keep_tmpfiles is False. Calling close() twice is harmless.
        """
        pipe, self._pipe = self._pipe, None
        self._state.valid = False
        if pipe is None:
            return

        try:
            status = pipe.close()
        except OSError as e:
            logger.warning(f"Problem closing communication to gnuplot: {e}")
        else:
            if status:
                logger.warning(f"gnuplot exited with status {status}")

        if not self.keep_tmpfiles:
            self.remove_tmpfiles()

    def __enter__(self) -> "Gnuplot":
        return self

    def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc_val: BaseException | None,
            exc_tb: types.TracebackType | None
    ) -> None:
        self.close()

    def __del__(self) -> None:
        if getattr(self, "_pipe", None) is None:
            return
        try:
            self.close()
        except TmpFileError as e:
            logger.warning(f"Problem removing temporary files: {e}")

    def remove_tmpfiles(self) -> None:
        """
        Delete the temporary data files created by this session.

        Raises:
            TmpFileError: If a file cannot be removed
        """
        if self._state.tmpfile_list:
            self.allocator.remove(self._state.tmpfile_list)

    def send(self, cmdstr: str) -> "Gnuplot":
        """
        Write one command line to gnuplot without touching the plot mode.

        Does nothing once the session is closed.

        Raises:
            PlotterSpawnError: If gnuplot is gone
        """
        if not self._state.valid or self._pipe is None:
            return self

        logger.debug(f"gnuplot> {cmdstr}")
        try:
            self._pipe.write_line(cmdstr)
        except OSError as e:
            self._state.valid = False
            raise PlotterSpawnError(f"Lost connection to gnuplot: {e}") from e
        return self

    def cmd(self, cmdstr: str) -> "Gnuplot":
        """
        Send a raw command and follow its effect on the plot mode.

        Each ';'-separated statement starting with plot or splot (an inline
        range such as plot[0:1] included) counts as a new 2D or 3D plot;
        replot and every other verb leave the plot mode alone.
        """
        if not self._state.valid:
            return self

        self.send(cmdstr)

        for statement in cmdstr.split(";"):
            verb = _VERB_END.split(statement.strip(), maxsplit=1)[0]
            if verb == "splot":
                self._state.record_plot(two_dim=False)
            elif verb == "plot":
                self._state.record_plot(two_dim=True)
        return self

    def __lshift__(self, cmdstr: str) -> "Gnuplot":
        return self.cmd(cmdstr)

    def _emit_plot(self, body: str, two_dim: bool) -> "Gnuplot":
        # replot adds to the current graph only if it has the same dimensionality
        if not self._state.valid:
            return self

        if self._state.can_replot(two_dim):
            verb = "replot"
        else:
            verb = "plot" if two_dim else "splot"

        self.send(f"{verb} {body}")
        self._state.record_plot(two_dim)
        return self

    def replot(self) -> "Gnuplot":
        """Redraw the current plot, if there is one."""
        if self._state.nplots > 0:
            self.send("replot")
        return self

    def reset_plot(self) -> "Gnuplot":
        """Make the next plot erase the previous ones."""
        if not self.keep_tmpfiles:
            self.remove_tmpfiles()
        self._state.reset_plots()
        return self

    def reset_all(self) -> "Gnuplot":
        """Reset gnuplot and every session setting to its default."""
        if not self.keep_tmpfiles:
            self.remove_tmpfiles()
        self._state.reset_plots()
        self.send("reset")
        self.send("clear")
        self._state.style = "points"
        self._state.smooth = ""
        return self.showonscreen()

    def showonscreen(self) -> "Gnuplot":
        """Send output to the default screen terminal."""
        self.send("set output")
        return self.send(f"set terminal {self.config.terminal}")

    def savetofigure(self, filename: str, terminal: str = "ps") -> "Gnuplot":
        """
        Send output to a file.

        Args:
            filename: Output file, extension included
            terminal: gnuplot terminal (ps, png, pdfcairo, svg, ...)
        """
        self.send(f"set terminal {terminal}")
        return self.send(f'set output "{filename}"')

    def set_style(self, stylestr: str = "points") -> "Gnuplot":
        """
        Change the style used by subsequent plots.

        Accepts any gnuplot style (lines, points, linespoints, impulses, dots,
        steps, fsteps, histeps, boxes, filledcurves, histograms, ...);
        an empty string keeps the current one.
        """
        if stylestr and stylestr != self._state.style:
            self._state.style = stylestr
        return self

    def set_smooth(self, stylestr: str = "csplines") -> "Gnuplot":
        """
        Smooth subsequent 2D data plots.

        Only unique, frequency, csplines and bezier are accepted; anything
        else turns smoothing off.
        """
        if any(mode in stylestr for mode in SMOOTH_MODES):
            self._state.smooth = stylestr
        else:
            self._state.smooth = ""
        return self

    def unset_smooth(self) -> "Gnuplot":
        self._state.smooth = ""
        return self

    def set_pointsize(self, pointsize: float = 1.0) -> "Gnuplot":
        return self.send(f"set pointsize {format_number(pointsize)}")

    def set_grid(self) -> "Gnuplot":
        return self.send("set grid")

    def unset_grid(self) -> "Gnuplot":
        return self.send("unset grid")

    def set_multiplot(self) -> "Gnuplot":
        """Place the following plots side by side instead of replacing them."""
        return self.send("set multiplot")

    def unset_multiplot(self) -> "Gnuplot":
        return self.send("unset multiplot")

    def set_samples(self, samples: int = 100) -> "Gnuplot":
        """Set the sampling rate of functions and interpolated data."""
        return self.send(f"set samples {int(samples)}")

    def set_isosamples(self, isolines: int = 10) -> "Gnuplot":
        """Set the isoline density for 3D function plots."""
        return self.send(f"set isosamples {int(isolines)}")

    def set_hidden3d(self) -> "Gnuplot":
        """Enable hidden line removal for surface plotting."""
        return self.send("set hidden3d")

    def unset_hidden3d(self) -> "Gnuplot":
        return self.send("unset hidden3d")

    def set_contour(self, position: str = "base") -> "Gnuplot":
        """
        Draw contours on surfaces.

        Args:
            position: base, surface or both; anything else means base
        """
        if not any(name in position for name in CONTOUR_POSITIONS):
            return self.send("set contour base")
        return self.send(f"set contour {position}")

    def unset_contour(self) -> "Gnuplot":
        return self.send("unset contour")

    def set_surface(self) -> "Gnuplot":
        return self.send("set surface")

    def unset_surface(self) -> "Gnuplot":
        return self.send("unset surface")

    def set_legend(self, position: str = "default") -> "Gnuplot":
        """
        Switch the legend on.

        Args:
            position: Any "set key" argument, e.g. "left box" or "outside"
        """
        return self.send(f"set key {position}")

    def unset_legend(self) -> "Gnuplot":
        return self.send("unset key")

    def set_title(self, title: str = "") -> "Gnuplot":
        """Set the plot title; an empty title clears it."""
        return self.send(f'set title "{title}"')

    def unset_title(self) -> "Gnuplot":
        return self.set_title()

    def set_xlabel(self, label: str = "x") -> "Gnuplot":
        return self.send(f'set xlabel "{label}"')

    def set_ylabel(self, label: str = "y") -> "Gnuplot":
        return self.send(f'set ylabel "{label}"')

    def set_zlabel(self, label: str = "z") -> "Gnuplot":
        return self.send(f'set zlabel "{label}"')

    def _set_range(self, axis: str, start: float, end: float) -> "Gnuplot":
        return self.send(f"set {axis}range[{format_number(start)}:{format_number(end)}]")

    def set_xrange(self, start: float, end: float) -> "Gnuplot":
        return self._set_range("x", start, end)

    def set_yrange(self, start: float, end: float) -> "Gnuplot":
        return self._set_range("y", start, end)

    def set_zrange(self, start: float, end: float) -> "Gnuplot":
        return self._set_range("z", start, end)

    def set_cbrange(self, start: float, end: float) -> "Gnuplot":
        """Set the palette (color box) range."""
        return self._set_range("cb", start, end)

    def _set_autoscale(self, axis: str) -> "Gnuplot":
        self.send(f"set {axis}range restore")
        return self.send(f"set autoscale {axis}")

    def set_xautoscale(self) -> "Gnuplot":
        return self._set_autoscale("x")

    def set_yautoscale(self) -> "Gnuplot":
        return self._set_autoscale("y")

    def set_zautoscale(self) -> "Gnuplot":
        return self._set_autoscale("z")

    def set_xlogscale(self, base: float = 10) -> "Gnuplot":
        return self.send(f"set logscale x {format_number(base)}")

    def set_ylogscale(self, base: float = 10) -> "Gnuplot":
        return self.send(f"set logscale y {format_number(base)}")

    def set_zlogscale(self, base: float = 10) -> "Gnuplot":
        return self.send(f"set logscale z {format_number(base)}")

    def unset_xlogscale(self) -> "Gnuplot":
        return self.send("unset logscale x")

    def unset_ylogscale(self) -> "Gnuplot":
        return self.send("unset logscale y")

    def unset_zlogscale(self) -> "Gnuplot":
        return self.send("unset logscale z")

    @staticmethod
    def _title_clause(title: str) -> str:
        return f'title "{title}"' if title else "notitle"

    def _data_clause(self) -> str:
        if self._state.smooth:
            return f"smooth {self._state.smooth}"
        return f"with {self._state.style}"

    def plotfile_x(self, filename: str, column: int = 1, title: str = "") -> "Gnuplot":
        """
        Plot one column of a data file against its row index.

        Raises:
            DataError: If the file is missing or unreadable
        """
        file_available(filename)
        return self._emit_plot(
            f'"{filename}" using {column} {self._title_clause(title)} {self._data_clause()}',
            two_dim=True,
        )

    def plotfile_xy(
        self, filename: str, column_x: int = 1, column_y: int = 2, title: str = ""
    ) -> "Gnuplot":
        """
        Plot two columns of a data file as x, y pairs.

        Raises:
            DataError: If the file is missing or unreadable
        """
        file_available(filename)
        return self._emit_plot(
            f'"{filename}" using {column_x}:{column_y} '
            f"{self._title_clause(title)} {self._data_clause()}",
            two_dim=True,
        )

    def plotfile_xy_err(
        self,
        filename: str,
        column_x: int = 1,
        column_y: int = 2,
        column_dy: int = 3,
        title: str = "",
    ) -> "Gnuplot":
        """
        Plot x, y pairs with dy errorbars from a data file.

        Style and smoothing are ignored; errorbars are always used.

        Raises:
            DataError: If the file is missing or unreadable
        """
        file_available(filename)
        return self._emit_plot(
            f'"{filename}" using {column_x}:{column_y}:{column_dy} '
            f"with errorbars {self._title_clause(title)}",
            two_dim=True,
        )

    def plotfile_xyz(
        self,
        filename: str,
        column_x: int = 1,
        column_y: int = 2,
        column_z: int = 3,
        title: str = "",
    ) -> "Gnuplot":
        """
        Plot x, y, z triples from a data file in 3D.

        Raises:
            DataError: If the file is missing or unreadable
        """
        file_available(filename)
        return self._emit_plot(
            f'"{filename}" using {column_x}:{column_y}:{column_z} '
            f"{self._title_clause(title)} with {self._state.style}",
            two_dim=False,
        )

    def _write_tmpfile(self, writer: Callable[[Any], int]) -> str:
        name, fh = self.allocator.create(self._state.tmpfile_list)
        try:
            with fh:
                writer(fh)
        except OSError as e:
            raise TmpFileError(f"Cannot write temporary file \"{name}\": {e}") from e
        return name

    def plot_x(self, x: Series, title: str = "") -> "Gnuplot":
        """
        Plot a series against its index.

        Raises:
            DataError: If x is empty
            TmpFileError: If the data file cannot be written
        """
        (column,) = check_columns(x)
        name = self._write_tmpfile(lambda fh: write_columns(fh, column))
        return self.plotfile_x(name, 1, title)

    def plot_xy(self, x: Series, y: Series, title: str = "") -> "Gnuplot":
        """
        Plot x, y pairs.

        Raises:
            DataError: If a series is empty or the lengths differ
            TmpFileError: If the data file cannot be written
        """
        columns = check_columns(x, y)
        name = self._write_tmpfile(lambda fh: write_columns(fh, *columns))
        return self.plotfile_xy(name, 1, 2, title)

    def plot_xy_err(self, x: Series, y: Series, dy: Series, title: str = "") -> "Gnuplot":
        """
        Plot x, y pairs with dy errorbars.

        Raises:
            DataError: If a series is empty or the lengths differ
            TmpFileError: If the data file cannot be written
        """
        columns = check_columns(x, y, dy)
        name = self._write_tmpfile(lambda fh: write_columns(fh, *columns))
        return self.plotfile_xy_err(name, 1, 2, 3, title)

    def plot_xyz(self, x: Series, y: Series, z: Series, title: str = "") -> "Gnuplot":
        """
        Plot x, y, z triples in 3D.

        Raises:
            DataError: If a series is empty or the lengths differ
            TmpFileError: If the data file cannot be written
        """
        columns = check_columns(x, y, z)
        name = self._write_tmpfile(lambda fh: write_columns(fh, *columns))
        return self.plotfile_xyz(name, 1, 2, 3, title)

    def plot_image(
        self,
        buffer: bytes | Sequence[int] | np.ndarray,
        width: int,
        height: int,
        title: str = "",
    ) -> "Gnuplot":
        """
        Plot an 8-bit greyscale image.

        Args:
            buffer: width * height intensities in row-major order
            width: Image width in pixels
            height: Image height in pixels
            title: Legend title

        Note:
            Requires gnuplot 4.2 or newer.
        """
        pixels = image_pixels(buffer, width, height)
        name = self._write_tmpfile(lambda fh: write_image(fh, pixels))

        if title:
            body = f'"{name}" title "{title}" with image'
        else:
            body = f'"{name}" with image'
        return self._emit_plot(body, two_dim=True)

    def plot_slope(self, a: float, b: float, title: str = "") -> "Gnuplot":
        """Plot the line y = a * x + b."""
        expression = f"{format_number(a)} * x + {format_number(b)}"
        title = title or f"f(x) = {expression}"
        return self._emit_plot(
            f'{expression} title "{title}" with {self._state.style}', two_dim=True
        )

    def plot_equation(self, equation: str, title: str = "") -> "Gnuplot":
        """
        Plot y = f(x).

        Args:
            equation: The right-hand side, e.g. "sin(x)*x"
            title: Legend title; empty means no legend entry
        """
        return self._emit_plot(
            f"{equation} {self._title_clause(title)} with {self._state.style}", two_dim=True
        )

    def plot_equation3d(self, equation: str, title: str = "") -> "Gnuplot":
        """
        Plot z = f(x, y).

        Args:
            equation: The right-hand side, e.g. "sin(x)*cos(y)"
            title: Legend title (default: "f(x,y) = <equation>")
        """
        title = title or f"f(x,y) = {equation}"
        return self._emit_plot(
            f'{equation} title "{title}" with {self._state.style}', two_dim=False
        )

    @classmethod
    def from_x(
        cls,
        x: Series,
        title: str = "",
        style: str = "points",
        labelx: str = "x",
        labely: str = "y",
        **kwargs: Any,
    ) -> "Gnuplot":
        """Open a session and plot x against its index."""
        gp = cls(style, **kwargs)
        try:
            gp.set_xlabel(labelx).set_ylabel(labely).plot_x(x, title)
        except Exception:
            gp.close()
            raise
        return gp

    @classmethod
    def from_xy(
        cls,
        x: Series,
        y: Series,
        title: str = "",
        style: str = "points",
        labelx: str = "x",
        labely: str = "y",
        **kwargs: Any,
    ) -> "Gnuplot":
        """Open a session and plot x, y pairs."""
        gp = cls(style, **kwargs)
        try:
            gp.set_xlabel(labelx).set_ylabel(labely).plot_xy(x, y, title)
        except Exception:
            gp.close()
            raise
        return gp

    @classmethod
    def from_xyz(
        cls,
        x: Series,
        y: Series,
        z: Series,
        title: str = "",
        style: str = "points",
        labelx: str = "x",
        labely: str = "y",
        labelz: str = "z",
        **kwargs: Any,
    ) -> "Gnuplot":
        """Open a session and plot x, y, z triples in 3D."""
        gp = cls(style, **kwargs)
        try:
            gp.set_xlabel(labelx).set_ylabel(labely).set_zlabel(labelz).plot_xyz(x, y, z, title)
        except Exception:
            gp.close()
            raise
        return gp
