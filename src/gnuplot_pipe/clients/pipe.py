"""Write-only pipe to a gnuplot child process."""

import logging
import subprocess
import types
from typing import Protocol

from ..utils.exceptions import PlotterSpawnError

logger = logging.getLogger(__name__)


class PlotterPipeInterface(Protocol):
    """
    Protocol for the transport a session writes commands to.

    PlotterPipe is the real implementation; tests substitute a recorder.
    """

    def write_line(self, text: str) -> None:
        """
        Write one newline-terminated command and flush it.

        Raises:
            OSError: If the child has gone away
        """
        ...

    def close(self) -> int:
        """
        Close the transport and release the child.

        Returns:
            Exit status of the child (0 on success)
        """
        ...


class PlotterPipe:
    """
    Owns a gnuplot child whose stdin is connected to a text pipe.

    The child's stdout and stderr are inherited; nothing is read back.
    """

    def __init__(self, process: subprocess.Popen) -> None:
        self.process = process

    @classmethod
    def spawn(cls, executable: str) -> "PlotterPipe":
        """
        Start gnuplot.

        Args:
            executable: Full path of the gnuplot binary

        Raises:
            PlotterSpawnError: If the process cannot be started
        """
        try:
            process = subprocess.Popen(
                [executable],
                stdin=subprocess.PIPE,
                text=True,
                encoding="utf-8",
            )
        except OSError as e:
            raise PlotterSpawnError(f"Couldn't open connection to gnuplot: {e}") from e

        logger.debug(f"Started {executable} (pid {process.pid})")
        return cls(process)

    @property
    def closed(self) -> bool:
        return self.process.stdin is None or self.process.stdin.closed

    def write_line(self, text: str) -> None:
        """Write one command line and flush it to the child."""
        self.process.stdin.write(text + "\n")
        self.process.stdin.flush()

    def close(self) -> int:
        """
        Close the pipe and wait for gnuplot to exit.

        Returns:
            The child's exit status
        """
        if not self.closed:
            self.process.stdin.close()
        return self.process.wait()

    def __enter__(self) -> "PlotterPipe":
        return self

    def __exit__(
            self,
            exc_type: type[BaseException] | None,
            exc_val: BaseException | None,
            exc_tb: types.TracebackType | None
    ) -> None:
        self.close()
