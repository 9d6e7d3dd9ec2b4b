"""
Session state model for a gnuplot connection.

Tracks the plot mode that decides between a fresh plot and a replot, the
current style settings and the temporary files the session owns.
"""

from pydantic import BaseModel, Field


class SessionState(BaseModel):
    """
    Mutable state of one gnuplot session.

    Attributes:
        valid: True between a successful spawn and teardown
        style: Plot style used by "with <style>" clauses
        smooth: Smoothing mode, empty when unset
        nplots: Plots issued since the last reset
        two_dim: True if the last plot was 2D (plot), False for 3D (splot)
        tmpfile_list: Temporary data files created by the session
    """

    valid: bool = Field(default=False, description="Session may write to gnuplot")
    style: str = Field(default="points", description="Current plot style")
    smooth: str = Field(default="", description="Current smoothing mode")
    nplots: int = Field(default=0, ge=0, description="Plots issued since reset")
    two_dim: bool = Field(default=False, description="Last plot was 2D")
    tmpfile_list: list[str] = Field(
        default_factory=list, description="Temporary data files for cleanup"
    )

    def record_plot(self, two_dim: bool) -> None:
        """
        Register a plot or splot command.

        Args:
            two_dim: True for plot, False for splot
        """
        self.two_dim = two_dim
        self.nplots += 1

    def reset_plots(self) -> None:
        """Make the next plot command start a new graph."""
        self.nplots = 0

    def can_replot(self, two_dim: bool) -> bool:
        """
        Check whether a plot of the given dimensionality can be added by replot.

        Args:
            two_dim: Dimensionality of the plot about to be issued

        Returns:
            True if a plot of the same dimensionality is already shown
        """
        return self.nplots > 0 and self.two_dim == two_dim
