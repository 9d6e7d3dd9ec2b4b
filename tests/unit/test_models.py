"""Tests for the session state model."""

import pytest
from pydantic import ValidationError

from gnuplot_pipe.models.session import SessionState


class TestSessionState:
    """Test SessionState."""

    def test_defaults(self) -> None:
        state = SessionState()
        assert state.valid is False
        assert state.style == "points"
        assert state.smooth == ""
        assert state.nplots == 0
        assert state.two_dim is False
        assert state.tmpfile_list == []

    def test_tmpfile_lists_are_independent(self) -> None:
        first = SessionState()
        second = SessionState()
        first.tmpfile_list.append("/tmp/gnuplotiAAAAAA")
        assert second.tmpfile_list == []

    def test_record_plot(self) -> None:
        state = SessionState()
        state.record_plot(two_dim=False)
        state.record_plot(two_dim=True)
        assert state.nplots == 2
        assert state.two_dim is True

    def test_can_replot(self) -> None:
        state = SessionState()
        assert not state.can_replot(True)

        state.record_plot(two_dim=True)
        assert state.can_replot(True)
        assert not state.can_replot(False)

    def test_reset_plots(self) -> None:
        state = SessionState(nplots=3, two_dim=True)
        state.reset_plots()
        assert state.nplots == 0
        assert not state.can_replot(True)

    def test_negative_nplots_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SessionState(nplots=-1)
