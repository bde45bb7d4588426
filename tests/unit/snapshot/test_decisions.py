"""Unit tests for operator decisions."""

import pytest
from archon.snapshot.decisions import AutoConfirm, DecisionKind, DecisionRequest, ask
from archon.snapshot.errors import ConfirmationError


def _request(default: bool = True) -> DecisionRequest:
    return DecisionRequest(kind=DecisionKind.OVERWRITE, question="Overwrite?", default=default)


class TestAsk:
    """Tests for ask."""

    def test_returns_answer(self) -> None:
        """The callable's answer is returned."""
        assert ask(lambda request: True, _request()) is True
        assert ask(lambda request: False, _request()) is False

    @pytest.mark.parametrize("error", [EOFError("closed"), OSError("no tty")])
    def test_wraps_read_errors(self, error: Exception) -> None:
        """Input failures become ConfirmationError."""

        def failing(request: DecisionRequest) -> bool:
            raise error

        with pytest.raises(ConfirmationError, match="Overwrite"):
            ask(failing, _request())

    def test_other_errors_propagate(self) -> None:
        """Programming errors are not converted."""

        def failing(request: DecisionRequest) -> bool:
            raise ValueError("bug")

        with pytest.raises(ValueError):
            ask(failing, _request())


class TestAutoConfirm:
    """Tests for AutoConfirm."""

    def test_fixed_answer(self) -> None:
        """A fixed answer ignores the default."""
        assert AutoConfirm(True)(_request(default=False)) is True
        assert AutoConfirm(False)(_request(default=True)) is False

    def test_default_answer(self) -> None:
        """None takes each request's default."""
        confirm = AutoConfirm(None)
        assert confirm(_request(default=False)) is False
        assert confirm(_request(default=True)) is True

    def test_records_requests(self) -> None:
        """Requests are recorded in order."""
        confirm = AutoConfirm()
        confirm(_request())
        confirm(DecisionRequest(kind=DecisionKind.CONFIRM_CLEAN, question="?", default=True))
        assert confirm.kinds == [DecisionKind.OVERWRITE, DecisionKind.CONFIRM_CLEAN]
