"""Tests for port selection at startup."""

from unittest.mock import patch

import pytest

from workshop_pay import server


class TestFindAvailablePort:
    """Tests for find_available_port."""

    def test_first_port_free(self):
        """The configured port is used when it is free."""
        with patch.object(server, "is_port_free", return_value=True):
            assert server.find_available_port("127.0.0.1", 3000, 8) == 3000

    def test_falls_back_to_next_port(self):
        """Busy ports are skipped in order."""
        busy = {3000, 3001}
        with patch.object(server, "is_port_free", side_effect=lambda h, p: p not in busy):
            assert server.find_available_port("127.0.0.1", 3000, 8) == 3002

    def test_gives_up_after_attempts(self):
        """None is returned when every probed port is taken."""
        with patch.object(server, "is_port_free", return_value=False) as probe:
            assert server.find_available_port("127.0.0.1", 3000, 3) is None
        assert [c.args[1] for c in probe.call_args_list] == [3000, 3001, 3002]


class TestRun:
    """Tests for the console entry point."""

    def test_exits_when_no_port(self):
        """Startup fails with a non-zero exit when no port can be bound."""
        with (
            patch.object(server, "find_available_port", return_value=None),
            patch.object(server.uvicorn, "run") as uvicorn_run,
            pytest.raises(SystemExit) as exc_info,
        ):
            server.run()

        assert exc_info.value.code == 1
        uvicorn_run.assert_not_called()

    def test_runs_on_selected_port(self):
        """Uvicorn is started on the port that was found."""
        with (
            patch.object(server, "find_available_port", return_value=3004),
            patch.object(server.uvicorn, "run") as uvicorn_run,
        ):
            server.run()

        assert uvicorn_run.call_args.kwargs["port"] == 3004
        assert uvicorn_run.call_args.args[0] == "workshop_pay.main:app"
