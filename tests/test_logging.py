# tests/test_logging.py
"""
Tests for the action/timing event logs and the action context stack.
"""

import json

import pytest

from tests.fakes import FakeDriver
from uiauto_core.actionlogger import ActionLogger
from uiauto_core.context import ActionContextManager, tracked_action
from uiauto_core.convergence import scroll_until_stable
from uiauto_core.timinglogger import TIMING_LOGGER, TimingLogger


class TestActionLogger:

    def test_disabled_by_default(self, capsys):
        logger = ActionLogger()
        logger.log(action="click", target="login_button")
        assert capsys.readouterr().out == ""

    def test_jsonl_file_output_redacts_secrets(self, tmp_path):
        path = tmp_path / "actions.jsonl"
        logger = ActionLogger()
        logger.configure(console=False, file_path=str(path), format="jsonl", run_id="run-7")
        logger.enable()

        logger.log(action="set_text", target="password_input",
                   metadata={"password": "hunter2", "text": "a much longer value"})

        record = json.loads(path.read_text(encoding="utf-8").strip())
        assert record["run_id"] == "run-7"
        assert record["target"] == "password_input"
        assert record["metadata"]["password"] == "***"
        assert record["metadata"]["text"] == "a much lon..."

    def test_line_format_includes_exception(self, capsys):
        logger = ActionLogger()
        logger.enable()
        logger.log(action="click", target="login_button", status="error",
                   exception=RuntimeError("tap failed"))

        line = capsys.readouterr().out
        assert "click" in line
        assert "target='login_button'" in line
        assert "exc_type=RuntimeError" in line

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError):
            ActionLogger().configure(format="xml")

    def test_configure_from_env(self, tmp_path):
        logger = ActionLogger()
        logger.configure_from_env({
            "UIAUTO_ACTION_LOG": "1",
            "UIAUTO_ACTION_LOG_FILE": str(tmp_path / "a.log"),
            "UIAUTO_ACTION_LOG_SAMPLE": "3",
        })
        assert logger.is_enabled()
        assert logger.should_log_retry_attempt(1)
        assert not logger.should_log_retry_attempt(2)
        assert logger.should_log_retry_attempt(3)


class TestTimingLogger:

    def test_env_enables(self):
        logger = TimingLogger()
        logger.configure_from_env({"UIAUTO_TIMING_LOG": "yes"})
        assert logger.is_enabled()

    def test_convergence_emits_timing_events(self, clock, capsys):
        TIMING_LOGGER.enable()
        try:
            scroll_until_stable(FakeDriver(pages=["a"]))
        finally:
            TIMING_LOGGER.disable()

        out = capsys.readouterr().out
        assert "event=converge_start" in out
        assert "event=converge_step" in out
        assert "event=converge_end" in out


class TestActionContext:

    def test_nested_trace(self):
        with ActionContextManager.action("login", screen_name="login"):
            with ActionContextManager.action("click", target_name="login_button") as inner:
                trace = inner.format_trace()
                assert [c.action_name for c in inner.get_full_trace()] == ["click", "login"]
        assert "click on 'login_button'" in trace
        assert ActionContextManager.current() is None

    def test_tracked_action_names_target_from_first_argument(self):
        seen = {}

        class Page:
            screen_name = "home"

            @tracked_action()
            def click(self, target):
                ctx = ActionContextManager.current()
                seen.update(name=ctx.action_name, target=ctx.target_name, screen=ctx.screen_name)
                return "ok"

        assert Page().click("menu_button") == "ok"
        assert seen == {"name": "click", "target": "menu_button", "screen": "home"}

    def test_tracked_action_reraises(self):
        class Page:
            @tracked_action("explode")
            def run(self):
                raise KeyError("x")

        with pytest.raises(KeyError):
            Page().run()
        assert ActionContextManager.current() is None
