import io
import json

import pytest
from rich.console import Console

from termtask import cli
from termtask.config import Settings
from termtask.output import Response


@pytest.fixture
def out():
    return Console(file=io.StringIO(), record=True, width=100, color_system=None)


@pytest.fixture
def settings(tmp_path):
    return Settings(data_dir=tmp_path / "data", export_dir=tmp_path)


def test_render_plain_text_is_not_markup(out):
    cli.render(Response("1. [x] buy milk", "todo"), out)
    assert "1. [x] buy milk" in out.export_text()


def test_render_markup_response(out):
    cli.render(Response("[reverse]15[/reverse] 16", "calendar", markup=True), out)
    assert out.export_text().strip() == "15 16"


def test_render_help_table(out):
    cli.render(Response("Available Commands:", "help", rows=[("calc", "Evaluates things.")]), out)
    text = out.export_text()
    assert "Available Commands:" in text
    assert "calc" in text and "Evaluates things." in text


def test_render_link_listing_with_brackets_in_url(settings, out):
    app = cli.build_app(settings, out=out)
    cli.run_line(app, 'link add "x.com/[/b]" Bad', out)
    cli.run_line(app, "link add example.com Good", out)
    out.export_text()
    cli.run_line(app, "link", out)
    text = out.export_text()
    assert "1. Bad - http://x.com/[/b]" in text
    assert "2. Good - http://example.com" in text
    assert "Command failed" not in text


def test_alert_prints_panel_without_notifications(out, monkeypatch):
    sent = []
    monkeypatch.setattr(cli, "send_notification", lambda t, m: sent.append((t, m)))
    cli.make_alert(out, notifications=False)("Reminder", "stretch")
    text = out.export_text()
    assert "Reminder" in text
    assert "stretch" in text
    assert sent == []


def test_alert_sends_notification_when_allowed(out, monkeypatch):
    sent = []
    monkeypatch.setattr(cli, "send_notification", lambda t, m: sent.append((t, m)))
    cli.make_alert(out, notifications=True)("Timer Complete!", "tea")
    assert sent == [("Timer Complete!", "tea")]


def test_build_app_persists_to_data_dir(settings, out):
    app = cli.build_app(settings, out=out)
    cli.run_line(app, "note remember the milk", out)
    assert "Note saved." in out.export_text()
    stored = json.loads((settings.data_dir / "store.json").read_text())
    assert stored["notes"] == ["remember the milk"]


def test_run_line_reports_unexpected_failures(settings, out, monkeypatch):
    app = cli.build_app(settings, out=out)

    def boom(line):
        raise RuntimeError("disk on fire")

    monkeypatch.setattr(app, "execute", boom)
    cli.run_line(app, "note x", out)
    assert "Error: Command failed, see the log for details." in out.export_text()


def test_settings_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("TERMTASK_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("TERMTASK_NOTIFY", "yes")
    monkeypatch.setenv("TERMTASK_POMO_WORK", "50")
    monkeypatch.setenv("TERMTASK_POMO_BREAK", "ten")
    settings = Settings.from_env()
    assert settings.store_path == tmp_path / "store.json"
    assert settings.notifications is True
    assert settings.pomo_work == 50
    assert settings.pomo_break == 5


def test_cli_overrides(monkeypatch, tmp_path):
    monkeypatch.delenv("TERMTASK_DATA_DIR", raising=False)
    args = cli.parse_args(["--data-dir", str(tmp_path), "--log-level", "debug"])
    settings = cli.load_settings(args)
    assert settings.data_dir == tmp_path
    assert settings.log_level == "DEBUG"
