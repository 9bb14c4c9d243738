import importlib
import io
from pathlib import Path

import pytest
from rich.console import Console
from typer.testing import CliRunner

from concierge.cli.console import CallConsole
from concierge.cli.render import Renderer
from concierge.collaborators import OpenDevice
from concierge.config import Settings
from concierge.orders import OrderRecord, StaticOrderProvider
from concierge.session import CallSession
from concierge.types import CallState

cli_app_module = importlib.import_module("concierge.cli.app")
runner = CliRunner()


def _console_session() -> tuple[CallConsole, io.StringIO]:
    buffer = io.StringIO()
    renderer = Renderer("Aurora Agent", console=Console(file=buffer, width=200))
    order = OrderRecord.model_validate(
        {"id": "AC-1001", "customerName": "Jordan Lee", "status": "shipped", "placedOn": "2024-05-02"}
    )
    session = CallSession(OpenDevice(), settings=Settings())
    console = CallConsole(session, renderer, StaticOrderProvider([order]))
    renderer.attach(session)
    return console, buffer


def test_reply_command_prints_intent_and_follow_ups() -> None:
    result = runner.invoke(cli_app_module.app, ["reply", "where is my order"])

    assert result.exit_code == 0
    assert "shipping_status" in result.output
    assert "Suggested follow-ups" in result.output


def test_reply_command_reports_escalation() -> None:
    result = runner.invoke(cli_app_module.app, ["reply", "I want to speak to a manager"])

    assert result.exit_code == 0
    assert "escalated: True" in result.output


def test_reply_command_rejects_blank_text() -> None:
    result = runner.invoke(cli_app_module.app, ["reply", "   "])

    assert result.exit_code == 1


def test_orders_command_renders_dataset(tmp_path: Path) -> None:
    path = tmp_path / "orders.json"
    path.write_text(
        '[{"id": "AC-7", "customerName": "Ada", "status": "delivered", "placedOn": "2024-01-31"}]',
        encoding="utf-8",
    )

    result = runner.invoke(cli_app_module.app, ["orders", "--orders", str(path)])

    assert result.exit_code == 0
    assert "AC-7" in result.output


def test_orders_command_fails_on_missing_file(tmp_path: Path) -> None:
    result = runner.invoke(cli_app_module.app, ["orders", "--orders", str(tmp_path / "missing.yaml")])

    assert result.exit_code == 1


def test_call_command_runs_console(monkeypatch: pytest.MonkeyPatch) -> None:
    called = {"run": False}

    async def _fake_run(self) -> None:
        called["run"] = True
        assert self.session.speech_available is False

    monkeypatch.setattr(cli_app_module.CallConsole, "run", _fake_run)
    monkeypatch.setattr(cli_app_module, "configure_logging", lambda **_kwargs: None)

    result = runner.invoke(cli_app_module.app, ["call"])

    assert result.exit_code == 0
    assert called["run"] is True


@pytest.mark.asyncio
async def test_console_drives_call_lifecycle() -> None:
    console, buffer = _console_session()

    assert await console.handle_line("where is my order") is True
    assert "No call in progress" in buffer.getvalue()

    await console.handle_line("/start")
    assert console.session.state is CallState.ACTIVE

    await console.handle_line("I want to speak to a manager")
    output = buffer.getvalue()
    assert "Customer:" in output
    assert "Aurora Agent:" in output
    assert console.session.settings.escalation_notice in output

    assert await console.handle_line("/quit") is False
    assert console.session.state is CallState.ENDED


@pytest.mark.asyncio
async def test_console_renders_orders_and_unknown_commands() -> None:
    console, buffer = _console_session()

    await console.handle_line("/orders")
    await console.handle_line("/bogus")

    output = buffer.getvalue()
    assert "AC-1001" in output
    assert "Unknown command: /bogus" in output


@pytest.mark.asyncio
async def test_console_reset_clears_session() -> None:
    console, _buffer = _console_session()
    await console.handle_line("/start")
    await console.handle_line("hello")

    await console.handle_line("/reset")

    assert console.session.state is CallState.IDLE
    assert len(console.session.transcript) == 1


def test_order_table_includes_notes() -> None:
    buffer = io.StringIO()
    renderer = Renderer("Aurora Agent", console=Console(file=buffer, width=200))
    order = OrderRecord.model_validate(
        {
            "id": "AC-1002",
            "customerName": "Sam Rivera",
            "status": "processing",
            "placedOn": "2024-05-04",
            "notes": "Gift wrap requested",
        }
    )

    renderer.orders([order])

    output = buffer.getvalue()
    assert "Notes" in output
    assert "Gift wrap requested" in output
