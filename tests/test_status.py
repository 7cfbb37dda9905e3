"""Tests for status reporting."""
from rich.console import Console

from mcc.core.status import StatusReporter
from mcc.models.state import ContainerState, GameState


def render_text(reporter, report):
    console = Console(record=True, width=100, color_system=None)
    reporter.render(report, console)
    return console.export_text()


def test_report_absent(make_controller):
    controller, fake = make_controller(ContainerState.ABSENT)
    reporter = StatusReporter(controller)

    report = reporter.report()

    assert report.state is ContainerState.ABSENT
    assert report.identity.name == "server"
    assert fake.mutating_calls == []

    text = render_text(reporter, report)
    assert "Absent" in text
    assert "0.0.0.0:25565" in text
    assert "Container ID" not in text


def test_report_running(make_controller):
    controller, fake = make_controller(ContainerState.RUNNING)
    fake.health = GameState.READY
    reporter = StatusReporter(controller)

    text = render_text(reporter, reporter.report())

    assert "Server server" in text
    assert "Running" in text
    assert "ready" in text
    assert "0123456789ab" in text
    assert "0123456789abcdef" not in text
    assert "itzg/minecraft-server:latest" in text


def test_game_row_only_when_running(make_controller):
    controller, _ = make_controller(ContainerState.STOPPED)
    reporter = StatusReporter(controller)

    text = render_text(reporter, reporter.report())

    assert "Stopped" in text
    assert "Game" not in text
