"""Unit tests for interactive helpers and the status table."""

from types import SimpleNamespace

import pytest

import dockhand.commands as commands
import dockhand.commands.add as add_command
from dockhand.commands.remove import make_confirm
from dockhand.commands.status import format_report
from dockhand.errors import AuthError
from dockhand.lifecycle.status import ServiceStatus, StatusReport
from dockhand.registry import ServiceRecord
from dockhand.runtime import ContainerStatus


def _feed(monkeypatch, target, answers):
    answers = list(answers)
    monkeypatch.setattr(target, lambda *a, **kw: answers.pop(0))
    return answers


# ── prompts ─────────────────────────────────────────────────────────


def test_ask_uses_default(monkeypatch):
    monkeypatch.setattr("builtins.input", lambda prompt: "")
    assert commands.ask("Name", default="svc_a") == "svc_a"


@pytest.mark.parametrize("answer,default,expected", [("", True, True), ("", False, False), ("y", False, True), ("no", True, False)])
def test_ask_yes_no(monkeypatch, answer, default, expected):
    monkeypatch.setattr("builtins.input", lambda prompt: answer)
    assert commands.ask_yes_no("Continue?", default=default) is expected


def test_select_service_retries_then_picks(monkeypatch):
    _feed(monkeypatch, "builtins.input", ["7", "x", "2"])
    assert commands.select_service(["svc_a", "svc_b"]) == "svc_b"


def test_select_service_quit(monkeypatch):
    _feed(monkeypatch, "builtins.input", ["q"])
    assert commands.select_service(["svc_a"]) is None


# ── token prompting ─────────────────────────────────────────────────


def test_token_prompt_is_bounded(ctx, doppler, bad_token, monkeypatch):
    monkeypatch.delenv("DOPPLER_TOKEN", raising=False)
    _feed(monkeypatch, "dockhand.commands.add.ask_secret", [bad_token, "", bad_token])
    with pytest.raises(AuthError, match="3 attempts"):
        add_command._resolve_token(SimpleNamespace(token=None), ctx)
    assert len(doppler.requests) == 2


def test_token_prompt_accepts_valid_token(ctx, good_token, bad_token, monkeypatch):
    monkeypatch.delenv("DOPPLER_TOKEN", raising=False)
    _feed(monkeypatch, "dockhand.commands.add.ask_secret", [bad_token, good_token])
    assert add_command._resolve_token(SimpleNamespace(token=None), ctx) == good_token


def test_token_from_environment(ctx, doppler, good_token, monkeypatch):
    monkeypatch.setenv("DOPPLER_TOKEN", good_token)
    assert add_command._resolve_token(SimpleNamespace(token=None), ctx) == good_token
    assert doppler.requests == []


# ── remove confirmation ─────────────────────────────────────────────


RECORD = ServiceRecord("svc_a", "a.example.com", "acme/app", 8080)


def test_confirm_from_flags():
    confirm = make_confirm(SimpleNamespace(yes=True, confirm_name="svc_a"))
    assert confirm(RECORD) == (True, "svc_a")


def test_confirm_prompts_declined(monkeypatch):
    _feed(monkeypatch, "builtins.input", [""])
    confirm = make_confirm(SimpleNamespace(yes=False, confirm_name=None))
    assert confirm(RECORD) == (False, "")


def test_confirm_prompts_for_name(monkeypatch):
    _feed(monkeypatch, "builtins.input", ["y", "svc_x"])
    confirm = make_confirm(SimpleNamespace(yes=False, confirm_name=None))
    assert confirm(RECORD) == (True, "svc_x")


# ── status table ────────────────────────────────────────────────────


def test_format_report_empty():
    lines = format_report(StatusReport(proxy=ContainerStatus("traefik")))
    assert any("Traefik: not found" in line for line in lines)
    assert any("No services found" in line for line in lines)


def test_format_report_rows():
    container = ContainerStatus("svc_a", status="running", health="healthy", image="acme/app:2.0")
    report = StatusReport(
        proxy=ContainerStatus("traefik", status="running", image="traefik:v3.1"),
        services=[ServiceStatus("svc_a", RECORD, container)],
        orphans=["ghost"],
    )
    lines = format_report(report)
    header = next(line for line in lines if line.startswith("#"))
    for column in ("SERVICE", "STATUS", "HEALTH", "VERSION", "UPTIME", "HOSTNAME"):
        assert column in header
    row = next(line for line in lines if "svc_a" in line)
    assert "running" in row and "healthy" in row and "2.0" in row and "a.example.com" in row
    assert any("ghost" in line for line in lines)
    assert lines[0].startswith("✓ Traefik: running (v3.1")
