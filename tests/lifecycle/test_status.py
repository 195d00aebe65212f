"""Tests for read-only status aggregation."""

import asyncio

import pytest

from dockhand.lifecycle import AddRequest, add, status
from dockhand.registry import ServiceState


@pytest.fixture
def svc_a(ctx, docker, good_token):
    request = AddRequest(name="svc_a", hostname="a.example.com", image="ghcr.io/acme/svc-a:1.2.3", token=good_token)
    asyncio.run(add(ctx, request))
    docker.commands.clear()


def test_status_empty(ctx):
    report = asyncio.run(status(ctx))
    assert report.services == []
    assert report.orphans == []
    assert report.proxy.status == "not found"


def test_status_running_service(ctx, svc_a):
    report = asyncio.run(status(ctx))
    assert report.proxy.running
    assert len(report.services) == 1
    svc = report.services[0]
    assert svc.name == "svc_a"
    assert svc.state == ServiceState.RUNNING
    assert svc.hostname == "a.example.com"
    assert svc.container.version == "1.2.3"
    assert svc.error is None


def test_status_is_read_only(ctx, docker, svc_a):
    before = sorted(p.relative_to(ctx.settings.root) for p in ctx.settings.root.rglob("*"))
    asyncio.run(status(ctx))
    after = sorted(p.relative_to(ctx.settings.root) for p in ctx.settings.root.rglob("*"))
    assert before == after
    assert docker.compose_commands() == []
    assert not any(c[:3] == ["docker", "network", "create"] for c in docker.commands)


def test_status_missing_container(ctx, docker, svc_a):
    del docker.containers["svc_a"]
    svc = asyncio.run(status(ctx)).services[0]
    assert svc.container.status == "not found"
    assert svc.state == ServiceState.REGISTERED


def test_status_stopped_container(ctx, docker, svc_a):
    docker.containers["svc_a"]["status"] = "exited"
    assert asyncio.run(status(ctx)).services[0].state == ServiceState.STOPPED


def test_status_orphans(ctx, docker, svc_a):
    docker.add_container("ghost", labels={"dockhand.managed": "true"})
    docker.add_container("unrelated")
    assert asyncio.run(status(ctx)).orphans == ["ghost"]


def test_status_corrupt_record_is_reported(ctx, svc_a):
    ctx.registry.metadata_path("svc_a").write_text("name: svc_a\n")
    svc = asyncio.run(status(ctx)).services[0]
    assert svc.record is None
    assert "Corrupt" in svc.error
    assert svc.hostname == ""
