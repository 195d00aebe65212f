"""Shared pytest fixtures for all test modules."""

import base64
import os
import subprocess
import sys

import httpx
import pytest
import yaml

from dockhand.config import Settings
from dockhand.lifecycle.context import LifecycleContext

PROJECT_ROOT = os.path.normpath(os.path.join(os.path.dirname(__file__), ".."))

GOOD_TOKEN = "dp.st.prd.GoodServiceToken0001"
BAD_TOKEN = "dp.st.prd.RevokedToken00000002"


@pytest.fixture(scope="session")
def project_root():
    """Absolute path to the project root directory."""
    return PROJECT_ROOT


@pytest.fixture
def run_cli(project_root, tmp_path):
    """Return a callable that invokes the dockhand CLI as a subprocess.

    The config tree lives under ``tmp_path/cfg`` unless ``env`` overrides it.
    """

    def _run(*args, env=None, stdin=""):
        full_env = dict(os.environ)
        full_env.pop("DOCKHAND_CONFIG", None)
        full_env.pop("DOPPLER_TOKEN", None)
        full_env["DOCKHAND_CONFIG_DIR"] = str(tmp_path / "cfg")
        full_env.update(env or {})
        result = subprocess.run(
            [sys.executable, "-m", "dockhand.dockhand", *args],
            capture_output=True,
            text=True,
            cwd=project_root,
            env=full_env,
            input=stdin,
        )
        return result.returncode, result.stdout, result.stderr

    return _run


# ── Unit-test fixtures ──────────────────────────────────────────────


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temp dir with verification made instantaneous."""
    return Settings(
        config_dir=str(tmp_path / "cfg"),
        defaults_dir=str(tmp_path / "defaults"),
        verify_wait=0.0,
        verify_interval=0.0,
    )


@pytest.fixture
def write_defaults(settings):
    """Return a helper that writes ``<defaults_dir>/<name>/.env.defaults``."""

    def _write(name, text):
        path = os.path.join(settings.defaults_dir, name, ".env.defaults")
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(text)
        return path

    return _write


class FakeDoppler:
    """Scripted secrets endpoint behind ``httpx.MockTransport``.

    ``secrets`` maps accepted tokens to their env body; any other token gets
    401. Entries pushed onto ``script`` are consumed first: an int status,
    a (status, body) tuple, or an exception instance to raise.
    """

    def __init__(self):
        self.secrets = {}
        self.script = []
        self.requests = []
        self.transport = httpx.MockTransport(self._handle)

    @staticmethod
    def token_of(request):
        header = request.headers.get("authorization", "")
        if not header.startswith("Basic "):
            return ""
        user, _, _ = base64.b64decode(header[len("Basic "):]).decode().partition(":")
        return user

    def _handle(self, request):
        self.requests.append(request)
        if self.script:
            step = self.script.pop(0)
            if isinstance(step, Exception):
                raise step
            if isinstance(step, tuple):
                return httpx.Response(step[0], text=step[1])
            return httpx.Response(step, text="")
        body = self.secrets.get(self.token_of(request))
        if body is None:
            return httpx.Response(401, json={"messages": ["Invalid Service token"]})
        return httpx.Response(200, text=body)


@pytest.fixture
def doppler():
    fake = FakeDoppler()
    fake.secrets[GOOD_TOKEN] = "PORT=8080\nDB=x\n"
    return fake


class FakeDocker:
    """In-memory docker / docker compose driven through the run_cmd seam.

    ``up`` reads the compose file in ``cwd`` and creates its containers.
    Container names in ``fail_start`` come up as ``exited``; subcommand
    names in ``fail`` (e.g. "pull", "down") return rc 1.
    """

    STARTED_AT = "2024-05-01T10:00:00.123456789Z"

    def __init__(self):
        self.containers = {}
        self.networks = set()
        self.commands = []
        self.fail = set()
        self.fail_start = set()
        self.compose_v2 = True

    def add_container(self, name, image="example/app:latest", status="running", labels=None):
        self.containers[name] = {"image": image, "status": status, "labels": dict(labels or {})}

    def compose_commands(self):
        return [c for c in self.commands if c[:2] == ["docker", "compose"] and c[2] != "version"]

    def _compose_services(self, cwd):
        with open(os.path.join(cwd, "docker-compose.yml")) as f:
            document = yaml.safe_load(f)
        return document["services"].values()

    def _compose(self, args, cwd):
        sub = args[0]
        if sub == "version":
            if not self.compose_v2:
                return 1, "", "unknown command"
            return 0, "2.29.0\n", ""
        if sub in self.fail:
            return 1, "", f"{sub} failed"
        if sub == "up":
            for svc in self._compose_services(cwd):
                labels = dict(label.split("=", 1) for label in svc.get("labels", []))
                name = svc["container_name"]
                status = "exited" if name in self.fail_start else "running"
                self.add_container(name, image=svc["image"], status=status, labels=labels)
        elif sub == "down":
            for svc in self._compose_services(cwd):
                self.containers.pop(svc["container_name"], None)
        elif sub == "restart":
            for svc in self._compose_services(cwd):
                if svc["container_name"] in self.containers:
                    self.containers[svc["container_name"]]["status"] = "running"
        return 0, "", ""

    def _inspect(self, template, name):
        container = self.containers.get(name)
        if container is None:
            return 1, "", f"No such object: {name}"
        if template == "{{.State.Status}}":
            return 0, container["status"] + "\n", ""
        if template == "{{.Config.Image}}":
            return 0, container["image"] + "\n", ""
        if template == "{{.State.StartedAt}}":
            return 0, self.STARTED_AT + "\n", ""
        if template.startswith("{{if .State.Health}}"):
            return 0, "no healthcheck\n", ""
        return 1, "", "unsupported template"

    def _ps(self, args):
        names = list(self.containers)
        if "--filter" in args:
            key, _, value = args[args.index("--filter") + 1][len("label="):].partition("=")
            names = [n for n in names if self.containers[n]["labels"].get(key) == value]
        return 0, "".join(f"{n}\n" for n in names), ""

    async def run_cmd(self, command, cwd=None, timeout=600, log_output=False):
        self.commands.append(list(command))
        if command[:2] == ["docker", "compose"]:
            return self._compose(command[2:], cwd)
        if command[0] == "docker-compose":
            return self._compose(command[1:], cwd)
        if command[:2] == ["docker", "ps"]:
            return self._ps(command)
        if command[:2] == ["docker", "inspect"]:
            return self._inspect(command[2][len("--format="):], command[3])
        if command[:3] == ["docker", "network", "ls"]:
            return 0, "".join(f"{n}\n" for n in sorted(self.networks)), ""
        if command[:3] == ["docker", "network", "create"]:
            self.networks.add(command[3])
            return 0, "", ""
        if command[:2] == ["docker", "version"]:
            return 0, "27.3.1\n", ""
        return 1, "", f"unexpected command: {command}"


@pytest.fixture
def docker():
    return FakeDocker()


@pytest.fixture
def ctx(settings, docker, doppler):
    """LifecycleContext wired to the fake docker runtime and secrets endpoint."""
    return LifecycleContext.build(settings, run_cmd=docker.run_cmd, transport=doppler.transport)


@pytest.fixture
def good_token():
    return GOOD_TOKEN


@pytest.fixture
def bad_token():
    return BAD_TOKEN
