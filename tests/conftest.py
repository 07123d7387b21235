"""Shared fixtures: deployment targets and a scripted fake SSH service."""

from typing import List, Tuple

import pytest

from hostdeploy.models.results import SSHResult
from hostdeploy.models.target import ContainerRuntime, DeploymentTarget, ProxyTopology

REPO_URL = "https://example.com/org/app.git"
TOKEN = "ghp_secret123"


class FakeSSHService:
    """
    Records every remote command and answers from a script.

    responses: list of (needle, returncode, stdout, stderr); the first
    needle contained in the command text decides the result. Unmatched
    commands succeed with empty output, except `test -d` which reports
    the directory as missing.
    """

    def __init__(self, responses: List[Tuple[str, int, str, str]] = None):
        self.responses = list(responses or []) + [("test -d", 1, "", "")]
        self.commands: List[str] = []
        self.uploads = {}

    def respond(self, needle: str, returncode: int, stdout: str = "", stderr: str = ""):
        self.responses.insert(0, (needle, returncode, stdout, stderr))

    def _result(self, text: str) -> SSHResult:
        for needle, code, out, err in self.responses:
            if needle in text:
                return SSHResult(code, out, err, host="203.0.113.10", command=text)
        return SSHResult(0, host="203.0.113.10", command=text)

    def execute_command(self, command, input_text=None, log_command=True):
        self.commands.append(command)
        return self._result(command)

    def run_script(self, lines):
        text = "\n".join(lines)
        self.commands.append(text)
        return self._result(text)

    def upload_text(self, remote_path, content):
        self.uploads[remote_path] = content
        text = f"upload {remote_path}"
        self.commands.append(text)
        return self._result(text)

    def ran(self, needle: str) -> bool:
        return any(needle in c for c in self.commands)

    def index(self, needle: str) -> int:
        for i, c in enumerate(self.commands):
            if needle in c:
                return i
        raise AssertionError(f"{needle!r} never ran; commands: {self.commands}")


def make_target(**overrides) -> DeploymentTarget:
    values = dict(
        repo_url=REPO_URL,
        auth_token=TOKEN,
        ssh_user="deploy",
        server_address="203.0.113.10",
        ssh_key_path="~/.ssh/id_ed25519",
        app_port=8080,
    )
    values.update(overrides)
    return DeploymentTarget(**values)


@pytest.fixture
def target():
    return make_target()


@pytest.fixture
def host_target():
    return make_target(topology=ProxyTopology.HOST)


@pytest.fixture
def docker_run_target():
    return make_target(topology=ProxyTopology.HOST, runtime=ContainerRuntime.DOCKER_RUN)


@pytest.fixture
def fake_ssh():
    return FakeSSHService()
