"""Tests for target resolution across options, files, environment and prompts."""

import pytest

from hostdeploy.config import env_values, load_target_file, resolve_target
from hostdeploy.exceptions import ConfigurationError
from hostdeploy.models.target import ContainerRuntime, ProxyTopology

COMPLETE = {
    "repo_url": "https://example.com/org/app.git",
    "auth_token": "tok",
    "ssh_user": "deploy",
    "server_address": "203.0.113.10",
    "ssh_key_path": "~/.ssh/id_ed25519",
    "app_port": 8080,
}


@pytest.fixture
def empty_env_file(tmp_path):
    path = tmp_path / ".env"
    path.write_text("")
    return path


def resolve(cli=None, config_path=None, environ=None, env_file=None, prompter=None):
    return resolve_target(
        cli_values=cli,
        config_path=config_path,
        environ=environ or {},
        env_file=env_file,
        prompter=prompter,
    )


class TestPrecedence:

    def test_cli_overrides_file_overrides_env(self, tmp_path, empty_env_file):
        config = tmp_path / "target.yml"
        config.write_text("app_port: 9000\nbranch: develop\nssh_user: fileuser\n")
        environ = {
            "HOSTDEPLOY_REPO_URL": "https://example.com/org/app.git",
            "HOSTDEPLOY_SSH_USER": "envuser",
            "HOSTDEPLOY_SERVER_ADDRESS": "203.0.113.10",
            "HOSTDEPLOY_SSH_KEY_PATH": "~/.ssh/id_rsa",
            "HOSTDEPLOY_APP_PORT": "7000",
            "HOSTDEPLOY_BRANCH": "envbranch",
        }

        target = resolve(
            cli={"app_port": 3000, "branch": None},
            config_path=config,
            environ=environ,
            env_file=empty_env_file,
        )

        assert target.app_port == 3000
        assert target.branch == "develop"
        assert target.ssh_user == "fileuser"
        assert target.ssh_key_path == "~/.ssh/id_rsa"

    def test_process_env_overrides_env_file(self, tmp_path):
        env_file = tmp_path / ".env"
        env_file.write_text("HOSTDEPLOY_APP_PORT=5000\nHOSTDEPLOY_SSH_USER=fromfile\n")

        values = env_values({"HOSTDEPLOY_APP_PORT": "6000"}, env_file)

        assert values == {"app_port": "6000", "ssh_user": "fromfile"}

    def test_unrelated_variables_ignored(self, empty_env_file):
        values = env_values({"APP_PORT": "80", "HOSTDEPLOY_NOPE": "x"}, empty_env_file)

        assert values == {}


class TestDefaults:

    def test_branch_defaults_to_main(self, empty_env_file):
        target = resolve(cli=COMPLETE, env_file=empty_env_file)

        assert target.branch == "main"

    def test_token_may_be_omitted(self, empty_env_file):
        values = dict(COMPLETE, auth_token=None)

        target = resolve(cli=values, env_file=empty_env_file)

        assert target.auth_token == ""

    def test_topology_and_runtime_defaults(self, empty_env_file):
        target = resolve(cli=COMPLETE, env_file=empty_env_file)

        assert target.topology is ProxyTopology.CONTAINER
        assert target.runtime is ContainerRuntime.COMPOSE
        assert target.reset_workdir is True


class TestPrompting:

    def test_missing_values_prompted_in_order(self, empty_env_file):
        asked = []
        answers = {
            "repo_url": "https://example.com/org/app.git",
            "auth_token": "secret",
            "branch": "",
            "ssh_user": "deploy",
            "server_address": "203.0.113.10",
            "ssh_key_path": "~/.ssh/id_ed25519",
            "app_port": 8080,
        }

        def prompter(name, label, default, secret):
            asked.append((name, secret))
            return answers[name]

        target = resolve(env_file=empty_env_file, prompter=prompter)

        assert [name for name, _ in asked] == list(answers)
        assert dict(asked)["auth_token"] is True
        assert dict(asked)["repo_url"] is False
        assert target.branch == "main"
        assert target.auth_token == "secret"

    def test_known_values_not_prompted(self, empty_env_file):
        asked = []

        def prompter(name, label, default, secret):
            asked.append(name)
            return default

        resolve(cli=COMPLETE, env_file=empty_env_file, prompter=prompter)

        assert asked == ["branch"]

    def test_missing_without_prompter_raises(self, empty_env_file):
        with pytest.raises(ConfigurationError) as exc:
            resolve(cli={"repo_url": "https://example.com/a.git"}, env_file=empty_env_file)

        assert "server_address" in str(exc.value)
        assert "app_port" in str(exc.value)


class TestValidation:

    def test_non_numeric_port(self, empty_env_file):
        with pytest.raises(ConfigurationError):
            resolve(cli=dict(COMPLETE, app_port="http"), env_file=empty_env_file)

    def test_out_of_range_port(self, empty_env_file):
        with pytest.raises(ConfigurationError):
            resolve(cli=dict(COMPLETE, app_port=70000), env_file=empty_env_file)

    def test_invalid_topology(self, empty_env_file):
        with pytest.raises(ConfigurationError) as exc:
            resolve(cli=dict(COMPLETE, topology="sidecar"), env_file=empty_env_file)

        assert "container" in exc.value.context

    def test_docker_run_requires_host_proxy(self, empty_env_file):
        with pytest.raises(ConfigurationError):
            resolve(
                cli=dict(COMPLETE, runtime="docker-run", topology="container"),
                env_file=empty_env_file,
            )

    def test_docker_run_with_host_proxy(self, empty_env_file):
        target = resolve(
            cli=dict(COMPLETE, runtime="docker-run", topology="host"),
            env_file=empty_env_file,
        )

        assert target.runtime is ContainerRuntime.DOCKER_RUN
        assert target.topology is ProxyTopology.HOST

    def test_reset_flag_from_environment(self, empty_env_file):
        target = resolve(
            cli=COMPLETE,
            environ={"HOSTDEPLOY_RESET_WORKDIR": "false"},
            env_file=empty_env_file,
        )

        assert target.reset_workdir is False


class TestTargetFile:

    def test_unknown_key_rejected(self, tmp_path):
        path = tmp_path / "target.yml"
        path.write_text("app_port: 80\nhostname: web1\n")

        with pytest.raises(ConfigurationError) as exc:
            load_target_file(path)

        assert "hostname" in str(exc.value)

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            load_target_file(tmp_path / "absent.yml")

    def test_list_document_rejected(self, tmp_path):
        path = tmp_path / "target.yml"
        path.write_text("- app_port\n")

        with pytest.raises(ConfigurationError):
            load_target_file(path)

    def test_empty_file_is_empty_mapping(self, tmp_path):
        path = tmp_path / "target.yml"
        path.write_text("")

        assert load_target_file(path) == {}
