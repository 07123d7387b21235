"""Click options shared by every command that acts on a deployment target."""

import functools
from typing import Any, Dict, Optional

import click

from hostdeploy.config import resolve_target, rich_prompter
from hostdeploy.exceptions import ConfigurationError
from hostdeploy.models.target import ContainerRuntime, DeploymentTarget, ProxyTopology

# CLI parameter name -> DeploymentTarget field
OPTION_FIELDS = {
    "repo_url": "repo_url",
    "token": "auth_token",
    "branch": "branch",
    "user": "ssh_user",
    "host": "server_address",
    "key": "ssh_key_path",
    "port": "app_port",
    "ssh_port": "ssh_port",
    "app_dir": "app_dir",
    "container_name": "container_name",
    "server_name": "server_name",
    "topology": "topology",
    "runtime": "runtime",
    "reset_workdir": "reset_workdir",
}

_TARGET_OPTIONS = [
    click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, exists=True),
        help="YAML file with target fields",
    ),
    click.option("--repo-url", help="Git repository URL (https://...)"),
    click.option("--token", help="Personal access token embedded in the clone URL"),
    click.option("--branch", "-b", help="Branch to deploy [default: main]"),
    click.option("--user", "-u", help="SSH username"),
    click.option("--host", "-H", help="Server IP address or hostname"),
    click.option("--key", "-i", help="Path to the SSH private key"),
    click.option("--port", "-p", type=int, help="Application port"),
    click.option("--ssh-port", type=int, help="SSH port [default: 22]"),
    click.option("--app-dir", help="Remote app directory [default: /home/<user>/app]"),
    click.option("--container-name", help="Reserved container name [default: myapp]"),
    click.option("--server-name", help="nginx server_name [default: _]"),
    click.option(
        "--topology",
        type=click.Choice([t.value for t in ProxyTopology]),
        help="Run nginx in a container or on the host [default: container]",
    ),
    click.option(
        "--runtime",
        type=click.Choice([r.value for r in ContainerRuntime]),
        help="Start the app with compose or docker run [default: compose]",
    ),
    click.option(
        "--reset/--no-reset",
        "reset_workdir",
        default=None,
        help="Wipe the remote app directory before syncing [default: reset]",
    ),
    click.option(
        "--no-input",
        is_flag=True,
        help="Fail instead of prompting for missing values",
    ),
]

_RUN_OPTIONS = [
    click.option(
        "--timeout",
        type=int,
        default=None,
        help="Per-command SSH timeout in seconds [default: none]",
    ),
    click.option(
        "--log-dir",
        type=click.Path(file_okay=False),
        default=None,
        help="Directory for run logs [default: ./logs]",
    ),
    click.option("--verbose", "-v", is_flag=True, help="Show all command output"),
    click.option("--json", "json_output", is_flag=True, help="Output in JSON format"),
]


def _apply(options, func):
    for option in reversed(options):
        func = option(func)
    return func


def target_options(func):
    """Add target options; the callback receives `target` instead."""

    @functools.wraps(func)
    def wrapper(*args, config_path=None, no_input=False, **kwargs):
        cli_values: Dict[str, Any] = {}
        for option_name, field_name in OPTION_FIELDS.items():
            cli_values[field_name] = kwargs.pop(option_name, None)

        kwargs["target"] = build_target(cli_values, config_path, no_input)
        return func(*args, **kwargs)

    return _apply(_TARGET_OPTIONS, wrapper)


def run_options(func):
    """Add logging/output options."""
    return _apply(_RUN_OPTIONS, func)


def build_target(
    cli_values: Dict[str, Any], config_path: Optional[str], no_input: bool
) -> DeploymentTarget:
    """Resolve a target, turning configuration errors into click usage errors."""
    try:
        return resolve_target(
            cli_values,
            config_path=config_path,
            prompter=None if no_input else rich_prompter,
        )
    except ConfigurationError as e:
        raise click.UsageError(e.format_message())
