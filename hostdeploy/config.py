"""
Target Configuration

Resolves a DeploymentTarget from, highest priority first:

    1. CLI options
    2. A YAML target file (--config)
    3. HOSTDEPLOY_* environment variables (.env files are loaded too)
    4. Interactive prompts for anything still missing
"""

import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

import yaml
from dotenv import dotenv_values
from rich.prompt import IntPrompt, Prompt

from hostdeploy.constants import DEFAULT_BRANCH, ENV_PREFIX
from hostdeploy.exceptions import ConfigurationError
from hostdeploy.models.target import ContainerRuntime, DeploymentTarget, ProxyTopology

# Order and wording of interactive questions
PROMPTS = {
    "repo_url": "Git repository URL",
    "auth_token": "Personal access token",
    "branch": "Branch name",
    "ssh_user": "SSH username",
    "server_address": "Server IP address",
    "ssh_key_path": "SSH key path",
    "app_port": "Application port",
}

INT_FIELDS = {"app_port", "ssh_port"}
BOOL_FIELDS = {"reset_workdir"}
ENUM_FIELDS = {"topology": ProxyTopology, "runtime": ContainerRuntime}

Prompter = Callable[[str, str, Optional[Any], bool], Any]


def find_env_file() -> Optional[Path]:
    """Smart .env file detection"""
    search_paths = [
        Path.cwd() / ".env",
        Path.home() / ".hostdeploy" / ".env",
    ]

    for path in search_paths:
        if path.exists():
            return path

    return None


def env_values(
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
) -> Dict[str, str]:
    """
    Collect target fields from HOSTDEPLOY_* variables.

    Values from the process environment override values from the .env file.
    """
    if environ is None:
        environ = os.environ
    if env_file is None:
        env_file = find_env_file()

    merged: Dict[str, Optional[str]] = {}
    if env_file is not None:
        merged.update(dotenv_values(env_file))
    merged.update(environ)

    values = {}
    for name in DeploymentTarget.field_names():
        value = merged.get(f"{ENV_PREFIX}{name.upper()}")
        if value not in (None, ""):
            values[name] = value
    return values


def load_target_file(path: Path) -> Dict[str, Any]:
    """
    Load target fields from a YAML file.

    Raises:
        ConfigurationError: If the file is missing, not a mapping, or has unknown keys
    """
    path = Path(path)
    if not path.exists():
        raise ConfigurationError(f"Config file not found: {path}")

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {path}", context=str(e))

    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must contain a mapping of target fields")

    unknown = sorted(set(data) - set(DeploymentTarget.field_names()))
    if unknown:
        raise ConfigurationError(
            f"Unknown keys in {path}: {', '.join(unknown)}",
            context=f"Valid keys: {', '.join(DeploymentTarget.field_names())}",
        )

    return data


def rich_prompter(name: str, label: str, default: Optional[Any], secret: bool) -> Any:
    """Ask the operator for a single value."""
    if name in INT_FIELDS:
        return IntPrompt.ask(f"[cyan]{label}[/cyan]", default=default)
    return Prompt.ask(
        f"[cyan]{label}[/cyan]",
        default=default,
        password=secret,
        show_default=not secret,
    )


def _coerce(name: str, value: Any) -> Any:
    if value is None:
        return None

    if name in INT_FIELDS:
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{name} must be an integer, got {value!r}")

    if name in BOOL_FIELDS:
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() not in ("0", "false", "no", "off")

    if name in ENUM_FIELDS:
        enum_cls = ENUM_FIELDS[name]
        if isinstance(value, enum_cls):
            return value
        try:
            return enum_cls(str(value).lower())
        except ValueError:
            choices = ", ".join(member.value for member in enum_cls)
            raise ConfigurationError(
                f"Invalid {name}: {value!r}", context=f"Choose one of: {choices}"
            )

    return str(value)


def resolve_target(
    cli_values: Optional[Mapping[str, Any]] = None,
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
    env_file: Optional[Path] = None,
    prompter: Optional[Prompter] = None,
) -> DeploymentTarget:
    """
    Build a DeploymentTarget from every configuration source.

    Args:
        cli_values: Values given on the command line (None means unset)
        config_path: Optional YAML target file
        environ: Environment mapping (default: os.environ)
        env_file: Explicit .env file (default: auto-detected)
        prompter: Callable asking for missing values; None disables prompting

    Returns:
        Validated DeploymentTarget

    Raises:
        ConfigurationError: If values are missing or invalid
    """
    values: Dict[str, Any] = {}
    values.update(env_values(environ, env_file))
    if config_path is not None:
        values.update(load_target_file(config_path))
    for name, value in (cli_values or {}).items():
        if value is not None:
            values[name] = value

    for name, label in PROMPTS.items():
        if values.get(name) not in (None, ""):
            continue

        if name == "branch":
            default = DEFAULT_BRANCH
        elif name == "auth_token":
            default = ""
        else:
            default = None

        if prompter is not None:
            values[name] = prompter(name, label, default, name == "auth_token")
        elif default is not None:
            values[name] = default

    # An empty answer to the branch question means the default branch
    if not values.get("branch"):
        values["branch"] = DEFAULT_BRANCH

    missing = [
        name
        for name in PROMPTS
        if name != "auth_token" and values.get(name) in (None, "")
    ]
    if missing:
        raise ConfigurationError(
            f"Missing required values: {', '.join(missing)}",
            context="Pass them as options, in --config, or as HOSTDEPLOY_* variables",
        )

    kwargs = {name: _coerce(name, value) for name, value in values.items()}
    if kwargs.get("auth_token") is None:
        kwargs["auth_token"] = ""
    target = DeploymentTarget(**kwargs)

    validation = target.validate()
    if validation.has_errors:
        raise ConfigurationError(
            "Invalid deployment target", context="; ".join(validation.errors)
        )

    return target
