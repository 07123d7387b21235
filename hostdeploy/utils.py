"""
CLI Utilities

Small helpers shared by the services and commands.
"""

import re
from pathlib import Path
from typing import Iterable, Optional

from hostdeploy.constants import MASK

ANSI_ESCAPE = re.compile(r"\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])")


def get_project_root() -> Path:
    """Directory the CLI is run from (logs and .env are resolved here)."""
    return Path.cwd()


def strip_ansi(text: str) -> str:
    """Remove terminal color codes from command output."""
    return ANSI_ESCAPE.sub("", text)


def mask_secrets(text: str, secrets: Iterable[Optional[str]]) -> str:
    """
    Replace every occurrence of each secret in text with a mask.

    Args:
        text: Text that may contain secrets (commands, output)
        secrets: Secret values; empty values are ignored

    Returns:
        Masked text
    """
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text


def authenticated_url(repo_url: str, token: Optional[str]) -> str:
    """
    Embed a bearer token into an HTTP(S) clone URL.

    https://github.com/org/app.git -> https://<token>@github.com/org/app.git

    URLs that are not HTTP(S), or a missing token, are returned unchanged.
    """
    if not token:
        return repo_url

    for scheme in ("https://", "http://"):
        if repo_url.startswith(scheme):
            rest = repo_url[len(scheme):]
            # Drop any credentials already present in the URL
            if "@" in rest.split("/", 1)[0]:
                rest = rest.split("@", 1)[1]
            return f"{scheme}{token}@{rest}"

    return repo_url
