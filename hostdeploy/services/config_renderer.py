"""
Config Renderer

Builds the compose descriptor and the Nginx reverse-proxy descriptor
for a deployment target. Output depends only on the target, so the same
target always renders byte-identical files.
"""

import posixpath
from pathlib import Path
from typing import Any, Dict

import yaml
from jinja2 import Environment, FileSystemLoader, StrictUndefined

from hostdeploy.constants import (
    COMPOSE_APP_SERVICE,
    COMPOSE_FILE_NAME,
    COMPOSE_FILE_VERSION,
    COMPOSE_NETWORK,
    COMPOSE_PROXY_SERVICE,
    NGINX_CONF_DIR_NAME,
    NGINX_CONTAINER_CONF_NAME,
    NGINX_CONTAINER_CONF_PATH,
    NGINX_IMAGE,
    NGINX_LISTEN_PORT,
    NGINX_TEMPLATE,
)
from hostdeploy.models.results import RenderedConfig
from hostdeploy.models.target import DeploymentTarget, ProxyTopology

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class ConfigRenderer:
    """Renders deployment descriptors from a DeploymentTarget."""

    def __init__(self, target: DeploymentTarget, forward_proto: bool = True):
        self.target = target
        self.forward_proto = forward_proto
        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            autoescape=False,
        )

    @property
    def compose_path(self) -> str:
        return posixpath.join(self.target.remote_dir, COMPOSE_FILE_NAME)

    @property
    def proxy_file_name(self) -> str:
        if self.target.topology is ProxyTopology.HOST:
            return f"{self.target.container_name}.conf"
        return NGINX_CONTAINER_CONF_NAME

    @property
    def proxy_path(self) -> str:
        return posixpath.join(
            self.target.remote_dir, NGINX_CONF_DIR_NAME, self.proxy_file_name
        )

    @property
    def upstream_host(self) -> str:
        if self.target.topology is ProxyTopology.HOST:
            return "localhost"
        return COMPOSE_APP_SERVICE

    def build_compose(self) -> Dict[str, Any]:
        """
        Build the compose descriptor as a plain dict.

        CONTAINER topology: app is only exposed on the compose network and an
        nginx sibling publishes port 80.
        HOST topology: app publishes its port on the host for the host nginx.
        """
        port = str(self.target.app_port)
        app: Dict[str, Any] = {
            "build": ".",
            "container_name": self.target.container_name,
        }

        if self.target.topology is ProxyTopology.HOST:
            app["ports"] = [f"{port}:{port}"]
            app["restart"] = "unless-stopped"
            return {
                "version": COMPOSE_FILE_VERSION,
                "services": {COMPOSE_APP_SERVICE: app},
            }

        app["expose"] = [port]
        app["networks"] = [COMPOSE_NETWORK]

        conf_source = f"./{NGINX_CONF_DIR_NAME}/{NGINX_CONTAINER_CONF_NAME}"
        proxy = {
            "image": NGINX_IMAGE,
            "container_name": self.target.proxy_container_name,
            "ports": [f"{NGINX_LISTEN_PORT}:{NGINX_LISTEN_PORT}"],
            "volumes": [f"{conf_source}:{NGINX_CONTAINER_CONF_PATH}:ro"],
            "depends_on": [COMPOSE_APP_SERVICE],
            "networks": [COMPOSE_NETWORK],
        }

        return {
            "version": COMPOSE_FILE_VERSION,
            "services": {COMPOSE_APP_SERVICE: app, COMPOSE_PROXY_SERVICE: proxy},
            "networks": {COMPOSE_NETWORK: {"driver": "bridge"}},
        }

    def render_compose(self) -> str:
        return yaml.dump(
            self.build_compose(), default_flow_style=False, sort_keys=False
        )

    def render_proxy(self) -> str:
        template = self.env.get_template(NGINX_TEMPLATE)
        return template.render(
            listen_port=NGINX_LISTEN_PORT,
            server_name=self.target.server_name,
            upstream_host=self.upstream_host,
            upstream_port=self.target.app_port,
            forward_proto=self.forward_proto,
        )

    def render(self) -> RenderedConfig:
        """Render both descriptors."""
        return RenderedConfig(
            compose_file=self.render_compose(),
            proxy_file=self.render_proxy(),
            compose_path=self.compose_path,
            proxy_path=self.proxy_path,
        )
