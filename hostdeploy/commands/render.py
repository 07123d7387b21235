"""
Render Command

Render docker-compose.yml and the nginx site locally, without touching
the remote host.
"""

from pathlib import Path
from typing import Optional

import click
from rich.syntax import Syntax

from hostdeploy.base import BaseCommand
from hostdeploy.commands.options import target_options
from hostdeploy.constants import COMPOSE_FILE_NAME
from hostdeploy.models.target import DeploymentTarget
from hostdeploy.services import ConfigRenderer


class RenderCommand(BaseCommand):
    """Preview or export the generated descriptors."""

    def __init__(
        self,
        target: DeploymentTarget,
        output_dir: Optional[Path] = None,
        json_output: bool = False,
    ):
        super().__init__(json_output=json_output)
        self.target = target
        self.output_dir = output_dir

    def execute(self) -> None:
        renderer = ConfigRenderer(self.target)
        rendered = renderer.render()

        if self.output_dir is not None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            compose_file = self.output_dir / COMPOSE_FILE_NAME
            proxy_file = self.output_dir / renderer.proxy_file_name
            compose_file.write_text(rendered.compose_file)
            proxy_file.write_text(rendered.proxy_file)

            if self.json_output:
                self.output_json(
                    {"compose": str(compose_file), "proxy": str(proxy_file)}
                )
                return

            self.print_success(f"Wrote {compose_file}")
            self.print_success(f"Wrote {proxy_file}")
            return

        if self.json_output:
            self.output_json(
                {
                    "compose": rendered.compose_file,
                    "compose_path": rendered.compose_path,
                    "proxy": rendered.proxy_file,
                    "proxy_path": rendered.proxy_path,
                }
            )
            return

        self.console.print(f"[dim]# {rendered.compose_path}[/dim]")
        self.console.print(Syntax(rendered.compose_file, "yaml"))
        self.console.print(f"[dim]# {rendered.proxy_path}[/dim]")
        self.console.print(Syntax(rendered.proxy_file, "nginx"))


@click.command()
@target_options
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    default=None,
    help="Write the files here instead of printing them",
)
@click.option("--json", "json_output", is_flag=True, help="Output in JSON format")
def render(target, output_dir, json_output):
    """
    Render the compose and nginx files without deploying

    Examples:
        hostdeploy render --config deploy.yml
        hostdeploy render --config deploy.yml -o ./out
    """
    cmd = RenderCommand(
        target,
        output_dir=Path(output_dir) if output_dir else None,
        json_output=json_output,
    )
    cmd.run()
