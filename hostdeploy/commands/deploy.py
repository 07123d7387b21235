"""
Deploy Command

Provision the remote host and (re)deploy the application.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from hostdeploy.base import TargetCommand
from hostdeploy.commands.cleanup import CleanupCommand
from hostdeploy.commands.options import run_options, target_options
from hostdeploy.models.results import DeploymentOutcome, SyncAction
from hostdeploy.models.target import DeploymentTarget
from hostdeploy.ui_components import show_success_banner


@dataclass
class RunOptions:
    """Options shared by commands that talk to the remote host."""

    verbose: bool = False
    json_output: bool = False
    log_dir: Optional[Path] = None
    timeout: Optional[int] = None


class DeployCommand(TargetCommand):
    """
    Deploy an application to a single host.

    Features:
    - Fresh clone or pull of the configured branch
    - Docker, compose and nginx installation
    - Rendered compose and nginx configuration
    - Proxy reload only after nginx -t passes
    """

    def execute(self) -> None:
        """Execute deploy command."""
        self.show_header(title="Deploy", details=self.target_details)

        self.init_target_logger("deploy")
        self.check_key()

        provisioner = self.create_provisioner()
        outcome = provisioner.deploy()

        if self.json_output:
            data = outcome.to_dict()
            data["log"] = str(self.logger.log_path)
            self.output_json(data)
            return

        self._print_summary(outcome)

    def _print_summary(self, outcome: DeploymentOutcome) -> None:
        """Print deploy summary."""
        show_success_banner("Deployment completed successfully!", console=self.console)
        action = "cloned" if outcome.sync_action is SyncAction.CLONED else "updated"
        self.console.print(f"[dim]Repository {action}, branch {self.target.branch}[/dim]")
        if outcome.replaced_container:
            self.console.print("[dim]Previous deployment replaced[/dim]")
        self.console.print(f"Visit your app at [cyan]{outcome.url}[/cyan]")
        self.console.print(f"Logs saved in: {self.logger.log_path}\n")


def run_deploy(
    target: DeploymentTarget, options: RunOptions, cleanup: bool = False
) -> None:
    command_cls = CleanupCommand if cleanup else DeployCommand
    cmd = command_cls(
        target,
        verbose=options.verbose,
        json_output=options.json_output,
        log_dir=options.log_dir,
        timeout=options.timeout,
    )
    cmd.run()


@click.command()
@target_options
@run_options
@click.option(
    "--cleanup",
    is_flag=True,
    help="Tear down the deployment instead of deploying",
)
def deploy(target, timeout, log_dir, verbose, json_output, cleanup):
    """
    Deploy an application to a remote host over SSH

    Clones (or pulls) the repository, installs Docker, Docker Compose and
    nginx, renders docker-compose.yml and the nginx site, starts the
    containers and checks that the app answers.

    Missing values are asked for interactively.

    Examples:
        # Interactive
        hostdeploy deploy

        # Fully specified, nginx on the host
        hostdeploy deploy --repo-url https://github.com/org/app.git \\
            -u ubuntu -H 203.0.113.10 -i ~/.ssh/id_ed25519 -p 8080 \\
            --topology host

        # Remove everything the deployment created
        hostdeploy deploy --config deploy.yml --cleanup
    """
    options = RunOptions(
        verbose=verbose,
        json_output=json_output,
        log_dir=Path(log_dir) if log_dir else None,
        timeout=timeout,
    )
    run_deploy(target, options, cleanup=cleanup)
