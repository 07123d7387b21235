"""
Cleanup Command

Tear down everything a deployment created on the remote host.
"""

from pathlib import Path

import click

from hostdeploy.base import TargetCommand
from hostdeploy.commands.options import run_options, target_options


class CleanupCommand(TargetCommand):
    """Stop containers, prune docker, delete the app directory and nginx site."""

    def execute(self) -> None:
        """Execute cleanup command."""
        self.show_header(
            title="Cleanup",
            subtitle="Removing containers, images and files",
            details={"Host": self.target.ssh_connection.connection_string},
        )

        logger = self.init_target_logger("cleanup")
        logger.warning("Running cleanup operation")

        outcome = self.create_provisioner().cleanup()

        if self.json_output:
            data = outcome.to_dict()
            data["log"] = str(logger.log_path)
            self.output_json(data)
            return

        self.console.print()
        self.print_success("All resources removed successfully")
        for path in outcome.removed_paths:
            self.print_dim(f"  removed {path}")
        self.console.print(f"\nLogs saved in: {logger.log_path}\n")


@click.command()
@target_options
@run_options
def cleanup(target, timeout, log_dir, verbose, json_output):
    """
    Remove a deployment from the remote host

    Stops the containers, prunes unused images and volumes, deletes the
    application directory and any nginx site this tool installed.

    Examples:
        hostdeploy cleanup --config deploy.yml
    """
    cmd = CleanupCommand(
        target,
        verbose=verbose,
        json_output=json_output,
        log_dir=Path(log_dir) if log_dir else None,
        timeout=timeout,
    )
    cmd.run()
