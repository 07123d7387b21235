"""hostdeploy CLI - Doctor command"""

import shutil
from pathlib import Path

import click
from rich.table import Table

from hostdeploy.base import TargetCommand
from hostdeploy.commands.options import run_options, target_options
from hostdeploy.exceptions import SSHError

LOCAL_TOOLS = ["ssh"]
REMOTE_TOOLS = ["git", "docker", "docker-compose", "nginx", "curl"]


class DoctorCommand(TargetCommand):
    """Local and remote health check before a deployment."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.table = Table(
            title="System Health Report", title_justify="left", padding=(0, 1)
        )
        self.table.add_column("Check", style="cyan", no_wrap=True)
        self.table.add_column("Status")
        self.table.add_column("Details", style="dim")
        self.checks: dict[str, bool] = {}

    def _add(self, name: str, ok: bool, details: str = "", missing: str = "Missing"):
        self.checks[name] = ok
        if ok:
            self.table.add_row(f"✅ {name}", "[green]OK[/green]", details)
        else:
            self.table.add_row(f"❌ {name}", f"[red]{missing}[/red]", details)

    def check_local(self) -> None:
        """Check local tools and the SSH key."""
        for tool in LOCAL_TOOLS:
            self._add(tool, shutil.which(tool) is not None, "", "Not installed")

        key = self.target.ssh_connection.config
        self._add("SSH key", key.key_exists, str(key.key_path_expanded), "Not found")

    def check_remote(self) -> bool:
        """Check SSH reachability and remote tools. Returns reachability."""
        ssh = self.ensure_ssh_service()
        try:
            result = ssh.execute_command("true")
        except SSHError as e:
            self._add("SSH connection", False, e.message, "Unreachable")
            return False

        self._add("SSH connection", result.is_success, ssh.connection.connection_string)
        if result.is_failure:
            return False

        for tool in REMOTE_TOOLS:
            probe = ssh.execute_command(f"command -v {tool}")
            self._add(
                f"remote {tool}",
                probe.is_success,
                probe.stdout.strip(),
                "Not installed (deploy installs it)",
            )
        return True

    def execute(self) -> None:
        self.show_header(title="Doctor", details=self.target_details)
        self.init_target_logger("doctor")

        self.check_local()
        reachable = self.check_remote()

        if self.json_output:
            self.output_json({"checks": self.checks}, exit_code=0 if reachable else 1)
            return

        self.console.print(self.table)
        if not reachable:
            self.console.print("\n[red]Remote host is not reachable over SSH[/red]\n")
            raise SystemExit(1)
        self.console.print()


@click.command()
@target_options
@run_options
def doctor(target, timeout, log_dir, verbose, json_output):
    """
    Check that the target host can be deployed to

    Verifies the local ssh client and key, SSH connectivity and which
    tools are already installed remotely.
    """
    cmd = DoctorCommand(
        target,
        verbose=verbose,
        json_output=json_output,
        log_dir=Path(log_dir) if log_dir else None,
        timeout=timeout,
    )
    cmd.run()
