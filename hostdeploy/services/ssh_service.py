"""SSH service for executing commands on the remote host."""

import posixpath
import shlex
import subprocess
import time
from typing import Optional, Sequence

from hostdeploy.constants import SSH_TRANSPORT_ERROR_CODE
from hostdeploy.exceptions import SSHError
from hostdeploy.logger import DeployLogger
from hostdeploy.models.results import SSHResult
from hostdeploy.models.ssh import SSHConnection


class SSHService:
    """Service for SSH operations against a single host."""

    def __init__(
        self,
        connection: SSHConnection,
        logger: Optional[DeployLogger] = None,
        timeout: Optional[int] = None,
    ):
        """
        Initialize SSH service.

        Args:
            connection: Host and credentials
            logger: Logger that receives every command and its output
            timeout: Per-command timeout in seconds (None waits forever)
        """
        self.connection = connection
        self.logger = logger
        self.timeout = timeout

    @property
    def host(self) -> str:
        return self.connection.host

    def execute_command(
        self,
        command: str,
        input_text: Optional[str] = None,
        log_command: bool = True,
    ) -> SSHResult:
        """
        Execute command on the remote host via SSH.

        Args:
            command: Command to execute
            input_text: Data written to the remote command's stdin
            log_command: Write the command line to the log

        Returns:
            SSHResult with execution details

        Raises:
            SSHError: If ssh itself fails (timeout, missing binary, exit 255)
        """
        ssh_cmd = self.connection.build_command(command)

        if self.logger and log_command:
            self.logger.log_command(command)

        start_time = time.time()

        try:
            result = subprocess.run(
                ssh_cmd,
                input=input_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise SSHError(
                f"SSH command timed out after {self.timeout}s",
                context=f"Host: {self.host}",
            )
        except FileNotFoundError:
            raise SSHError(
                "ssh client not found", context="Install OpenSSH and retry"
            )

        duration = time.time() - start_time

        if self.logger:
            self.logger.log_output(result.stdout, "stdout")
            self.logger.log_output(result.stderr, "stderr")

        if result.returncode == SSH_TRANSPORT_ERROR_CODE:
            raise SSHError(
                f"Could not reach {self.connection.connection_string}",
                context=result.stderr.strip() or "Check host address and SSH key",
            )

        return SSHResult(
            returncode=result.returncode,
            stdout=result.stdout,
            stderr=result.stderr,
            host=self.host,
            command=command,
            duration_seconds=duration,
        )

    def run_script(self, lines: Sequence[str]) -> SSHResult:
        """
        Run a batch of shell lines in one session, stopping at the first failure.

        Args:
            lines: Shell lines; joined and prefixed with `set -e`

        Returns:
            SSHResult for the whole batch
        """
        script = "\n".join(["set -e", *lines]) + "\n"

        if self.logger:
            for line in lines:
                self.logger.log_command(line)

        return self.execute_command("bash -s", input_text=script, log_command=False)

    def upload_text(self, remote_path: str, content: str) -> SSHResult:
        """
        Write content to a file on the remote host (parents are created).

        Args:
            remote_path: Absolute path on the remote host
            content: File contents, streamed over stdin

        Returns:
            SSHResult of the write
        """
        directory = posixpath.dirname(remote_path) or "."
        command = (
            f"mkdir -p {shlex.quote(directory)} && cat > {shlex.quote(remote_path)}"
        )
        return self.execute_command(command, input_text=content)
