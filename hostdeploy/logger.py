"""
Logging system for hostdeploy
Provides real-time logging to files with clean console output
"""

from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional, TextIO

from rich.console import Console
from rich.markup import escape

from hostdeploy.constants import DEFAULT_LOG_DIR, LOG_FILE_TIMESTAMP_FORMAT
from hostdeploy.utils import get_project_root, mask_secrets, strip_ansi

console = Console()


class DeployLogger:
    """
    Manages logging for deployment operations
    - Writes all output to a per-run log file in real-time
    - Shows clean progress UI in console (unless verbose)
    - Masks secrets before anything is written
    """

    def __init__(
        self,
        operation: str,
        verbose: bool = False,
        log_dir: Optional[Path] = None,
        secrets: Iterable[Optional[str]] = (),
        rich_console: Optional[Console] = None,
    ):
        """
        Initialize logger

        Args:
            operation: Operation name (e.g., 'deploy', 'cleanup')
            verbose: If True, show all output in console
            log_dir: Directory for log files (default: ./logs)
            secrets: Values that must never reach the log or console
            rich_console: Rich console (default: module console)
        """
        self.operation = operation
        self.verbose = verbose
        self.console = rich_console or console
        self.secrets = [s for s in secrets if s]
        self.log_file: Optional[TextIO] = None
        self.current_step = ""
        self.has_errors = False

        if log_dir is None:
            log_dir = get_project_root() / DEFAULT_LOG_DIR
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)

        # Structure: logs/{operation}_{YYYYmmdd_HHMMSS}.log
        timestamp = datetime.now().strftime(LOG_FILE_TIMESTAMP_FORMAT)
        self.log_path = log_dir / f"{operation}_{timestamp}.log"

        # Append so two runs in the same second share one file
        self.log_file = open(self.log_path, "a", buffering=1)

        self._write_log_header()

    def mask(self, text: str) -> str:
        """Replace every secret in text with the mask."""
        return mask_secrets(text, self.secrets)

    def _write_log_header(self):
        """Write log file header"""
        header = f"""
{"=" * 80}
hostdeploy Log
{"=" * 80}
Operation: {self.operation}
Started: {datetime.now().isoformat()}
{"=" * 80}

"""
        self.log_file.write(header)
        self.log_file.flush()

    def log(self, message: str, level: str = "INFO"):
        """
        Log a message to file and optionally console

        Args:
            message: Message to log
            level: Log level (INFO, WARNING, ERROR, DEBUG)
        """
        message = self.mask(message)
        timestamp = datetime.now().strftime("%H:%M:%S")
        log_line = f"[{timestamp}] [{level}] {message}\n"

        if self.log_file:
            self.log_file.write(log_line)
            self.log_file.flush()

        if self.verbose:
            if level == "ERROR":
                self.console.print(f"[red]{escape(message)}[/red]")
            elif level == "WARNING":
                self.console.print(f"[yellow]{escape(message)}[/yellow]")
            elif level == "DEBUG":
                self.console.print(f"[dim]{escape(message)}[/dim]")
            else:
                self.console.print(message, markup=False)

    def log_command(self, command: str):
        """Log a command being executed"""
        self.log(f"Executing: {command}", "DEBUG")

    def log_output(self, output: str, stream: str = "stdout"):
        """
        Log command output

        Always written to the log file; echoed to the console only if verbose.

        Args:
            output: Command output (single line or multiline)
            stream: Stream name (stdout, stderr)
        """
        if not output:
            return

        clean_output = self.mask(strip_ansi(output))

        if self.log_file:
            for line in clean_output.splitlines():
                self.log_file.write(f"  [{stream}] {line}\n")
            self.log_file.flush()

        if self.verbose:
            self.console.print(clean_output, markup=False, highlight=False)

    def log_error(self, error: str, context: Optional[str] = None):
        """
        Log an error with context

        Args:
            error: Error message
            context: Additional context (e.g., command that failed)
        """
        self.has_errors = True
        error = self.mask(error)
        context = self.mask(context) if context else None

        # Clear markers for grepping
        error_block = f"""
{"!" * 80}
ERROR OCCURRED
{"!" * 80}
{error}
"""
        if context:
            error_block += f"\nContext: {context}\n"

        error_block += f"{'!' * 80}\n\n"

        if self.log_file:
            self.log_file.write(error_block)
            self.log_file.flush()

        if not self.verbose:
            self.console.print()

        self.console.print(f"[bold red]✗ {escape(error)}[/bold red]")
        if context:
            self.console.print(f"  [color(208)]{escape(context)}[/color(208)]")

    def step(self, step_name: str):
        """
        Start a new step

        Args:
            step_name: Name of the step
        """
        if self.current_step and not self.verbose:
            self.console.print()

        self.current_step = step_name
        self.log(f"Step: {step_name}", "INFO")

        if not self.verbose:
            self.console.print(
                f"[color(214)]▶[/color(214)] [white]{escape(step_name)}[/white]"
            )

    def success(self, message: str):
        """Log a success message"""
        self.log(message, "INFO")

        if not self.verbose:
            self.console.print(f"  [dim]✓ {escape(self.mask(message))}[/dim]")

    def warning(self, message: str):
        """Log a warning message"""
        self.log(message, "WARNING")

        if not self.verbose:
            self.console.print(
                f"  [yellow]⚠[/yellow] [dim]{escape(self.mask(message))}[/dim]"
            )

    def close(self):
        """Close log file"""
        if self.log_file:
            footer = f"""
{"=" * 80}
Completed: {datetime.now().isoformat()}
Status: {"FAILED" if self.has_errors else "SUCCESS"}
{"=" * 80}
"""
            self.log_file.write(footer)
            self.log_file.close()
            self.log_file = None

    def __enter__(self):
        """Context manager entry"""
        return self

    def __exit__(self, exc_type, exc_val, _exc_tb):
        """Context manager exit"""
        if exc_type is not None and exc_type is not SystemExit:
            self.log_error(
                str(exc_val) if exc_val else "Operation failed",
                context=f"{exc_type.__name__}",
            )
        self.close()
        return False
