"""
Base Command Class

Abstract base for all hostdeploy CLI commands.
Provides common functionality and structure.
"""

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from hostdeploy.exceptions import HostDeployError
from hostdeploy.logger import DeployLogger
from hostdeploy.ui_components import show_header


class BaseCommand(ABC):
    """
    Abstract base command class.

    Provides:
    - Logger initialization
    - Header display
    - Error handling and exit codes
    - JSON output support
    """

    def __init__(
        self,
        verbose: bool = False,
        json_output: bool = False,
        log_dir: Optional[Path] = None,
    ):
        self.verbose = verbose
        self.json_output = json_output
        self.log_dir = log_dir
        self.console = Console()
        self.logger: Optional[DeployLogger] = None

    def init_logger(
        self, operation: str, secrets: Iterable[Optional[str]] = ()
    ) -> DeployLogger:
        """
        Initialize the per-run logger.

        Args:
            operation: Operation name, used in the log file name
            secrets: Values masked in every log line

        Returns:
            DeployLogger instance
        """
        self.logger = DeployLogger(
            operation,
            verbose=self.verbose,
            log_dir=self.log_dir,
            secrets=secrets,
            rich_console=Console(quiet=True) if self.json_output else self.console,
        )
        return self.logger

    def output_json(self, data: Dict[str, Any], exit_code: int = 0) -> None:
        """
        Output data as JSON and exit.

        Args:
            data: Data to output as JSON
            exit_code: Exit code (0 for success, non-zero for error)
        """
        print(json.dumps(data, indent=2))
        if exit_code != 0:
            raise SystemExit(exit_code)

    def output_json_error(
        self, error: str, details: Optional[Dict[str, Any]] = None, exit_code: int = 1
    ) -> None:
        """
        Output error as JSON and exit.

        Args:
            error: Error message
            details: Optional error details
            exit_code: Exit code
        """
        error_data = {"error": error}
        if details:
            error_data["details"] = details
        self.output_json(error_data, exit_code=exit_code)

    def show_header(
        self,
        title: str,
        subtitle: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Show command header (skip in JSON or verbose mode)."""
        if not self.verbose and not self.json_output:
            show_header(
                title=title,
                subtitle=subtitle,
                details=details,
                console=self.console,
            )

    def print_success(self, message: str) -> None:
        """Print success message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[green]✓ {escape(message)}[/green]")

    def print_error(self, message: str) -> None:
        """Print error message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[red]✗ {escape(message)}[/red]")

    def print_dim(self, message: str) -> None:
        """Print dim message (skip in JSON mode)."""
        if not self.json_output:
            self.console.print(f"[dim]{escape(message)}[/dim]")

    def _print_log_path(self) -> None:
        if self.logger and not self.json_output:
            self.console.print(f"\n[dim]Logs saved to:[/dim] {self.logger.log_path}\n")

    @abstractmethod
    def execute(self, **kwargs) -> None:
        """
        Execute command logic.

        Must be implemented by subclasses.
        """
        pass

    def run(self, **kwargs) -> None:
        """
        Run command with error handling.

        Any HostDeployError aborts with exit code 1 and points at the log file.
        """
        try:
            self.execute(**kwargs)
        except KeyboardInterrupt:
            self.console.print("\n[yellow]⚠️  Operation cancelled by user[/yellow]")
            self._print_log_path()
            raise SystemExit(130)
        except SystemExit:
            raise
        except HostDeployError as e:
            if self.logger:
                self.logger.log_error(e.message, context=e.context)
            if self.json_output:
                message, context = e.message, e.context
                if self.logger:
                    message = self.logger.mask(message)
                    context = self.logger.mask(context) if context else None
                self.output_json_error(
                    message, details={"context": context} if context else None
                )
            if self.logger:
                self.console.print(
                    f"\n[bold red][❌ ERROR] Something failed. Check "
                    f"{self.logger.log_path} for details.[/bold red]\n"
                )
            else:
                self.print_error(e.message)
                if e.context:
                    self.print_dim(f"Context: {e.context}")
            raise SystemExit(1)
        except Exception as e:
            error_type = type(e).__name__
            detail = self.logger.mask(str(e)) if self.logger else str(e)
            self.console.print(
                f"\n[bold red]✗ {error_type}:[/bold red] {escape(detail)}\n"
            )
            if self.logger:
                self.logger.log_error(f"{error_type}: {e}")
                self._print_log_path()
            raise SystemExit(1)
        finally:
            if self.logger:
                self.logger.close()
