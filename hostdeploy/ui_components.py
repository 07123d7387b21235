"""
hostdeploy CLI - UI Components
Standardized headers and banners
"""

from rich.console import Console
from rich.markup import escape

LOGO = "hostdeploy"

# Color scheme
BRAND_COLOR = "color(214)"
SUCCESS_COLOR = "green"


def show_header(
    title: str,
    subtitle: str = None,
    details: dict = None,
    console: Console = None,
):
    """
    Display a standardized command header.

    Args:
        title: Main title (e.g., "Deploy", "Cleanup")
        subtitle: Optional subtitle line
        details: Additional key-value pairs to display
        console: Rich Console instance (creates new if None)

    Example:
        show_header(
            title="Deploy",
            details={"Host": "deploy@203.0.113.10", "Branch": "main"}
        )
    """
    if console is None:
        console = Console()

    prefix = f" [bold {BRAND_COLOR}]{LOGO}[/bold {BRAND_COLOR}] [dim]›[/dim]"

    console.print(f"{prefix} [bold white]{escape(title)}[/bold white]")

    if subtitle:
        console.print(f"{prefix} [dim]{escape(subtitle)}[/dim]")

    if details:
        for key, value in details.items():
            console.print(f"{prefix} {key}: [cyan]{escape(str(value))}[/cyan]")

    console.print()


def show_success_banner(message: str, console: Console = None):
    """Print the closing banner of a successful run."""
    if console is None:
        console = Console()

    rule = "=" * 53
    console.print(f"\n[{SUCCESS_COLOR}]{rule}[/{SUCCESS_COLOR}]")
    console.print(f"[bold {SUCCESS_COLOR}]🎉 {escape(message)}[/bold {SUCCESS_COLOR}]")
    console.print(f"[{SUCCESS_COLOR}]{rule}[/{SUCCESS_COLOR}]")
