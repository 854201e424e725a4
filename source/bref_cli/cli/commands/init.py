# ABOUTME: Init command to scaffold a new serverless PHP project
# ABOUTME: Copies the index.php and serverless.yml templates into the current directory

"""Init command - Create a new project from a template."""

import logging
import shutil
import subprocess
from pathlib import Path

import questionary
from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console
from rich.panel import Panel

from bref_cli.cli.utils.display import display_created_files
from bref_cli.cli.utils.validators import validate_php_version
from bref_cli.utils.exceptions import ProjectExistsError

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"

TEMPLATES = {
    "web": "Web application",
    "function": "Event-driven function",
}

TEMPLATE_FILES = ["index.php", "serverless.yml"]

DEFAULT_PHP_VERSION = "81"

GITIGNORE_ENTRIES = ["/vendor/", "/.serverless/"]


def normalize_php_version(version: str) -> str:
    """Turn "8.1" or "81" into the "81" form used in runtime names."""
    return version.replace(".", "")


def detect_php_version() -> str | None:
    """Ask the local PHP binary for its version, if one is installed."""
    if not shutil.which("php"):
        return None
    try:
        result = subprocess.run(
            ["php", "-r", "echo PHP_MAJOR_VERSION . PHP_MINOR_VERSION;"],
            capture_output=True,
            text=True,
            timeout=10,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not detect the PHP version: %s", e)
        return None

    version = result.stdout.strip()
    if result.returncode != 0 or not validate_php_version(version):
        return None
    return version


def runtime_name(template: str, php_version: str) -> str:
    """Name of the runtime for a template, e.g. php-81-fpm for web applications."""
    runtime = f"php-{normalize_php_version(php_version)}"
    if template == "web":
        runtime += "-fpm"
    return runtime


def scaffold_project(directory: Path, template: str, php_version: str) -> list[str]:
    """
    Copy a template into a directory.

    Returns:
        Names of the files created, in creation order

    Raises:
        ProjectExistsError: if a template file already exists in the directory
    """
    if template not in TEMPLATES:
        raise ValueError(f"Unknown template: {template}")

    existing = [name for name in TEMPLATE_FILES if (directory / name).exists()]
    if existing:
        raise ProjectExistsError(
            f"The directory already contains {', '.join(existing)}.",
            existing_files=existing,
        )

    runtime = runtime_name(template, php_version)
    created = []
    for name in TEMPLATE_FILES:
        content = (TEMPLATES_DIR / template / name).read_text()
        (directory / name).write_text(content.replace("PHP_VERSION", runtime))
        created.append(name)

    gitignore = directory / ".gitignore"
    if not gitignore.exists():
        gitignore.write_text("\n".join(GITIGNORE_ENTRIES) + "\n")
        created.append(".gitignore")

    return created


class InitCommand(Command):
    name = "init"
    description = "Create a new serverless PHP project in the current directory"

    arguments = [
        argument("template", description="Project template (web/function)", optional=True),
    ]

    options = [
        option("php-version", description="PHP version of the runtime, e.g. 8.1 (default: local PHP)", flag=False),
    ]

    def handle(self) -> int:
        """Execute the init command."""
        console = Console()

        template = self.argument("template")
        if not template:
            choice = questionary.select(
                "What kind of application are you building?",
                choices=list(TEMPLATES.values()),
            ).ask()
            if choice is None:  # User cancelled (Ctrl+C)
                console.print("\n[yellow]Init cancelled.[/yellow]")
                return 1
            template = next(key for key, label in TEMPLATES.items() if label == choice)

        if template not in TEMPLATES:
            console.print(f"[red]Unknown template: {template}[/red]")
            console.print(f"Valid templates: {', '.join(TEMPLATES)}")
            return 1

        php_version = self.option("php-version") or detect_php_version() or DEFAULT_PHP_VERSION
        if not validate_php_version(php_version):
            console.print(f"[red]Invalid PHP version: {php_version}[/red]")
            return 1

        try:
            created = scaffold_project(Path.cwd(), template, php_version)
        except ProjectExistsError as e:
            console.print(f"[red]Error: {e.message}[/red]")
            console.print("Run this command in an empty directory.")
            return 1

        display_created_files(console, created)
        console.print(
            Panel.fit(
                "[bold green]Project initialized and ready to deploy![/bold green]\n\n"
                f"Runtime: [cyan]{runtime_name(template, php_version)}[/cyan]\n"
                "Deploy with: [cyan]serverless deploy[/cyan]",
                border_style="green",
                padding=(1, 2),
            )
        )
        return 0
