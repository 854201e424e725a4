# ABOUTME: Layers command to look up PHP runtime layer ARNs
# ABOUTME: Prints the latest layer versions published in a region

"""Layers command - Show the runtime layer ARNs for a region."""

from cleo.commands.command import Command
from cleo.helpers import argument, option
from rich.console import Console

from bref_cli.cli.utils.display import display_layers
from bref_cli.cli.utils.validators import validate_aws_region
from bref_cli.config import Settings
from bref_cli.layers import DEFAULT_LAYERS_FILE, LAYER_ACCOUNT_ID, get_layers_for_region, load_layers
from bref_cli.utils.exceptions import LayerNotFoundError


class LayersCommand(Command):
    name = "layers"
    description = "Display the versions and ARNs of the PHP layers"

    arguments = [
        argument("region", description="AWS region (default: AWS_DEFAULT_REGION or us-east-1)", optional=True),
    ]

    options = [
        option("layers-file", description="Path to layers.json", flag=False, default=str(DEFAULT_LAYERS_FILE)),
        option("account", description="AWS account publishing the layers", flag=False, default=LAYER_ACCOUNT_ID),
        option("arns", description="Only print the ARNs, one per line", flag=True),
    ]

    def handle(self) -> int:
        """Execute the layers command."""
        console = Console()

        settings = Settings.from_env().resolve(region=self.argument("region"))
        if not validate_aws_region(settings.region):
            console.print(f"[red]Invalid AWS region: {settings.region}[/red]")
            return 1

        try:
            layers = load_layers(self.option("layers-file"))
            available = get_layers_for_region(layers, settings.region, self.option("account"))
        except LayerNotFoundError as e:
            console.print(f"[red]{e.message}[/red]")
            return 1

        display_layers(console, settings.region, available, format_type="simple" if self.option("arns") else "table")
        return 0
