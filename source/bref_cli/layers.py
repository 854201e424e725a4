# ABOUTME: Lambda layer lookup for the PHP runtimes
# ABOUTME: Reads the published layers table and builds layer ARNs per region

"""
Lookup of the published PHP runtime layers.

The layers table is a JSON document shipped with the PHP package, mapping
each layer name to the latest published version in every region:

    {"php-82": {"us-east-1": "42", "eu-west-1": "42"}, "php-82-fpm": {...}}
"""

import json
from pathlib import Path

from bref_cli.utils.exceptions import LayerNotFoundError

# AWS account publishing the runtime layers
LAYER_ACCOUNT_ID = "534081306603"

# Location of the table inside a PHP project installed with Composer
DEFAULT_LAYERS_FILE = Path("vendor") / "bref" / "bref" / "layers.json"


def load_layers(path: str | Path = DEFAULT_LAYERS_FILE) -> dict[str, dict[str, str]]:
    """Load the layers table from a JSON file."""
    path = Path(path)
    if not path.exists():
        raise LayerNotFoundError(f"Layers file not found: {path}. Run 'composer require bref/bref' first.")

    with open(path) as f:
        try:
            data = json.load(f)
        except ValueError as e:
            raise LayerNotFoundError(f"Invalid layers file {path}: {e}") from e

    if not isinstance(data, dict):
        raise LayerNotFoundError(f"Invalid layers file {path}: expected an object of layers")

    return data


def get_layer_version(layers: dict[str, dict[str, str]], layer: str, region: str) -> str:
    """Get the published version of a layer in a region."""
    if layer not in layers:
        raise LayerNotFoundError(f"Unknown layer: {layer}")

    regions = layers[layer]
    if region not in regions:
        raise LayerNotFoundError(f"Layer {layer} is not published in {region}")

    return str(regions[region])


def get_layer_arn(
    layers: dict[str, dict[str, str]], layer: str, region: str, account_id: str = LAYER_ACCOUNT_ID
) -> str:
    """Build the full ARN of a layer version."""
    version = get_layer_version(layers, layer, region)
    return f"arn:aws:lambda:{region}:{account_id}:layer:{layer}:{version}"


def get_layers_for_region(
    layers: dict[str, dict[str, str]], region: str, account_id: str = LAYER_ACCOUNT_ID
) -> list[dict[str, str]]:
    """Get every layer available in a region, sorted by name."""
    available = [
        {
            "name": layer,
            "version": str(regions[region]),
            "arn": get_layer_arn(layers, layer, region, account_id),
        }
        for layer, regions in layers.items()
        if region in regions
    ]

    if not available:
        raise LayerNotFoundError(f"No layers are published in {region}")

    available.sort(key=lambda x: x["name"])
    return available
