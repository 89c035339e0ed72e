#!/usr/bin/env python3
"""Export the OpenAPI specification of the connector hub to a file for client generation."""

import json
import sys
import os
from pathlib import Path

# Add parent directory to path to import connector_hub
sys.path.insert(0, str(Path(__file__).parent.parent))

from connector_hub.main import app


def export_openapi_spec(output_path: str = "openapi.json"):
    """Export OpenAPI specification to a JSON file."""
    openapi_schema = app.openapi()

    output_file = Path(output_path)
    with open(output_file, "w") as f:
        json.dump(openapi_schema, f, indent=2)

    print(f"OpenAPI specification exported to: {output_file.absolute()}")
    print(f"   Paths: {', '.join(sorted(openapi_schema.get('paths', {})))}")
    print(f"   File size: {output_file.stat().st_size:,} bytes")

    return output_file


if __name__ == "__main__":
    output_path = os.getenv("OPENAPI_OUTPUT", "openapi.json")

    # Allow override via command line
    if len(sys.argv) > 1:
        output_path = sys.argv[1]

    export_openapi_spec(output_path)
