"""Dump the HTTP API's OpenAPI document to a JSON file."""

import argparse
import json
from pathlib import Path

from chatbot_service.main import app


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "-o", "--output", type=Path, default=Path("openapi.json"), help="Output path"
    )
    args = parser.parse_args()

    schema = app.openapi()
    args.output.write_text(json.dumps(schema, indent=2, ensure_ascii=False) + "\n")
    print(f"Generated {args.output} ({len(schema['paths'])} paths)")


if __name__ == "__main__":
    main()
