#!/usr/bin/env python3
"""Generate typed entity classes from a JSON authorization model.

Usage:
    ./scripts/generate_entities.py
    ./scripts/generate_entities.py fga-model.json -o src/app/authorization_entities.py
    ./scripts/generate_entities.py fga-model.json --accessor-suffixes user,team,account
    ./scripts/generate_entities.py fga-model.json --dry-run

Environment Variables:
    REBAC_CODEGEN_SCHEMA_PATH: Default JSON authorization model
    REBAC_CODEGEN_OUTPUT_PATH: Default output module
    REBAC_CODEGEN_ACCESSOR_SUFFIXES: Default accessor suffixes (comma separated)
"""

import argparse
import sys
from pathlib import Path

from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

root_path = Path(__file__).parent.parent
sys.path.insert(0, str(root_path / "src" / "rebac"))

from codegen.application import EntityGenerationService, EntityGenerator  # noqa: E402
from codegen.domain import AccessorClassification  # noqa: E402
from codegen.infrastructure import JsonSchemaLoader  # noqa: E402
from codegen.ports import SchemaError  # noqa: E402
from infrastructure.logging import configure_logging  # noqa: E402
from infrastructure.settings import get_codegen_settings  # noqa: E402

console = Console()


def parse_args():
    """Parse command line arguments."""
    settings = get_codegen_settings()
    parser = argparse.ArgumentParser(
        description="Generate typed entity classes from an authorization model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s fga-model.json
  %(prog)s fga-model.json -o authorization_entities.py
  %(prog)s fga-model.json --dry-run
        """,
    )

    parser.add_argument(
        "schema",
        nargs="?",
        type=Path,
        default=Path(settings.schema_path),
        help=f"JSON authorization model (default: {settings.schema_path})",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path(settings.output_path),
        help=f"Generated module path (default: {settings.output_path})",
    )
    parser.add_argument(
        "--accessor-suffixes",
        default=",".join(settings.accessor_suffixes),
        help="Comma separated type-name suffixes that mark accessor types",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Print the generated module instead of writing it",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args()


def print_summary(module, output: Path | None) -> None:
    """Print a table of the generated entities."""
    table = Table(title="Generated entities")
    table.add_column("Class", style="cyan")
    table.add_column("Type", style="magenta")
    table.add_column("Resource", justify="center")
    table.add_column("Accessor", justify="center")

    for entity in module.entities:
        table.add_row(
            entity.class_name,
            entity.entity_name,
            "✓" if entity.is_resource else "",
            "✓" if entity.is_accessor else "",
        )

    console.print(table)
    console.print(
        f"[bold]{module.resource_count}[/bold] resources, "
        f"[bold]{module.accessor_count}[/bold] accessors, "
        f"[bold]{module.condition_count}[/bold] conditions"
    )
    if output is not None:
        console.print(f"[green]✓[/green] Written to {output}")


def main() -> int:
    args = parse_args()
    configure_logging(debug=args.debug)

    classification = AccessorClassification.from_suffixes(
        args.accessor_suffixes.split(",")
    )
    service = EntityGenerationService(
        loader=JsonSchemaLoader(),
        generator=EntityGenerator(classification=classification),
    )

    try:
        if args.dry_run:
            module = service.render(args.schema)
            console.print(Syntax(module.source, "python"))
            print_summary(module, None)
        else:
            module = service.generate(args.schema, args.output)
            print_summary(module, args.output)
    except SchemaError as e:
        console.print(f"[bold red]Schema error:[/bold red] {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
