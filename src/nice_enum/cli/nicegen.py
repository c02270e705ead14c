"""
nicegen - NiceEnum Generator Command-Line Interface
===================================================

This module implements the command-line interface for the NiceEnum
generator. It reads a Rust source file, finds the enums annotated with
#[derive(NiceEnum)] and writes their kind types and accessor impls.

Usage Examples
--------------
Print generated code:
    $ nicegen shapes.rs

With output file:
    $ nicegen shapes.rs -o shapes_kind.rs

Every enum in the file, annotated or not:
    $ nicegen --all shapes.rs

From a JSON schema instead of Rust source:
    $ nicegen --json shapes.json

Methods the enum already has (derived names must not collide):
    $ nicegen --reserve len --reserve kind_name shapes.rs

Verbose mode:
    $ nicegen -v shapes.rs
"""

import logging
from pathlib import Path
from typing import Optional

import click

from nice_enum import __version__
from nice_enum.cli.errors import handle_cli_exception
from nice_enum.generator import DEFAULT_DERIVE_NAME, GeneratorOptions, NiceEnumGenerator

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output Rust file (default: stdout)",
)
@click.option(
    "--all", "all_enums",
    is_flag=True,
    help="Derive for every enum, not only annotated ones",
)
@click.option(
    "--derive", "derive_name",
    default=DEFAULT_DERIVE_NAME,
    show_default=True,
    help="Derive name that selects enums",
)
@click.option(
    "--reserve",
    multiple=True,
    metavar="NAME",
    help="Existing method name derived members must not use (can be repeated)",
)
@click.option(
    "--json", "from_json",
    is_flag=True,
    help="Read INPUT_FILE as a JSON schema instead of Rust source",
)
@click.option(
    "--no-header",
    is_flag=True,
    help="Omit the 'Generated by nicegen' comment",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="nicegen")
def main(
    input_file: Path,
    output: Optional[Path],
    all_enums: bool,
    derive_name: str,
    reserve: tuple[str, ...],
    from_json: bool,
    no_header: bool,
    verbose: bool,
) -> None:
    """
    Generate kind types and accessors for Rust enums.

    INPUT_FILE is a Rust source file (.rs), or a JSON schema with --json.

    For each selected enum the output holds a payload-free <Name>Kind
    enum and an impl block with kind(), is_<variant>() and, for variants
    with exactly one unnamed field, as_<variant>(), as_<variant>_mut()
    and into_<variant>().

    \b
    Examples:
        nicegen shapes.rs                  # Print to stdout
        nicegen shapes.rs -o kinds.rs      # Write to file
        nicegen --all shapes.rs            # Every enum
        nicegen --json shapes.json         # Schema input
    """
    setup_logging(verbose)

    if not derive_name.isidentifier():
        handle_cli_exception(
            click.BadParameter(f"'{derive_name}' is not a valid derive name", param_hint="--derive"),
            verbose,
        )

    options = GeneratorOptions(
        derive_name=derive_name,
        all_enums=all_enums,
        reserved_names=frozenset(reserve),
        emit_header=not no_header,
    )

    try:
        logger.debug(f"Generating from {input_file}")
        if reserve:
            logger.debug(f"Reserved names: {', '.join(sorted(reserve))}")

        generator = NiceEnumGenerator(options)
        if from_json:
            result = generator.generate_schema_file(input_file)
        else:
            result = generator.generate_file(input_file)

        for items in result.derived:
            logger.debug(
                f"{items.source_name}: {items.kind_type.name}, "
                f"{len(items.impl_block.methods)} methods"
            )

        if output is None:
            click.echo(result.output, nl=False)
            return

        output.write_text(result.output, encoding="utf-8")
        click.echo(f"Generated {result.item_count} enum(s) from {input_file} -> {output}")

    except Exception as e:
        handle_cli_exception(e, verbose)


if __name__ == "__main__":
    main()
