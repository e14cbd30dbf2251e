# File: einvoicing/cli.py
import logging
import sys
from pathlib import Path

import click

from einvoicing.analyze import (
    allowances_dataframe,
    lines_dataframe,
    summarize_invoice,
)
from einvoicing.constants import LOG_LEVEL
from einvoicing.errors import EInvoiceError
from einvoicing.parsing.ubl import read_invoice


@click.group()
def main():
    """einvoicing – CLI for reading UBL e-invoices."""
    logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))


@main.command()
@click.argument("invoices", type=click.Path(exists=True), nargs=-1)
def validate(invoices):
    """Parse one or more UBL invoices (files or folders).

    Folders are searched recursively for ``*.xml`` files.
    """
    if not invoices:
        click.echo("Please provide at least one file or folder.")
        return

    failed = 0
    for path_str in invoices:
        path = Path(path_str)
        if path.is_dir():
            for xml_file in sorted(path.rglob("*.xml")):
                failed += not _validate_file(xml_file)
        else:
            failed += not _validate_file(path)
    if failed:
        sys.exit(1)


def _validate_file(file_path: Path) -> bool:
    """Parse a single file and print ``[OK]`` or ``[PARSE ERROR]``."""
    filename = file_path.name
    try:
        invoice = read_invoice(file_path)
    except (EInvoiceError, OSError) as e:
        click.echo(f"[PARSE ERROR] {filename}: {e}")
        return False

    preset = invoice.preset.name if invoice.preset else "generic"
    click.echo(f"[OK]      {filename}: {invoice.number} ({preset})")
    return True


@main.command()
@click.argument("invoice", type=click.Path(exists=True, dir_okay=False))
def show(invoice):
    """Show the header summary of an invoice."""
    try:
        inv = read_invoice(Path(invoice))
    except EInvoiceError as e:
        click.echo(f"[PARSE ERROR] {e}")
        sys.exit(1)
    for key, value in summarize_invoice(inv).items():
        click.echo(f"{key:<14}{'' if value is None else value}")


@main.command()
@click.argument("invoice", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--allowances",
    is_flag=True,
    default=False,
    help="List allowances and charges instead of lines",
)
def lines(invoice, allowances):
    """Print invoice lines (or allowances and charges) as a table."""
    try:
        inv = read_invoice(Path(invoice))
    except EInvoiceError as e:
        click.echo(f"[PARSE ERROR] {e}")
        sys.exit(1)
    df = allowances_dataframe(inv) if allowances else lines_dataframe(inv)
    if df.empty:
        click.echo("(none)")
        return
    click.echo(df.to_string(index=False))


if __name__ == "__main__":
    main()
