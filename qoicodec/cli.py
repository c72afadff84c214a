import logging
import os
import sys

import click

from .converter import png_to_qoi, qoi_to_png
from .errors import QOIError
from .registry import default_registry


def fail(message):
    click.echo(f"qoicodec: {message}", err=True)
    sys.exit(1)


def replace_suffix(path, suffix):
    return os.path.splitext(path)[0] + suffix


@click.group()
@click.option("-v", "--verbose", default=False, is_flag=True, help="Log codec details to stderr.", show_default=True)
@click.pass_context
def main(ctx, verbose):
    """
    Convert images to and from the QOI (Quite OK Image) format.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.obj = default_registry()


@main.command()
@click.argument("source")
@click.argument("dest", required=False)
def encode(source, dest):
    """Encode an image (PNG, JPEG, camera RAW, ...) to QOI."""
    if dest is None:
        dest = replace_suffix(source, ".qoi")

    try:
        written = png_to_qoi(source, dest)
    except FileNotFoundError:
        fail(f'File "{source}" does not exist.')
    except ImportError:
        fail(f"{source} is a camera RAW file, install qoicodec[raw] to read it.")
    except (ValueError, OSError) as err:
        fail(err)

    click.echo(f"{source} -> {dest} ({written} bytes)")


@main.command()
@click.argument("source")
@click.argument("dest", required=False)
@click.pass_obj
def decode(registry, source, dest):
    """Decode a QOI file to PNG (or any format Pillow infers from DEST)."""
    if dest is None:
        dest = replace_suffix(source, ".png")

    try:
        image = qoi_to_png(source, dest, registry=registry)
    except FileNotFoundError:
        fail(f'File "{source}" does not exist.')
    except (ValueError, OSError) as err:
        fail(err)

    click.echo(f"{source} -> {dest} ({image.width}x{image.height}, {image.channels} channels)")


@main.command()
@click.argument("source", nargs=-1, required=True)
@click.pass_obj
def info(registry, source):
    """Print the header of each QOI file."""
    for src in source:
        try:
            with open(src, "rb") as f:
                name, header = registry.decode_config(f)
        except FileNotFoundError:
            fail(f'File "{src}" does not exist.')
        except QOIError as err:
            fail(f"{src}: {err}")

        click.echo(f"Filename: {src}")
        click.echo(f"format: {name}")
        for key, val in header.description.items():
            click.echo(f"{key}: {val}")
        click.echo()
