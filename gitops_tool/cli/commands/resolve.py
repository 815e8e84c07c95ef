"""Resolve command implementation"""

import sys
from typing import Dict, Iterable

import click

from ..utils.output import console, print_error
from ...api.exceptions import GitopsToolError
from ...core.image_resolver import ImageResolver


def parse_image_bindings(bindings: Iterable[str]) -> Dict[str, str]:
    """Parse ``name=reference`` bindings into an image map"""
    images = {}
    for binding in bindings:
        name, separator, reference = binding.partition('=')
        if not separator or not name:
            raise click.BadParameter(
                f"Invalid image format: {binding}. Use 'name=reference'",
                param_hint="'--image'"
            )
        images[name] = reference
    return images


@click.command()
@click.option('--infile', '-i', required=True,
              type=click.Path(exists=True, dir_okay=False),
              help='Manifest stream to read')
@click.option('--outfile', '-o', required=True,
              type=click.Path(dir_okay=False, writable=True),
              help='File to write the resolved stream to')
@click.option('--image', 'images', multiple=True,
              help='Image binding (format: name=registry/reference)')
def resolve(infile, outfile, images):
    """Resolve container image placeholders in a manifest stream

    Every document must have metadata.name and kind. Images that
    reference a build target (//path:name) must have a binding.

    Examples:
        gitops-tool resolve -i app.yaml -o resolved.yaml \\
            --image //app:image=registry.example.com/app@sha256:abc
    """
    resolver = ImageResolver(parse_image_bindings(images))
    try:
        count = resolver.resolve_file(infile, outfile)
    except GitopsToolError as e:
        print_error(e, title="Resolve Error")
        sys.exit(1)

    console.print(f"[green]✓[/green] Resolved {count} document(s) into {outfile}")
