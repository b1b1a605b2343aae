import argparse
import logging
import sys
from typing import List, Optional, Union

from psd_ingest import PSDImage
from psd_ingest.api.layers import Group, Layer
from psd_ingest.api.raster import Raster
from psd_ingest.api.thumbnail import DEFAULT_SIZE, make_thumbnail
from psd_ingest.errors import PSDError
from psd_ingest.version import __version__

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="psd-ingest command line utility.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Be more verbose.")
    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", required=True)

    export_parser = subparsers.add_parser("export", help="Export PSD or layer as PNG")
    export_parser.add_argument(
        "input_file",
        help="Input PSD file (optionally with layer index, e.g. file.psd[0])",
    )
    export_parser.add_argument("output_file", help="Output image file")

    thumbnail_parser = subparsers.add_parser(
        "thumbnail", help="Export a thumbnail of the composite"
    )
    thumbnail_parser.add_argument("input_file", help="Input PSD file")
    thumbnail_parser.add_argument("output_file", help="Output image file")
    thumbnail_parser.add_argument(
        "--size",
        type=int,
        default=DEFAULT_SIZE,
        help="Max dimension in pixels (default: %(default)s)",
    )

    show_parser = subparsers.add_parser("show", help="Show the file content")
    show_parser.add_argument("input_file", help="Input PSD file")

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> Optional[int]:
    args = parse_args(argv)

    logging.basicConfig(level=logging.WARNING)
    if args.verbose:
        logging.getLogger("psd_ingest").setLevel(logging.DEBUG)

    try:
        if args.command == "export":
            return export(args.input_file, args.output_file)
        elif args.command == "thumbnail":
            raster = PSDImage.open(args.input_file).composite()
            return save(make_thumbnail(raster, args.size), args.output_file)
        elif args.command == "show":
            show(PSDImage.open(args.input_file))
    except (PSDError, OSError) as e:
        logger.error("%s: %s", args.input_file, e)
        return 1
    return None


def export(input_file: str, output_file: str) -> Optional[int]:
    input_parts = input_file.split("[")
    indices = [int(x.rstrip("]")) for x in input_parts[1:]]
    layer: Union[PSDImage, Layer] = PSDImage.open(input_parts[0])
    for index in indices:
        # PSDImage and Group both support indexing
        layer = layer[index]  # type: ignore[index]
    if isinstance(layer, PSDImage):
        raster = layer.composite()
    elif isinstance(layer, Group):
        from psd_ingest.composite import composite

        raster = composite(layer)
    elif layer.raster is not None:
        raster = layer.raster
    else:
        logger.error("%r has no pixels", layer)
        return 1
    return save(raster, output_file)


def save(raster: Raster, output_file: str) -> Optional[int]:
    if raster.is_empty():
        logger.error("Nothing to save, the image is empty")
        return 1
    raster.topil().save(output_file)
    return None


def show(psd: PSDImage) -> None:
    print(psd)
    _print_layers(psd, 1)
    for warning in psd.warnings:
        print("warning: %s" % warning)


def _print_layers(group: Union[PSDImage, Group], indent: int) -> None:
    # Top-most layer first, as in the layers panel.
    for layer in reversed(group):
        print("%s[%d] %r" % ("  " * indent, layer.layer_id, layer))
        if isinstance(layer, Group):
            _print_layers(layer, indent + 1)


if __name__ == "__main__":
    sys.exit(main())
