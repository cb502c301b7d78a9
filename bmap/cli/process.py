import argparse
import logging
import os
import sys
from dotenv import load_dotenv

from ..errors import BitmapError
from ..services.image_service import ImageService
from ..services.transform_service import TransformService

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bmap-process",
        description="Apply filters and rotations to a 24-bit BMP file.",
    )
    parser.add_argument("input", help="Source 24-bit BMP file")
    parser.add_argument("output", nargs="?", help="Destination BMP file")
    parser.add_argument("--grayscale", action="store_true", help="Average the three channels")
    parser.add_argument("--invert", action="store_true", help="Negative colours")
    parser.add_argument("--rotate", type=int, default=0, metavar="N",
                        help="Rotate N quarter-turns clockwise")
    parser.add_argument("--flip", action="store_true", help="Mirror left-right")
    parser.add_argument("--info", action="store_true", help="Print header fields and exit")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    level = "DEBUG" if verbose else os.getenv("BMAP_LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )


def main(argv=None) -> int:
    # Load environment variables first
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    image_service = ImageService()
    transform_service = TransformService()

    try:
        if args.info:
            for key, value in image_service.inspect(args.input).items():
                print(f"{key:<18} {value}")
            return 0

        if not args.output:
            parser.error("output is required unless --info is given")

        img = image_service.load(args.input)
        logger.info(f"Loaded {args.input} ({img.width}x{img.height})")

        if args.grayscale:
            transform_service.grayscale(img)
        if args.invert:
            transform_service.invert(img)
        for _ in range(args.rotate % 4):
            transform_service.rotate_clockwise_90(img, strict=True)
        if args.flip:
            transform_service.flip_horizontal(img, strict=True)

        image_service.save(img, args.output)
        logger.info(f"Saved {args.output} ({img.width}x{img.height})")
        image_service.release(img)
    except BitmapError as err:
        logger.error(str(err))
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
