"""
Command Line Interface for gallery generation.
"""

import argparse
import logging
from typing import List, Optional

from . import __version__
from .builder import GalleryBuilder
from .config import GalleryConfig, format_size, parse_size
from .errors import GalleryError, UsageError
from .progress import ProgressTracker
from .toolbox import Toolbox


def setup_logging(verbose: bool, quiet: bool = False) -> logging.Logger:
    """Configure logging."""
    if verbose:
        level = logging.DEBUG
    elif quiet:
        level = logging.WARNING
    else:
        level = logging.INFO

    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    logging.getLogger('sh').setLevel(logging.WARNING)
    logging.getLogger('PIL').setLevel(logging.WARNING)

    return logging.getLogger('albumgen')


def size_argument(value: str):
    """argparse type for "WxH" sizes."""
    try:
        return parse_size(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    defaults = GalleryConfig(input_dir='', output_dir='')

    parser = argparse.ArgumentParser(
        prog='albumgen',
        description='Build a static web gallery from a directory of photos and videos',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Output layout:
  <output-dir>/imgs    previews (and video streams)
  <output-dir>/thumbs  thumbnails
  <output-dir>/blurs   blurred placeholders
  <output-dir>/files   kept originals and the album download
  <output-dir>/data.json

The derived directories are recreated empty on every run.
"""
    )

    parser.add_argument('input_dir', metavar='input-dir', help='Directory with photos and videos')
    parser.add_argument('output_dir', metavar='output-dir', help='Gallery output directory')
    parser.add_argument('name', metavar='album-name', nargs='?', help='Album name')

    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    parser.add_argument('-j', '--jobs', type=int, default=defaults.workers, metavar='N',
                        help=f'Number of parallel workers (default: {defaults.workers})')

    sizes = parser.add_argument_group('Sizes')
    sizes.add_argument('--max-full', type=size_argument, default=defaults.max_full, metavar='WxH',
                       help=f'Maximum preview size (default: {format_size(defaults.max_full)})')
    sizes.add_argument('--max-thumb', type=size_argument, default=defaults.max_thumb, metavar='WxH',
                       help=f'Maximum thumbnail size (default: {format_size(defaults.max_thumb)})')
    sizes.add_argument('--min-thumb', type=size_argument, default=defaults.min_thumb, metavar='WxH',
                       help=f'Minimum thumbnail size (default: {format_size(defaults.min_thumb)})')
    sizes.add_argument('--quality', type=int, default=defaults.quality, metavar='Q',
                       help=f'Preview and thumbnail quality 0-100 (default: {defaults.quality})')

    order = parser.add_argument_group('Ordering')
    order.add_argument('-t', '--no-time-sort', action='store_true',
                       help='Keep file name order instead of sorting by capture time')
    order.add_argument('-r', '--reverse', action='store_true', help='Reverse album order')

    originals = parser.add_argument_group('Originals')
    originals.add_argument('-s', '--slim', action='store_true',
                           help='Do not keep any originals and do not build a download')
    originals.add_argument('-d', '--no-download', action='store_true',
                           help='Do not build the album download archive')
    originals.add_argument('-k', '--keep-original', action='store_true',
                           help='Keep every original for individual download')
    originals.add_argument('-p', '--no-panorama', action='store_true',
                           help='Do not automatically keep full size panoramas')
    originals.add_argument('--pano-ratio', type=float, default=defaults.pano_ratio, metavar='R',
                           help=f'Aspect ratio of a panorama (default: {defaults.pano_ratio})')

    processing = parser.add_argument_group('Processing')
    processing.add_argument('-o', '--no-auto-orient', action='store_true',
                            help='Do not rotate images according to their EXIF orientation')
    processing.add_argument('-f', '--face-detection', action='store_true',
                            help='Center thumbnails on detected faces')
    processing.add_argument('--no-srgb', action='store_true',
                            help='Do not convert previews and thumbnails to sRGB')

    return parser


def print_summary(builder: GalleryBuilder) -> None:
    stats = builder.stats
    print()
    print(f"Images: {stats.images}")
    print(f"Videos: {stats.videos}")
    print(f"Kept originals: {stats.kept_originals}")
    print(f"Time: {stats.elapsed_seconds:.1f}s")
    print(f"Rate: {stats.rate_per_minute:.1f}/min")


def cmd_build(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    """Build the gallery described by args."""
    logger = setup_logging(args.verbose, args.quiet)

    config = GalleryConfig.from_args(args)
    errors = config.validate()
    if errors:
        parser.print_help()
        for error in errors:
            logger.error(error)
        return UsageError.exit_code

    logger.info(f"Input: {config.input_dir}")
    logger.info(f"Output: {config.output_dir}")
    logger.info(f"Workers: {config.workers}")

    try:
        builder = GalleryBuilder(
            config,
            toolbox=Toolbox.from_env(logger=logger),
            progress=ProgressTracker(quiet=args.quiet, logger=logger),
            logger=logger
        )
        builder.build()
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except GalleryError as e:
        logger.error(str(e))
        return e.exit_code
    except Exception as e:
        logger.exception(f"Build failed: {e}")
        return 1

    if not args.quiet:
        print_summary(builder)
    return 0


def main(args: Optional[List[str]] = None) -> int:
    """Main entry point."""
    parser = create_parser()
    parsed_args = parser.parse_args(args)
    return cmd_build(parsed_args, parser)
