# filename: huffman_cli.py

import argparse
import logging
import sys

from huffman_config import DECODERS, CodecConfig
from huffman_core import HuffmanError
from huffman_service import HuffmanService, compress_file, extract_file

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(prog="ruffman", description="Huffman compress or extract a file")
    parser.add_argument("-v", "--verbose", action="store_true", help="log codec internals at DEBUG level")
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="worker processes for counting and packing (0 = one per CPU, default: $RUFFMAN_WORKERS or 1)",
    )
    parser.add_argument("--chunk-size", type=int, default=None, help="tokens per worker chunk")
    parser.add_argument("--decoder", choices=DECODERS, default=None, help="bit decoder used by extract")

    subparsers = parser.add_subparsers(dest="command", required=True)
    compress = subparsers.add_parser("compress", help="compress a file")
    compress.add_argument("src", help="the source file that you want to compress")
    compress.add_argument("dest", help="the dest file path to store the compressed file")
    extract = subparsers.add_parser("extract", help="extract a ruffman-compressed file")
    extract.add_argument("src", help="the source file that you want to extract")
    extract.add_argument("dest", help="the dest file path to store the extracted file")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = CodecConfig.from_env(workers=args.workers, chunk_size=args.chunk_size, decoder=args.decoder)
        logger.debug("using %s", config)
        service = HuffmanService(config)
        if args.command == "compress":
            written = compress_file(args.src, args.dest, service)
        else:
            written = extract_file(args.src, args.dest, service)
    except (HuffmanError, OSError, ValueError) as e:
        print(f"ruffman: {args.command} failed: {e}", file=sys.stderr)
        return 1

    print(f"{args.command}: {args.src} -> {args.dest} ({written} bytes)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
