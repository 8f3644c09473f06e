"""
Usage:
    speedread PATH                 read PATH in the terminal
    speedread PATH --web           serve PATH on a local web page

Supported documents: .epub, .pdf, .txt. The reading position is saved per
document under the state directory and restored on the next open.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from speedread.config import LOG_FILENAME, ReaderConfig
from speedread.cursor import DocumentCursor
from speedread.documents import open_document
from speedread.errors import DocumentOpenError
from speedread.segmentation import SegmentationPolicy
from speedread.state import DocState

log = logging.getLogger("speedread")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speedread",
        description="Read EPUB/PDF/text documents one word at a time.",
    )
    parser.add_argument("path", help="document to read")
    parser.add_argument("-s", "--speed", dest="pace_ms", type=int, default=None,
                        help="milliseconds per word")
    parser.add_argument("--policy", choices=[p.value for p in SegmentationPolicy], default=None,
                        help="which tokens count as words (default: whitespace)")
    parser.add_argument("--state-dir", default=None, help="directory holding saved positions")
    parser.add_argument("--no-pauses", action="store_true",
                        help="do not linger on words ending a clause or sentence")
    parser.add_argument("--web", action="store_true", help="serve a local web page instead of the terminal UI")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    return parser


def configure_logging(config: ReaderConfig, verbose: bool, to_file: bool) -> None:
    kwargs = {
        "level": logging.DEBUG if verbose else logging.INFO,
        "format": "%(asctime)s %(levelname)s %(name)s: %(message)s",
    }
    if to_file:
        # The terminal belongs to curses while reading.
        try:
            config.state_dir.mkdir(parents=True, exist_ok=True)
            kwargs["filename"] = str(config.state_dir / LOG_FILENAME)
        except OSError:
            kwargs["handlers"] = [logging.NullHandler()]
    logging.basicConfig(**kwargs)


def config_from_args(args: argparse.Namespace) -> ReaderConfig:
    policy = SegmentationPolicy(args.policy) if args.policy else None
    return ReaderConfig.from_env().with_overrides(
        pace_ms=args.pace_ms,
        policy=policy,
        state_dir=Path(args.state_dir).expanduser() if args.state_dir else None,
        punctuation_pauses=False if args.no_pauses else None,
        host=args.host,
        port=args.port,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    config = config_from_args(args)
    configure_logging(config, args.verbose, to_file=not args.web)

    try:
        document = open_document(args.path)
    except DocumentOpenError as e:
        print(f"speedread: {e}", file=sys.stderr)
        return 1

    state = DocState.load(config.state_dir, document.unique_identifier())
    log.info("resuming %s at section %d word %d", document.title, state.section_index, state.word_index)
    cursor = DocumentCursor(document, state, width=config.width, policy=config.policy)

    if args.web:
        from speedread.web import serve

        serve(cursor, config)
    else:
        from speedread.tui import run

        run(cursor, config)
    return 0
