"""CLI: meter raw PCM from stdin, a file, or a live input device."""

import argparse
import logging
import math
import sys
from pathlib import Path
from typing import BinaryIO, Iterator, Optional, TextIO

from pcm_meter.audio.config import BadParameters, MeterConfig
from pcm_meter.audio.mime import UnsupportedMimeType

logger = logging.getLogger(__name__)

# Columns per dB in the console bar
BAR_SCALE = 40
BAR_MAX_WIDTH = 200


def render_level(db: float, label: str = "") -> str:
    """Console bar: the marker sits further right the quieter the level."""
    width = BAR_MAX_WIDTH if math.isinf(db) else min(int(-db * BAR_SCALE), BAR_MAX_WIDTH)
    return f"{label}{'|'.ljust(max(width, 1))}{db:f}"


def read_chunks(stream: BinaryIO, chunk_size: int) -> Iterator[bytes]:
    """Yield chunks from a binary stream until EOF."""
    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            return
        yield chunk


class ConsoleObserver:
    """Prints one bar per RMS report and, optionally, per peak report."""

    def __init__(self, out: TextIO, show_peak: bool = False):
        self.out = out
        if show_peak:
            self.on_peak = self._print_peak

    def on_rms(self, db: float) -> None:
        print(render_level(db), file=self.out, flush=True)

    def _print_peak(self, db: float) -> None:
        print(render_level(db, label="peak "), file=self.out, flush=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Report RMS/peak loudness (dBFS) of a raw PCM stream"
    )
    parser.add_argument(
        "--mime-type",
        "-t",
        default="audio/L16; rate=44100; channels=2",
        help='Stream format header (default: "audio/L16; rate=44100; channels=2")',
    )
    parser.add_argument(
        "--input",
        "-i",
        type=Path,
        default=None,
        help="Raw PCM file to read (default: stdin)",
    )
    parser.add_argument(
        "--device",
        type=int,
        default=None,
        help="Meter a live input device instead of stdin (needs sounddevice)",
    )
    parser.add_argument(
        "--window",
        type=float,
        default=0.4,
        help="Loudness window in seconds (default: 0.4)",
    )
    parser.add_argument(
        "--every",
        type=float,
        default=None,
        help="Report interval in seconds of audio (default: same as --window)",
    )
    parser.add_argument(
        "--peak",
        action="store_true",
        help="Also print the peak level of each interval",
    )
    parser.add_argument(
        "--chunk-size",
        type=int,
        default=4096,
        help="Bytes read per write (default: 4096)",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (default: WARNING)",
    )
    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MeterConfig.from_mime_type(
            args.mime_type,
            window_sec=args.window,
            observe_every_sec=args.every if args.every is not None else args.window,
        )
        meter = config.open(ConsoleObserver(sys.stdout, show_peak=args.peak))
    except (UnsupportedMimeType, BadParameters) as err:
        print(err, file=sys.stderr)
        return 2

    try:
        if args.device is not None:
            from pcm_meter.audio.collector import RawAudioCollector

            chunks = RawAudioCollector(config).record_stream(device=args.device)
            meter.feed(chunks)
        elif args.input is not None:
            with args.input.open("rb") as f:
                meter.feed(read_chunks(f, args.chunk_size))
        else:
            meter.feed(read_chunks(sys.stdin.buffer, args.chunk_size))
    except KeyboardInterrupt:
        pass
    except (OSError, ImportError) as err:
        print(err, file=sys.stderr)
        return 1

    logger.info("Metered stream: %d reports", meter.reports)
    return 0


if __name__ == "__main__":
    sys.exit(main())
