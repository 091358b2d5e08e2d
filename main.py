#!/usr/bin/env python3
"""
Audio Trimmer CLI
Cut a time range out of an audio file, apply gain, and save it as WAV.

Usage:
    python main.py input.mp3 output.wav --start 1.5 --end 4.0
    python main.py input.wav --auto-output --gain 1.5
    python main.py input.wav --waveform
"""

import argparse
import sys
import os

from tqdm import tqdm

from trimmer.buffer import SampleBuffer, TimeWindow
from trimmer.core import load_audio, trim_audio
from trimmer.printer import OutputPrinter
from trimmer.utils import (
    DEFAULT_BUCKET_COUNT,
    DEFAULT_PARAMS,
    GAIN_RANGE,
    get_output_path,
    validate_input_file,
)
from trimmer.waveform import marker_positions, summarize


def build_parser() -> argparse.ArgumentParser:
    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="audio-trimmer",
        description="Trim audio files and export the selection as 16-bit WAV.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  python main.py clip.mp3 clip_short.wav --start 0.5 --end 2.0
  python main.py clip.wav --auto-output --gain 0.8 --quiet
  python main.py clip.wav --waveform --start 1 --end 3

Parameter guide:
  --start   seconds from the beginning (default: {DEFAULT_PARAMS['start']})
  --end     seconds from the beginning (default: end of clip)
  --gain    {GAIN_RANGE[0]} = silence | 1.0 = unchanged | {GAIN_RANGE[1]} = double
        """,
    )

    # Positional arguments
    parser.add_argument(
        "input",
        metavar="INPUT",
        help="Path to the input audio file (.mp3, .wav, .flac, .ogg, .aac, .m4a).",
    )
    parser.add_argument(
        "output",
        metavar="OUTPUT",
        nargs="?",
        default=None,
        help="Path for the output .wav file. Omit if using --auto-output or --waveform.",
    )

    # Trim parameters
    trim_group = parser.add_argument_group("Trim Parameters")
    trim_group.add_argument(
        "--start",
        "-s",
        type=float,
        default=DEFAULT_PARAMS["start"],
        metavar="SECONDS",
        help="Selection start time in seconds (default: 0).",
    )
    trim_group.add_argument(
        "--end",
        "-e",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Selection end time in seconds (default: end of clip).",
    )
    trim_group.add_argument(
        "--gain",
        "-g",
        type=float,
        default=DEFAULT_PARAMS["gain"],
        metavar="GAIN",
        help=f"Linear gain {GAIN_RANGE[0]}–{GAIN_RANGE[1]} (default: {DEFAULT_PARAMS['gain']}).",
    )

    # Output options
    out_group = parser.add_argument_group("Output Options")
    out_group.add_argument(
        "--auto-output",
        action="store_true",
        help="Auto-generate output filename from input (e.g., clip.mp3 -> clip_trimmed.wav).",
    )
    out_group.add_argument(
        "--waveform",
        "-w",
        action="store_true",
        help="Print a waveform of the input with the selection marked.",
    )
    out_group.add_argument(
        "--width",
        type=int,
        default=80,
        metavar="COLUMNS",
        help="Waveform width in columns (default: 80).",
    )
    out_group.add_argument(
        "--quiet",
        "-q",
        action="store_true",
        help="Suppress all output except errors.",
    )
    out_group.add_argument(
        "--no-color",
        "-n",
        action="store_true",
        help="Disable colored output (also auto-disabled when NO_COLOR env var is set).",
    )

    return parser


def show_waveform(printer: OutputPrinter, buffer: SampleBuffer, args: argparse.Namespace) -> None:
    """Print the source waveform with the current selection marked."""
    end: float = buffer.duration if args.end is None else args.end
    window: TimeWindow = TimeWindow(args.start, end)
    buckets = summarize(buffer, max(1, min(args.width, DEFAULT_BUCKET_COUNT)))
    markers = marker_positions(window, buffer.duration, len(buckets))
    printer.waveform(buckets, markers)
    printer.info(
        f"{buffer.duration:.2f}s · {buffer.channel_count} ch · {buffer.sample_rate} Hz"
        f" · selection {window.start_seconds:.2f}s–{window.end_seconds:.2f}s"
    )


def main() -> None:
    parser: argparse.ArgumentParser = build_parser()
    args: argparse.Namespace = parser.parse_args()

    printer: OutputPrinter = OutputPrinter(
        quiet=args.quiet,
        no_color=args.no_color,
    )

    output_path: str | None
    if args.output is not None:
        output_path = args.output
    elif args.auto_output:
        output_path = get_output_path(args.input)
    elif args.waveform:
        output_path = None
    else:
        parser.error(
            "Provide an OUTPUT path, or use --auto-output to generate one automatically."
        )
        return  # unreachable but satisfies type checkers

    try:
        source: SampleBuffer | None = None
        if args.waveform:
            validate_input_file(args.input)
            source = load_audio(args.input)
            show_waveform(printer, source, args)

        if output_path is None:
            return

        if args.quiet:
            result = trim_audio(
                input_path=args.input,
                output_path=output_path,
                start_sec=args.start,
                end_sec=args.end,
                gain=args.gain,
                source=source,
            )
        else:
            with tqdm(total=4, desc="Processing", unit="step") as pbar:

                def cli_callback(step_idx: int, total: int, name: str) -> None:
                    pbar.set_description(name)
                    if step_idx > 0:
                        pbar.update(1)

                result = trim_audio(
                    input_path=args.input,
                    output_path=output_path,
                    start_sec=args.start,
                    end_sec=args.end,
                    gain=args.gain,
                    progress_callback=cli_callback,
                    source=source,
                )
                pbar.update(1)

        size_kb: float = os.path.getsize(output_path) / 1024

        printer.success(
            title=output_path,
            details={
                "Duration": f"{result.duration:.2f}s",
                "Format": f"WAV · 16-bit · {result.channels} ch · {result.sample_rate} Hz",
                "Size": f"{size_kb:.1f} KB",
                "Time": f"{result.elapsed:.2f}s",
            },
        )
        if result.clipped_samples:
            printer.warning(
                f"{result.clipped_samples} samples exceeded full scale and were clipped.",
                hint="Lower --gain to avoid clipping.",
            )

    except (FileNotFoundError, ValueError) as exc:
        printer.error(str(exc))
        sys.exit(1)
    except KeyboardInterrupt:
        printer.warning("Trim cancelled.", hint="Output file was not saved.")
        sys.exit(130)


if __name__ == "__main__":
    main()
