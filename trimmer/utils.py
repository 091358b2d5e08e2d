import os

from trimmer.buffer import TimeWindow
from trimmer.errors import InvalidArgumentError

# Supported formats
SUPPORTED_INPUT_FORMATS: set[str] = {".mp3", ".wav", ".flac", ".ogg", ".aac", ".m4a"}
SUPPORTED_OUTPUT_FORMATS: set[str] = {".wav"}

# Formats soundfile decodes without ffmpeg
NATIVE_INPUT_FORMATS: set[str] = {".wav", ".flac", ".ogg"}

# Default parameters
DEFAULT_PARAMS: dict[str, float] = {
    "start": 0.0,
    "gain": 1.0,
}

GAIN_RANGE: tuple[float, float] = (0.0, 2.0)
DEFAULT_BUCKET_COUNT: int = 512
MAX_BUCKET_COUNT: int = 4096
MAX_DURATION_SEC: float = 3600.0  # 1 hour

# Shortest selection the editor lets a user make
MIN_SELECTION_SEC: float = 0.01


# Validation helpers
def validate_input_file(path: str) -> None:
    """Raise FileNotFoundError / ValueError if the input path is invalid."""
    if not os.path.exists(path):
        raise FileNotFoundError(
            f"Input file not found: '{path}'.\n" f"    → Check the path and try again."
        )
    if not os.path.isfile(path):
        raise ValueError(
            f"Input path is not a file: '{path}'.\n"
            f"    → Provide a path to an audio file, not a directory."
        )

    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_INPUT_FORMATS:
        raise ValueError(
            f"Unsupported input format: '{ext}'.\n"
            f"    Supported: {', '.join(sorted(SUPPORTED_INPUT_FORMATS))}\n"
            f"    → Example: python main.py clip.mp3 clip_trimmed.wav"
        )


def validate_output_path(path: str) -> None:
    """Raise ValueError / FileNotFoundError if the output path is invalid."""
    ext: str = os.path.splitext(path)[1].lower()
    if ext not in SUPPORTED_OUTPUT_FORMATS:
        raise ValueError(
            f"Unsupported output format: '{ext}'.\n"
            f"    Trimmed audio is always saved as 16-bit PCM WAV.\n"
            f"    → Example: python main.py clip.mp3 clip_trimmed.wav"
        )

    output_dir: str = os.path.dirname(os.path.abspath(path))
    if not os.path.exists(output_dir):
        raise FileNotFoundError(
            f"Output directory does not exist: '{output_dir}'.\n"
            f"    → Create the directory first, or choose an existing path."
        )


def validate_param_range(
    value: float, name: str, min_val: float, max_val: float
) -> None:
    """Raise ValueError if a float parameter is out of its valid range."""
    if not (min_val <= value <= max_val):
        raise InvalidArgumentError(
            f"Parameter '{name}' must be between {min_val} and {max_val}. Got: {value}.\n"
            f"    → Adjust the value to be within the valid range."
        )


def validate_time_window(window: TimeWindow, duration: float) -> None:
    """
    Check a user selection against the clip before trimming.

    Requires 0 <= start < end <= duration and a selection of at least
    MIN_SELECTION_SEC.
    """
    if window.start_seconds < 0:
        raise InvalidArgumentError(
            f"Start time cannot be negative. Got: {window.start_seconds:.3f}s.\n"
            f"    → Use 0 to start at the beginning of the clip."
        )
    if window.end_seconds > duration:
        raise InvalidArgumentError(
            f"End time {window.end_seconds:.3f}s is past the end of the clip "
            f"({duration:.3f}s).\n"
            f"    → Omit the end time to trim to the end of the clip."
        )
    if window.start_seconds >= window.end_seconds:
        raise InvalidArgumentError(
            f"Start time {window.start_seconds:.3f}s must be before "
            f"end time {window.end_seconds:.3f}s.\n"
            f"    → Swap the values or widen the selection."
        )
    if window.length < MIN_SELECTION_SEC:
        raise InvalidArgumentError(
            f"Selection is too short: {window.length:.3f}s "
            f"(minimum {MIN_SELECTION_SEC}s).\n"
            f"    → Widen the selection."
        )


# Path helpers

def get_output_path(input_path: str, suffix: str = "_trimmed") -> str:
    """
    Auto-generate an output path from an input path.

    Example: clip.mp3, suffix='_trimmed'  →  clip_trimmed.wav
    """
    base: str
    base, _ = os.path.splitext(input_path)
    return f"{base}{suffix}.wav"
