# server.py
import os
import re
import uuid
import logging
import threading
import tempfile
from pathlib import Path

from flask import Flask, request, jsonify, send_file
from flask_cors import CORS

from application.dto.trim_dto import TrimJobDTO, TrimRequestDTO
from infrastructure.audio.numpy_audio_trimmer import NumpyAudioTrimmer
from infrastructure.audio.pcm_wav_encoder import PcmWavEncoder
from infrastructure.web.job_store import delete_job, get_job, set_job, update_job
from trimmer.core import load_audio, trim_audio
from trimmer.errors import InvalidArgumentError
from trimmer.utils import (
    DEFAULT_BUCKET_COUNT,
    DEFAULT_PARAMS,
    GAIN_RANGE,
    MAX_BUCKET_COUNT,
    MAX_DURATION_SEC,
    validate_param_range,
)
from trimmer.waveform import summarize

# ── Processing components ────────────────────────────────────────
TRIMMER = NumpyAudioTrimmer()
ENCODER = PcmWavEncoder()

# ── Logging ──────────────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("audio_trimmer")

# ── Flask app ────────────────────────────────────────────────────────
app = Flask(__name__)

# Upload size limit (100 MB hard cap)
app.config["MAX_CONTENT_LENGTH"] = 100 * 1024 * 1024

# Restrict CORS to own origin
CORS(app, resources={
    r"/waveform":   {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/trim":       {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/status/*":   {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
    r"/download/*": {"origins": ["http://localhost:5000", "http://127.0.0.1:5000"]},
})

# Load secret key from env or generate random
app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or os.urandom(32)

# ── API Blueprint Registration ─────────────────────────────────────────
from adapters.web.api_v1_blueprint import api_v1
app.register_blueprint(api_v1)

import adapters.web.openapi_spec as openapi_spec
@app.route("/api/v1/openapi.json")
def get_openapi_spec():
    return jsonify(openapi_spec.OPENAPI_SPEC)

# ════════════════════════════════════════════════════════════════════
# Security helpers
# ════════════════════════════════════════════════════════════════════

# Magic bytes for known audio formats
AUDIO_MAGIC_BYTES: dict[bytes, str] = {
    b"\xff\xfb":              ".mp3",  # MP3 (MPEG layer 3)
    b"\xff\xf3":              ".mp3",
    b"\xff\xf2":              ".mp3",
    b"ID3":                   ".mp3",  # MP3 with ID3 tag
    b"RIFF":                  ".wav",  # WAV
    b"fLaC":                  ".flac", # FLAC
    b"OggS":                  ".ogg",  # OGG
    b"\x00\x00\x00\x20ftyp": ".m4a",
    b"\x00\x00\x00\x1cftyp": ".m4a",
}


def _detect_format(file_bytes: bytes) -> str | None:
    """Return the extension for a known audio signature, else None."""
    for magic, ext in AUDIO_MAGIC_BYTES.items():
        if file_bytes[:len(magic)] == magic:
            return ext
    return None


def _sanitize_filename(name: str) -> str:
    """Strip path components, control chars, and limit length."""
    name = Path(name).name                        # strip directory traversal
    name = re.sub(r"[^\w\s\-.]", "", name)        # only safe chars
    name = re.sub(r"\.{2,}", ".", name)            # no double-extension tricks
    return name[:128].strip()


def _is_valid_job_id(job_id: str) -> bool:
    """Return True only for valid UUID4 strings."""
    try:
        val = uuid.UUID(job_id, version=4)
        return str(val) == job_id
    except ValueError:
        return False


SAFE_TEMP_DIR: str = os.path.realpath(tempfile.gettempdir())


def _is_safe_path(path: str) -> bool:
    """Return True only if path resolves inside the OS temp directory."""
    resolved = os.path.realpath(path)
    return resolved.startswith(SAFE_TEMP_DIR + os.sep)


def _form_float(name: str, default: float | None, min_v: float, max_v: float) -> float | None:
    """Parse an optional float form field; a blank field gives *default*."""
    raw = request.form.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgumentError(f"Parameter '{name}' must be a number. Got: {raw!r}.")
    validate_param_range(value, name, min_v, max_v)
    return value


def _safe_int(value, default: int, min_v: int, max_v: int) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default
    return max(min_v, min(max_v, v))


MAX_UPLOAD_BYTES: int = 100 * 1024 * 1024  # 100 MB


def _save_upload() -> tuple[str | None, tuple | None]:
    """
    Validate the multipart 'file' field and save it to a temp file.

    Returns (path, None) on success or (None, error_response) on failure.
    """
    if "file" not in request.files:
        return None, (jsonify({"error": "No file uploaded."}), 400)

    audio_file = request.files["file"]

    # Magic-byte validation — read header before saving
    header = audio_file.read(16)
    audio_file.seek(0)

    detected = _detect_format(header)
    if detected is None:
        logger.warning(
            "upload rejected ip=%s reason=invalid_magic_bytes",
            request.remote_addr,
        )
        return None, (jsonify({"error": "Unsupported or invalid audio file."}), 415)

    # The decoder is picked from the suffix, so trust the signature, not the name
    suffix = detected

    tmp_fd_in, tmp_in = tempfile.mkstemp(suffix=suffix)
    os.close(tmp_fd_in)
    try:
        audio_file.save(tmp_in)
    except Exception:
        _safe_delete(tmp_in)
        raise

    actual_size = os.path.getsize(tmp_in)
    if actual_size > MAX_UPLOAD_BYTES:
        _safe_delete(tmp_in)
        return None, (jsonify({"error": "File too large after save."}), 413)
    if actual_size == 0:
        _safe_delete(tmp_in)
        return None, (jsonify({"error": "Empty file uploaded."}), 400)

    logger.info(
        "upload accepted ip=%s size=%dB suffix=%s",
        request.remote_addr, actual_size, suffix,
    )
    return tmp_in, None


# ════════════════════════════════════════════════════════════════════
# Background jobs — state lives in infrastructure.web.job_store
# ════════════════════════════════════════════════════════════════════


def _run_trim(job_id: str, req: TrimRequestDTO) -> None:
    """Background thread target: run pipeline and update job state."""

    def on_step(step_idx: int, total_steps: int, step_name: str) -> None:
        progress = int((step_idx / total_steps) * 100)
        update_job(job_id, progress=progress, step=step_name)

    try:
        update_job(job_id, status="processing")
        result = trim_audio(
            input_path  = req.input_path,
            output_path = req.output_path,
            start_sec   = req.start_sec,
            end_sec     = req.end_sec,
            gain        = req.gain,
            progress_callback = on_step,
            audio_trimmer = TRIMMER,
            encoder     = ENCODER,
        )
        update_job(
            job_id,
            status="done",
            progress=100,
            step="Done",
            output_path=os.path.realpath(req.output_path),
            frames=result.frames,
            clipped_samples=result.clipped_samples,
        )
        logger.info("job=%s completed frames=%d", job_id[:8], result.frames)
    except Exception as e:
        update_job(job_id, status="error", error=str(e).split("\n")[0])
        logger.error("job=%s failed: %s", job_id[:8], e)
        # No partial output is ever kept
        _safe_delete(req.output_path)
    finally:
        # Always clean up input temp file — never needed again
        _safe_delete(req.input_path)
        # Forget the job and its output after 30 minutes
        _schedule_job_cleanup(job_id, req.output_path, delay_s=1800)


def _safe_delete(path: str) -> None:
    """Delete a file without raising if it does not exist."""
    try:
        if path and os.path.exists(path):
            os.unlink(path)
    except OSError as e:
        logger.warning("Could not delete %s: %s", path, e)


def _expire_job(job_id: str, output_path: str) -> None:
    """Drop a finished job and its output file."""
    _safe_delete(output_path)
    delete_job(job_id)


def _schedule_job_cleanup(job_id: str, output_path: str, delay_s: int = 1800) -> None:
    """Expire the job after *delay_s* seconds (default 30 min)."""
    timer = threading.Timer(delay_s, _expire_job, args=[job_id, output_path])
    timer.daemon = True
    timer.start()


# ════════════════════════════════════════════════════════════════════
# Routes
# ════════════════════════════════════════════════════════════════════

@app.route("/waveform", methods=["POST"])
def get_waveform():
    """
    POST /waveform
    Form fields:
      - file    : audio file (multipart)
      - buckets : number of peak values to return (default 512)
    Returns: { buckets: [float], duration, sampleRate, channels }
    """
    tmp_in, error = _save_upload()
    if error:
        return error

    bucket_count = _safe_int(
        request.form.get("buckets"), DEFAULT_BUCKET_COUNT, 1, MAX_BUCKET_COUNT
    )
    try:
        buffer = load_audio(tmp_in)
        buckets = summarize(buffer, bucket_count)
    finally:
        _safe_delete(tmp_in)

    return jsonify({
        "buckets":    [round(float(v), 5) for v in buckets],
        "duration":   buffer.duration,
        "sampleRate": buffer.sample_rate,
        "channels":   buffer.channel_count,
    })


@app.route("/trim", methods=["POST"])
def start_trim():
    """
    POST /trim
    Form fields:
      - file  : audio file (multipart)
      - start : selection start in seconds (default 0)
      - end   : selection end in seconds (default: end of clip)
      - gain  : linear gain 0.0–2.0 (default 1.0)
    Returns: { jobId: str }
    """
    # Reject bad parameters before saving the upload
    start_sec = _form_float("start", DEFAULT_PARAMS["start"], 0.0, MAX_DURATION_SEC)
    end_sec = _form_float("end", None, 0.0, MAX_DURATION_SEC)
    gain = _form_float("gain", DEFAULT_PARAMS["gain"], *GAIN_RANGE)

    tmp_in, error = _save_upload()
    if error:
        return error

    tmp_fd_out, tmp_out = tempfile.mkstemp(suffix=ENCODER.extension)
    os.close(tmp_fd_out)
    # Output is created by the pipeline only after encoding succeeds
    os.unlink(tmp_out)

    req = TrimRequestDTO(
        input_path  = tmp_in,
        output_path = tmp_out,
        start_sec   = start_sec,
        end_sec     = end_sec,
        gain        = gain,
    )

    job_id: str = str(uuid.uuid4())
    set_job(TrimJobDTO(job_id=job_id, output_path=os.path.realpath(tmp_out)))

    thread = threading.Thread(
        target=_run_trim,
        args=(job_id, req),
        daemon=True,
    )
    thread.start()

    return jsonify({"jobId": job_id}), 202


@app.route("/status/<job_id>", methods=["GET"])
def get_status(job_id: str):
    """
    GET /status/<jobId>
    Returns: { status, progress, step, error, frames, clippedSamples }
    """
    if not _is_valid_job_id(job_id):
        return jsonify({"error": "Invalid job ID."}), 400

    job = get_job(job_id)
    if not job:
        return jsonify({"error": "Job not found."}), 404
    return jsonify(job.public_view())


@app.route("/download/<job_id>", methods=["GET"])
def download_file(job_id: str):
    """
    GET /download/<jobId>
    Returns the trimmed WAV file as a binary download.
    """
    if not _is_valid_job_id(job_id):
        return jsonify({"error": "Invalid job ID."}), 400

    job = get_job(job_id)
    if not job or job.status != "done":
        return jsonify({"error": "File not ready."}), 404

    output_path: str = job.output_path

    # Path traversal defense — verify file is in temp dir
    if not _is_safe_path(output_path):
        logger.warning("path traversal attempt job=%s path=%s", job_id[:8], output_path)
        return jsonify({"error": "Access denied."}), 403

    if not os.path.exists(output_path):
        return jsonify({"error": "File has expired. Please trim again."}), 410

    raw_name = request.args.get("name", f"trimmed{ENCODER.extension}")
    download_name = _sanitize_filename(raw_name)
    if not download_name.lower().endswith(ENCODER.extension):
        download_name = f"trimmed{ENCODER.extension}"

    return send_file(
        output_path,
        mimetype=ENCODER.mimetype,
        as_attachment=True,
        download_name=download_name,
    )


# ════════════════════════════════════════════════════════════════════
# Error handlers & Security headers
# ════════════════════════════════════════════════════════════════════

@app.errorhandler(InvalidArgumentError)
def invalid_argument(e):
    return jsonify({"error": str(e).split("\n")[0]}), 400


@app.errorhandler(413)
def request_entity_too_large(e):
    return jsonify({"error": "File too large. Maximum size is 100 MB."}), 413


@app.errorhandler(404)
def not_found(e):
    path = request.path
    # Log suspicious path patterns
    suspicious = any(p in path for p in ["..", "etc", "passwd", "wp-admin", ".env"])
    if suspicious:
        logger.warning("suspicious 404 ip=%s path=%s", request.remote_addr, path)
    return jsonify({"error": "Not found."}), 404


@app.errorhandler(Exception)
def handle_exception(e):
    """Generic handler — never leak internal details to client."""
    logger.error("unhandled exception: %s", e, exc_info=True)
    return jsonify({"error": "An internal error occurred."}), 500


@app.after_request
def set_security_headers(response):
    """Add security headers to every response."""
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Content-Security-Policy"] = (
        "default-src 'self'; "
        "object-src 'none'; "
        "base-uri 'self';"
    )
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ════════════════════════════════════════════════════════════════════
# Entry point
# ════════════════════════════════════════════════════════════════════

if __name__ == "__main__":
    debug_mode = os.environ.get("FLASK_DEBUG", "false").lower() == "true"
    app.run(debug=debug_mode, port=5000)
