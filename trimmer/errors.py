# trimmer/errors.py
# Error types raised by the trimming core.


class InvalidArgumentError(ValueError):
    """Raised when a core routine receives input it cannot process.

    Subclasses ValueError so callers that already handle ValueError
    (CLI, HTTP handlers) keep working unchanged.
    """
