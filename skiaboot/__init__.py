"""skiaboot - idempotent Skia build environment bootstrapper."""

__version__ = "0.1.0"
