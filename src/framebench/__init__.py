"""framebench — reproducible frame-loop micro-benchmarks with regression reports."""

__version__ = "0.1.0"
