"""
HEIC Conversion Service package.

Batch-converts HEIC photos into JPEG files. The `heic-convert` command runs
the interactive batch; `heic_service.webapi` exposes the same conversion over
HTTP.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
