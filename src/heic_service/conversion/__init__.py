"""
Domain layer for HEIC to JPEG conversion.
Provides codec gateways, the single-file Converter and the batch service, so
front-ends (CLI, HTTP or the Streamlit UI) share the same core logic.
"""

from .errors import (
    ConversionError,
    DecodeError,
    DecodeInitError,
    EncodeError,
    NoPrimaryImageError,
    OutputOpenError,
)
from .interfaces import ConversionJob, DecodedImage, DecoderGateway, EncoderGateway
from .service import (
    BatchResult,
    ConversionOutcome,
    ConversionService,
    Converter,
    default_service,
    ensure_output_dir,
    find_heic_files,
)
