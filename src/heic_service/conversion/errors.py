class ConversionError(Exception):
    """A single conversion job failed. Never fatal to a batch."""

    code = "conversion_failed"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.path = path

    def __str__(self) -> str:
        msg = super().__str__()
        return f"{msg}: {self.path}" if self.path else msg


class DecodeInitError(ConversionError):
    code = "decode_init_failed"


class NoPrimaryImageError(ConversionError):
    code = "no_primary_image"


class DecodeError(ConversionError):
    code = "decode_failed"


class OutputOpenError(ConversionError):
    code = "output_open_failed"


class EncodeError(ConversionError):
    code = "encode_failed"
