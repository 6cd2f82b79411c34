from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Protocol


class DecoderGateway(Protocol):
    def decode(self, input_path: str) -> "DecodedImage":
        """Decode the primary image of a HEIC container into an RGB raster.

        Raises DecodeInitError, NoPrimaryImageError or DecodeError.
        """


class EncoderGateway(Protocol):
    def encode(self, image: "DecodedImage", out: BinaryIO, quality: int) -> None:
        """Write `image` to the open binary stream `out` as a baseline JPEG."""


@dataclass(frozen=True)
class ConversionJob:
    input_path: str
    output_dir: str
    quality: int

    @property
    def output_path(self) -> Path:
        # strip only the last extension; ".HEIC" alone maps to ".jpg"
        name = Path(self.input_path).name
        stem = name.rpartition(".")[0] if "." in name else name
        return Path(self.output_dir) / f"{stem}.jpg"


@dataclass
class DecodedImage:
    """Interleaved 8-bit RGB raster. Rows may be padded: `stride` >= width * 3."""

    pixels: bytes
    width: int
    height: int
    stride: int

    def release(self) -> None:
        self.pixels = b""
