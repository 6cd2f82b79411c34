from typing import BinaryIO

import pillow_heif
from PIL import Image

from .errors import DecodeError, DecodeInitError, EncodeError, NoPrimaryImageError
from .interfaces import DecodedImage, DecoderGateway, EncoderGateway

# libheif failures surface from pillow-heif as one of these;
# unsupported file types are reported as SyntaxError
_HEIF_ERRORS = (OSError, ValueError, RuntimeError, EOFError, SyntaxError)


class PillowHeifDecoder(DecoderGateway):
    def decode(self, input_path: str) -> DecodedImage:
        try:
            heif_file = pillow_heif.open_heif(input_path, convert_hdr_to_8bit=True)
        except _HEIF_ERRORS as e:
            raise DecodeInitError("could not read HEIC file", input_path) from e

        if len(heif_file) == 0:
            raise NoPrimaryImageError("could not get primary image handle", input_path)
        try:
            handle = heif_file[heif_file.primary_index]
        except (IndexError, *_HEIF_ERRORS) as e:
            raise NoPrimaryImageError("could not get primary image handle", input_path) from e

        try:
            # pixel data is decoded lazily on first access
            data = handle.data
            mode, (width, height), stride = handle.mode, handle.size, handle.stride
        except _HEIF_ERRORS as e:
            raise DecodeError("could not decode image", input_path) from e

        if mode == "RGB":
            return DecodedImage(pixels=bytes(data), width=width, height=height, stride=stride)

        # Alpha and greyscale rasters are flattened to plain RGB
        try:
            with Image.frombuffer(mode, (width, height), data, "raw", mode, stride, 1) as img:
                with img.convert("RGB") as rgb:
                    pixels = rgb.tobytes()
        except _HEIF_ERRORS as e:
            raise DecodeError(f"could not convert {mode} raster to RGB", input_path) from e
        return DecodedImage(pixels=pixels, width=width, height=height, stride=width * 3)


class PillowJpegEncoder(EncoderGateway):
    def encode(self, image: DecodedImage, out: BinaryIO, quality: int) -> None:
        """Write a baseline JPEG, 3 components, sized from the decoded raster.

        Pillow feeds libjpeg scanlines top to bottom; quantization tables are
        libjpeg's scaling of `quality`.
        """
        size = (image.width, image.height)
        try:
            with Image.frombuffer("RGB", size, image.pixels, "raw", "RGB", image.stride, 1) as img:
                img.save(out, format="JPEG", quality=quality, progressive=False, optimize=False)
        except (OSError, ValueError) as e:
            raise EncodeError(f"could not encode JPEG at quality {quality}") from e
