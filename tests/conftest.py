from pathlib import Path

import pillow_heif
import pytest
from PIL import Image

from heic_service.conversion import Converter, ConversionService
from heic_service.conversion.adapters import PillowHeifDecoder, PillowJpegEncoder

pillow_heif.register_heif_opener()


def write_heic(path: Path, size: tuple[int, int] = (100, 50), mode: str = "RGB") -> Path:
    width, height = size
    img = Image.new(mode, size)
    img.putdata([
        (x * 255 // width, y * 255 // height, 128, 200)[: len(mode)]
        for y in range(height)
        for x in range(width)
    ])
    path.parent.mkdir(parents=True, exist_ok=True)
    img.save(path, format="HEIF", quality=90)
    return path


@pytest.fixture
def make_heic():
    return write_heic


@pytest.fixture
def converter() -> Converter:
    return Converter(PillowHeifDecoder(), PillowJpegEncoder())


@pytest.fixture
def service(converter) -> ConversionService:
    return ConversionService(converter)


@pytest.fixture
def photos(tmp_path) -> Path:
    d = tmp_path / "Photos"
    d.mkdir()
    return d
