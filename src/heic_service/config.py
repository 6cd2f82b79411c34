import os
import re
from dataclasses import dataclass

MIN_QUALITY = 1
MAX_QUALITY = 100

# Global configuration defaults
INPUT_DIR = os.getenv("INPUT_DIR", "Photos")
OUTPUT_DIR = os.getenv("OUTPUT_DIR", "output")
DEFAULT_QUALITY = int(os.getenv("DEFAULT_QUALITY", "85"))
LOG_LEVEL = os.getenv("HEIC_SERVICE_LOG_LEVEL", "INFO").upper()

_INTEGER = re.compile(r"[+-]?[0-9]+")


class InvalidQualityError(ValueError):
    pass


def env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes", "on"}


def parse_quality(raw: str | int | None) -> int:
    """Parse a JPEG quality value, accepting only integers in [1, 100]."""
    if raw is None:
        raise InvalidQualityError("no quality value given")
    text = str(raw).strip()
    if not _INTEGER.fullmatch(text):
        raise InvalidQualityError(f"not a number: {raw!r}")
    value = int(text)
    if not MIN_QUALITY <= value <= MAX_QUALITY:
        raise InvalidQualityError(f"quality {value} outside {MIN_QUALITY}-{MAX_QUALITY}")
    return value


@dataclass(frozen=True)
class Config:
    input_dir: str = INPUT_DIR
    output_dir: str = OUTPUT_DIR
    quality: int = DEFAULT_QUALITY

    def __post_init__(self) -> None:
        parse_quality(self.quality)
