import logging
import os
from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from ..config import Config
from .errors import ConversionError, EncodeError, OutputOpenError
from .interfaces import ConversionJob, DecoderGateway, EncoderGateway

logger = logging.getLogger(__name__)

HEIC_SUFFIX = ".heic"
OUTPUT_DIR_MODE = 0o755


@dataclass
class ConversionOutcome:
    input_path: str
    output_path: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    outcomes: list[ConversionOutcome] = field(default_factory=list)

    @property
    def found(self) -> int:
        return len(self.outcomes)

    @property
    def converted(self) -> int:
        return sum(1 for o in self.outcomes if o.ok)

    @property
    def failed(self) -> list[ConversionOutcome]:
        return [o for o in self.outcomes if not o.ok]


def has_heic_extension(name: str) -> bool:
    return name.lower().endswith(HEIC_SUFFIX)


def find_heic_files(input_dir: str | os.PathLike[str]) -> list[Path]:
    """List regular files in `input_dir` with a .heic suffix (any case), sorted by name.

    Not recursive. Raises OSError when the directory cannot be opened.
    """
    with os.scandir(input_dir) as it:
        names = sorted(e.name for e in it if e.is_file() and has_heic_extension(e.name))
    return [Path(input_dir) / n for n in names]


def ensure_output_dir(output_dir: str | os.PathLike[str]) -> Path:
    p = Path(output_dir)
    p.mkdir(mode=OUTPUT_DIR_MODE, parents=True, exist_ok=True)
    return p


class Converter:
    """Convert one HEIC file into one JPEG file.

    Stateless between calls. The JPEG is first written to a hidden `.part`
    file beside its destination and renamed into place once the encoder has
    finished, so a failed job never leaves an empty or truncated JPEG behind.
    """

    def __init__(self, decoder: DecoderGateway, encoder: EncoderGateway) -> None:
        self._decoder = decoder
        self._encoder = encoder

    def convert(self, input_path: str, output_dir: str, quality: int) -> bool:
        return self.run(ConversionJob(str(input_path), str(output_dir), quality)).ok

    def run(self, job: ConversionJob) -> ConversionOutcome:
        try:
            output_path = self.convert_job(job)
        except ConversionError as e:
            logger.error("%s", e)
            return ConversionOutcome(input_path=job.input_path, error=str(e))
        except Exception as e:
            logger.exception("unexpected failure converting %s", job.input_path)
            return ConversionOutcome(input_path=job.input_path, error=f"{job.input_path}: {e}")
        logger.debug("converted %s -> %s", job.input_path, output_path)
        return ConversionOutcome(input_path=job.input_path, output_path=str(output_path))

    def convert_job(self, job: ConversionJob) -> Path:
        """Raising variant of `convert`. Returns the path of the written JPEG."""
        output_path = job.output_path
        with ExitStack() as stack:
            image = self._decoder.decode(job.input_path)
            stack.callback(image.release)

            part_path = output_path.with_name(f".{output_path.name}.part")
            out = self._open_output(part_path, output_path)
            try:
                try:
                    with out:
                        self._encoder.encode(image, out, job.quality)
                except OSError as e:
                    raise EncodeError("could not write JPEG", str(output_path)) from e
                try:
                    os.replace(part_path, output_path)
                except OSError as e:
                    raise OutputOpenError("could not create output file", str(output_path)) from e
            except BaseException:
                part_path.unlink(missing_ok=True)
                raise
        return output_path

    @staticmethod
    def _open_output(part_path: Path, output_path: Path) -> BinaryIO:
        try:
            return part_path.open("wb")
        except OSError as e:
            raise OutputOpenError("could not create output file", str(output_path)) from e


class ConversionService:
    """Runs batches of conversions, one file at a time, in sorted name order."""

    def __init__(self, converter: Converter) -> None:
        self._converter = converter

    @property
    def converter(self) -> Converter:
        return self._converter

    def convert_files(self, files: list[Path], output_dir: str, quality: int) -> BatchResult:
        result = BatchResult()
        for path in files:
            job = ConversionJob(str(path), str(output_dir), quality)
            result.outcomes.append(self._converter.run(job))
        return result

    def run_batch(self, config: Config) -> BatchResult:
        """Convert every HEIC file in `config.input_dir` into `config.output_dir`.

        Raises OSError when the output directory cannot be created or the input
        directory cannot be listed; individual file failures are recorded in the
        result instead.
        """
        ensure_output_dir(config.output_dir)
        files = find_heic_files(config.input_dir)
        logger.info("found %d HEIC file(s) in %s", len(files), config.input_dir)
        return self.convert_files(files, config.output_dir, config.quality)


def default_service() -> ConversionService:
    from .adapters import PillowHeifDecoder, PillowJpegEncoder

    return ConversionService(Converter(PillowHeifDecoder(), PillowJpegEncoder()))
