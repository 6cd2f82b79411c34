import logging
import sys
from typing import TextIO

from heic_service.config import INPUT_DIR, LOG_LEVEL, OUTPUT_DIR, Config, InvalidQualityError, parse_quality
from heic_service.conversion import ConversionService, default_service, ensure_output_dir, find_heic_files

logger = logging.getLogger(__name__)

PROMPT = "Enter JPEG quality (1-100, recommended 75-95): "


def _read_quality(stdin: TextIO, stdout: TextIO) -> int:
    stdout.write(PROMPT)
    stdout.flush()
    return parse_quality(stdin.readline())


def main(
    input_dir: str = INPUT_DIR,
    output_dir: str = OUTPUT_DIR,
    *,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
    stderr: TextIO | None = None,
    service: ConversionService | None = None,
) -> int:
    """Prompt for a quality, convert every HEIC file in `input_dir`, return the exit code."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    stderr = stderr or sys.stderr

    try:
        quality = _read_quality(stdin, stdout)
    except InvalidQualityError as e:
        logger.debug("rejected quality input: %s", e)
        print("Invalid quality value. Please enter a number between 1 and 100.", file=stderr)
        return 1
    print(f"Using JPEG quality: {quality}", file=stdout)
    config = Config(input_dir=input_dir, output_dir=output_dir, quality=quality)

    try:
        ensure_output_dir(config.output_dir)
    except OSError as e:
        logger.debug("mkdir %s failed: %s", config.output_dir, e)
        print("Failed to create output directory", file=stderr)
        return 1

    try:
        files = find_heic_files(config.input_dir)
    except OSError as e:
        print(f"Could not open {config.input_dir} directory: {e.strerror or e}", file=stderr)
        return 1

    print("Converting files...", file=stdout)
    service = service or default_service()
    result = service.convert_files(files, config.output_dir, config.quality)

    if result.converted == 0:
        print(f"No HEIC files found in the {config.input_dir} directory.", file=stdout)
    else:
        print(f"Successfully converted {result.converted} photos to JPEG format.", file=stdout)
    return 0


def run() -> None:
    """Console entry point for `heic-convert`."""
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVEL,
        format="%(levelname)s %(name)s: %(message)s",
    )
    sys.exit(main())


if __name__ == "__main__":
    run()
