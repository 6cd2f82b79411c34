import asyncio
import logging
import os
import tempfile
from pathlib import Path

from fastapi import FastAPI, File, HTTPException, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from heic_service import __version__
from heic_service.config import DEFAULT_QUALITY, INPUT_DIR, MAX_QUALITY, MIN_QUALITY, OUTPUT_DIR, Config, env_flag
from heic_service.conversion import ConversionError, ConversionJob, ConversionService, default_service

logger = logging.getLogger(__name__)

app = FastAPI(
    title="HEIC Conversion Service",
    version=os.getenv("HEIC_SERVICE_VERSION", __version__),
    description="RESTful API for converting HEIC photos into baseline JPEG files.",
)

# Global configuration defaults
MAX_UPLOAD_MB = int(os.getenv("MAX_UPLOAD_MB", "200"))
ALLOWED_MIME = set(
    os.getenv("ALLOWED_MIME", "image/heic,image/heif,image/heic-sequence,image/heif-sequence").split(",")
)
SUPPORTED_EXTS = {".heic", ".heif"}
CHUNK = 1024 * 1024

SERVICE: ConversionService | None = None


def _service() -> ConversionService:
    global SERVICE
    if SERVICE is None:
        SERVICE = default_service()
    return SERVICE


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail={"code": code, "message": message})


def _upload_name(filename: str | None) -> str:
    # keep only the final path component; force a HEIC suffix for the decoder
    name = Path(filename or "upload").name or "upload"
    if Path(name).suffix.lower() not in SUPPORTED_EXTS:
        name = f"{name}.heic"
    return name


@app.on_event("startup")
async def _startup() -> None:
    _service()


@app.get("/health")
def health() -> dict[str, str]:
    """Basic health check endpoint."""
    return {"status": "ok"}


@app.post("/convert", response_class=Response)
async def convert(
    file: UploadFile = File(...),
    quality: int = Query(DEFAULT_QUALITY, ge=MIN_QUALITY, le=MAX_QUALITY),
) -> Response:
    """Convert one uploaded HEIC image and return the JPEG bytes.

    Accepts multipart/form-data with a single required part named "file".
    The upload is streamed to a scratch directory which is removed once the
    response body has been read back.
    """
    ct = (file.content_type or "").strip().lower()
    suffix = Path(file.filename or "").suffix.lower()
    if suffix not in SUPPORTED_EXTS and ct not in ALLOWED_MIME:
        raise _error(415, "unsupported_media_type", f"{file.filename or 'upload'} is not a HEIC image")

    converter = _service().converter
    max_bytes = MAX_UPLOAD_MB * 1024 * 1024
    with tempfile.TemporaryDirectory(prefix="heic-service-") as scratch:
        input_path = Path(scratch) / _upload_name(file.filename)
        output_dir = Path(scratch) / "output"
        output_dir.mkdir()

        size_bytes = 0
        with input_path.open("wb") as f_out:
            while True:
                chunk = await file.read(CHUNK)
                if not chunk:
                    break
                size_bytes += len(chunk)
                if size_bytes > max_bytes:
                    raise _error(413, "payload_too_large", f"upload exceeds {MAX_UPLOAD_MB} MB")
                f_out.write(chunk)

        job = ConversionJob(str(input_path), str(output_dir), quality)
        try:
            output_path = await asyncio.to_thread(converter.convert_job, job)
        except ConversionError as e:
            logger.warning("conversion of upload %r failed: %s", file.filename, e)
            raise _error(422, e.code, e.args[0])
        content = await asyncio.to_thread(output_path.read_bytes)

    download_name = output_path.name.replace('"', "")
    headers = {"Content-Disposition": f'attachment; filename="{download_name}"'}
    return Response(content=content, media_type="image/jpeg", headers=headers)


@app.post("/batch")
async def batch(quality: int = Query(DEFAULT_QUALITY, ge=MIN_QUALITY, le=MAX_QUALITY)) -> JSONResponse:
    """Convert every HEIC file in INPUT_DIR into OUTPUT_DIR on the server."""
    config = Config(input_dir=INPUT_DIR, output_dir=OUTPUT_DIR, quality=quality)
    try:
        result = await asyncio.to_thread(_service().run_batch, config)
    except OSError as e:
        logger.error("batch over %s failed: %s", config.input_dir, e)
        raise _error(500, "io_error", str(e))
    body = {
        "found": result.found,
        "converted": result.converted,
        "outputs": [o.output_path for o in result.outcomes if o.ok],
        "failed": [{"file": Path(o.input_path).name, "error": o.error} for o in result.failed],
    }
    return JSONResponse(content=body)


def run() -> None:
    """Run a development ASGI server using uvicorn.

    Exposes the app at host:port (default 0.0.0.0:8080). Set PORT env var to override.
    """
    import uvicorn

    host = os.getenv("HOST", "0.0.0.0")
    port = int(os.getenv("PORT", "8080"))
    # Enable reload in dev unless explicitly disabled
    reload = env_flag("RELOAD", "true")

    uvicorn.run("heic_service.webapi:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run()
