from fastapi import FastAPI, APIRouter, UploadFile, File
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.datastructures import UploadFile as StarletteUploadFile
from starlette.middleware.cors import CORSMiddleware
import os
import time
import logging
import argparse
from pathlib import Path
from typing import Optional, Tuple, Union

from errors import ImageTuneError, UploadRejected
from models import IMAGE_EXTENSIONS, ErrorResponse, FilesResponse, GenerateResponse
from settings import Settings, configure_credentials, ensure_directories
from services.image_analyzer import ImageAnalyzer, mime_type_for
from services.library_index import match_files
from services.music_generator import MusicGenerator
from services.naming import resolve_image_name, timestamped_name
from services.storage import save_bytes, save_prompt

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _error_response(exc: Exception, fallback: str) -> JSONResponse:
    status_code = exc.status_code if isinstance(exc, ImageTuneError) else 500
    body = ErrorResponse(error=str(exc) or fallback, details=f"{type(exc).__name__}: {exc}")
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


async def _read_upload(image: UploadFile, max_bytes: int) -> Tuple[str, bytes]:
    """Validate an uploaded image and return its sanitised filename and content."""
    filename = os.path.basename(image.filename.replace("\\", "/"))
    ext = Path(filename).suffix.lower()
    content_type = image.content_type or ""

    if ext not in IMAGE_EXTENSIONS or not content_type.startswith("image/"):
        raise UploadRejected("Only image files are allowed!")

    content = await image.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise UploadRejected(f"File too large: limit is {max_bytes} bytes")
    if not content:
        raise UploadRejected("Uploaded image is empty")
    return filename, content


def _stored_image_name(uploads_dir: Path, filename: str) -> str:
    # Re-uploads get a timestamp suffix so earlier images stay on disk.
    if (uploads_dir / filename).exists():
        return timestamped_name(filename, int(time.time() * 1000))
    return filename


def create_app(
    settings: Optional[Settings] = None,
    analysis_client: Optional[ImageAnalyzer] = None,
    synthesis_client: Optional[MusicGenerator] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    ensure_directories(settings)
    if analysis_client is None or synthesis_client is None:
        configure_credentials(settings)

    analyzer = analysis_client or ImageAnalyzer(settings)
    generator = synthesis_client or MusicGenerator(settings)

    app = FastAPI(title="ImageTune API", version="1.0.0")

    # Create a router with the /api prefix
    api_router = APIRouter(prefix="/api")

    # ============== Library ==============

    @api_router.get("/files", response_model=FilesResponse, response_model_exclude_none=True)
    def list_generated_files():
        try:
            return FilesResponse(files=match_files(settings))
        except Exception as e:
            logger.exception(f"Error listing files: {e}")
            return _error_response(e, "Failed to list files")

    # ============== Generation ==============

    @api_router.post("/generate", response_model=GenerateResponse)
    async def generate_music(image: Union[UploadFile, str, None] = File(None)):
        # A plain form field named "image" carries no file.
        if not isinstance(image, StarletteUploadFile) or not image.filename:
            return JSONResponse(status_code=400, content={"error": "No image file provided"})

        try:
            original_name, image_bytes = await _read_upload(image, settings.max_upload_bytes)
            logical_name = resolve_image_name(original_name)
            stored_name = _stored_image_name(settings.uploads_dir, original_name)
            await save_bytes(settings.uploads_dir / stored_name, image_bytes)
            logger.info(f"Stored upload {stored_name} as '{logical_name}'")

            prompt = await analyzer.analyze(image_bytes, mime_type_for(stored_name))

            audio = await generator.synthesize(prompt)
            audio_filename = f"{logical_name}.wav"
            await save_bytes(settings.outputs_dir / audio_filename, audio)

            await save_prompt(settings.texts_dir / f"{logical_name}.txt", prompt)
            logger.info(f"Generated {audio_filename} for {stored_name}")

            return GenerateResponse(
                image_url=f"/uploads/{stored_name}",
                prompt=prompt,
                audio_url=f"/outputs/{audio_filename}",
                filename=audio_filename,
            )
        except Exception as e:
            logger.exception(f"Error generating music: {e}")
            return _error_response(e, "Failed to generate music")

    # ============== Health Check ==============

    @api_router.get("/")
    async def root():
        return {"message": "ImageTune API", "version": "1.0.0"}

    @api_router.get("/health")
    async def health_check():
        return {"status": "healthy"}

    # Include the router
    app.include_router(api_router)

    app.mount("/uploads", StaticFiles(directory=str(settings.uploads_dir)), name="uploads")
    app.mount("/outputs", StaticFiles(directory=str(settings.outputs_dir)), name="outputs")
    app.mount("/texts", StaticFiles(directory=str(settings.texts_dir)), name="texts")
    if settings.public_dir.is_dir():
        app.mount("/", StaticFiles(directory=str(settings.public_dir), html=True), name="public")

    app.add_middleware(
        CORSMiddleware,
        allow_credentials=True,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    logger.info(f"Uploads directory: {settings.uploads_dir}")
    logger.info(f"Outputs directory: {settings.outputs_dir}")
    logger.info(f"Texts directory: {settings.texts_dir}")
    return app


def main() -> None:
    import uvicorn

    parser = argparse.ArgumentParser(description="Run the ImageTune API server.")
    parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    parser.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3000)")
    args = parser.parse_args()

    settings = Settings.from_env()
    overrides = {k: v for k, v in (("host", args.host), ("port", args.port)) if v is not None}
    if overrides:
        settings = settings.model_copy(update=overrides)

    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
