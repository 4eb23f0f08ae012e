from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from typing import Optional, List


class ApiModel(BaseModel):
    # Wire format is camelCase; Python code uses snake_case.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Listing Models
class MatchedRecord(ApiModel):
    image_url: str
    audio_url: str
    name: str
    prompt: Optional[str] = None


class FilesResponse(ApiModel):
    files: List[MatchedRecord]


# Generation Models
class GenerateResponse(ApiModel):
    success: bool = True
    image_url: str
    prompt: str
    audio_url: str
    filename: str


class ErrorResponse(ApiModel):
    error: str
    details: Optional[str] = None


# Upload constraints
IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".gif", ".webp")
AUDIO_EXTENSIONS = (".wav",)

MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
