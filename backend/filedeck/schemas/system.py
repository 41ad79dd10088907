"""Health and version schemas."""

from pydantic import BaseModel, ConfigDict, Field


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "ok"
    version: str
    service: str = "filedeck"


class VersionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    version: str
    build: str = "1"
    language: str = "python"
    framework: str = "fastapi"
    storage: str = "Local"
    dir_files: str = Field(alias="dirFiles")
    dir_cache: str = Field(alias="dirCache")
