####################################
# --- Request/response schemas --- #
####################################

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from uploads_api.models import StoredFileRecord


class FileInfo(BaseModel):
    """A stored image as exposed to clients."""
    filename: str = Field(
        description="The storage key: local filename or Cloudinary public id.",
        json_schema_extra={"example": "holiday-1718000000000-482913004.png"},
    )
    displayName: Optional[str] = Field(
        default=None,
        description="A user-friendly name for the file.",
        json_schema_extra={"example": "holiday.png"},
    )
    url: str = Field(
        description="Fully qualified URL the file can be fetched from.",
        json_schema_extra={"example": "http://localhost:5001/uploads/holiday-1718000000000-482913004.png"},
    )

    @classmethod
    def from_record(cls, record: StoredFileRecord) -> "FileInfo":
        return cls(filename=record.storage_key, displayName=record.display_name, url=record.access_url)


class UploadResponse(BaseModel):
    """Response model for `POST /api/upload`."""
    message: str = Field(description="A message about the operation.")
    file: FileInfo

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "message": "File uploaded successfully!",
                "file": {
                    "filename": "fileuploader/holiday-1718000000000-482913004",
                    "displayName": "holiday.png",
                    "url": "https://res.cloudinary.com/demo/image/upload/v1/fileuploader/holiday-1718000000000-482913004.png",
                },
            }
        }
    )


class ListFilesResponse(BaseModel):
    """Response model for `GET /api/upload`."""
    files: List[FileInfo]


class ErrorResponse(BaseModel):
    error: str


class HealthResponse(BaseModel):
    status: str
    uptime: int = Field(description="Seconds since the app was created.")
    timestamp: int = Field(description="Current time in epoch milliseconds.")
    storage: str = Field(description="Active storage backend: cloudinary or local.")
