"""Request DTOs for API endpoints.

Field aliases keep the camelCase JSON the dashboard front end sends.
"""

from pydantic import BaseModel, ConfigDict, Field


class SearchClientRequest(BaseModel):
    """Request DTO for a fuzzy client search."""

    query: str = Field(..., description="Client name as typed by the user")


class GenerateReportRequest(BaseModel):
    """Request DTO for AI report generation."""

    model_config = ConfigDict(populate_by_name=True)

    folder_name: str = Field(..., alias="folderName", min_length=1, description="Client folder name")
    folder_id: str | None = Field(None, alias="folderId", description="Client folder id, needed to save history")
    report_type: str = Field(
        "full",
        alias="reportType",
        pattern="^(full|quick)$",
        description="'full' operations report or 'quick' 2-3 sentence summary",
    )


class SearchHistoryRequest(BaseModel):
    """Request DTO for recording a searched client."""

    model_config = ConfigDict(populate_by_name=True)

    client_folder_id: str = Field(..., alias="clientFolderId", min_length=1)
    client_name: str = Field(..., alias="clientName", min_length=1)


class ClientNoteRequest(BaseModel):
    """Request DTO for saving a note about a client."""

    model_config = ConfigDict(populate_by_name=True)

    client_folder_id: str = Field(..., alias="clientFolderId", min_length=1)
    note: str = Field(..., description="Free-text note; an empty string clears it")
