from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class PingResponse(BaseModel):
    """Server clock reading used by clients to estimate round-trip latency."""

    timestamp: int = Field(..., description="Server time as a Unix timestamp in nanoseconds")


class UploadResponse(BaseModel):
    """Result of draining an upload body."""

    model_config = ConfigDict(populate_by_name=True)

    bytes_uploaded: int = Field(
        ...,
        alias="bytesUploaded",
        description="Total number of bytes received",
        ge=0,
    )
    duration: int = Field(
        ...,
        description="Time spent receiving the body, in milliseconds",
        ge=0,
    )


class StatusResponse(BaseModel):
    status: str = Field("ok", description="Liveness indicator")
    version: str = Field(..., description="Server version")
    timestamp: str = Field(..., description="Current server time (RFC 3339)")
