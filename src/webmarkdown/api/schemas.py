"""Request and response models for the conversion API."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class ConversionRequest(BaseModel):
    url: Optional[str] = Field(None, description="Absolute URL of the HTML page to convert")


class ConversionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: Literal[True] = True
    url: str = Field(..., description="The URL exactly as submitted")
    markdown: str
    content_type: str = Field(..., alias="contentType", description="Content-Type reported by the upstream")
    timestamp: str = Field(..., description="ISO-8601 UTC completion time")


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Short error category")
    message: str = Field(..., description="Human-readable detail")


class HealthResponse(BaseModel):
    status: Literal["ok"] = "ok"
