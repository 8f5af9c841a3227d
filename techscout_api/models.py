"""Pydantic models for API requests and responses."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Analysis Models
# =============================================================================


class AnalysisRecord(BaseModel):
    """Five-section technology report produced for one analysis request.

    Serialized with camelCase keys to match the web client.
    """

    model_config = ConfigDict(populate_by_name=True)

    topic: str = Field(..., description="What was analyzed")
    summary: str = Field(..., description="Technology overview")
    market_trends: str = Field(..., alias="marketTrends", description="Market trends")
    key_players: str = Field(..., alias="keyPlayers", description="Key players")
    use_cases: str = Field(..., alias="useCases", description="Use cases")
    challenges: str = Field(..., description="Challenges")
    created_at: datetime | None = Field(
        default=None, alias="createdAt", description="Set when stored for sharing"
    )


class TopicRequest(BaseModel):
    """Request body for topic analysis."""

    topic: str | None = Field(default=None, description="Technology subject to analyze")


class UrlRequest(BaseModel):
    """Request body for URL analysis."""

    url: str | None = Field(default=None, description="Web page to analyze")


class RefineRequest(BaseModel):
    """Request body for rewriting a single report section."""

    content: str | None = Field(default=None, description="Section text to rewrite")
    action: str | None = Field(default=None, description="refine, simplify or expand")
    context: str = Field(default="", description="Topic label the section belongs to")


class RefineResponse(BaseModel):
    """Response for the refine endpoint."""

    model_config = ConfigDict(populate_by_name=True)

    refined_content: str = Field(..., alias="refinedContent")


# =============================================================================
# Share Link Models
# =============================================================================


class ShareLinkResponse(BaseModel):
    """Response for share link creation."""

    model_config = ConfigDict(populate_by_name=True)

    shareable_url: str = Field(..., alias="shareableUrl")
    share_id: str = Field(..., alias="shareId")


# =============================================================================
# Health / Error Models
# =============================================================================


class HealthResponse(BaseModel):
    """Response for health check endpoint."""

    status: Literal["healthy", "degraded"] = Field(..., description="Service status")
    completion_configured: bool = Field(..., description="Completion API key or mock mode set")
    shared_reports: int = Field(..., description="Number of stored share links")
    version: str = Field(..., description="API version")


class ErrorResponse(BaseModel):
    """Error body returned by every endpoint."""

    error: str
