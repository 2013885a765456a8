"""
FormBridge - Record and Response Schemas
=========================================

What:  Pydantic models for the records appended to the JSON list and for the
       payloads returned by POST /submit.
How:   Records are dumped with ``by_alias=True`` so the catalog variant keeps
       the camelCase keys its consumers read (contributorName, imagePath, ...).
Who:   Built by formbridge.services.record_builder, returned by the variants.

The record-list file stores plain dicts. Entries already in the file are
never parsed into these models, so older or hand-edited entries survive
appends unchanged.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ══════════════════════════════════════════════════════════════════════════
# Records: what gets appended to the record-list file
# ══════════════════════════════════════════════════════════════════════════


class PriceEntry(BaseModel):
    """
    What:  One observed price for a set at a store (variant ``price``).
    Where: Appended to prices.json.
    """

    set_name: str = Field(description="Name of the set the price was seen for")
    store: str = Field(description="Store where the price was seen")
    price: str = Field(description="Price exactly as typed into the form")
    date_seen: str = Field(description="Date the price was seen, as typed")
    notes: str = Field(default="", description="Free-form notes")
    image_path: Optional[str] = Field(
        default=None,
        description="Repository path of the photo uploaded with this entry, if any",
    )


class CatalogSubmission(BaseModel):
    """
    What:  A community catalog submission (variant ``catalog``).
    Where: Appended to submissions.json with camelCase keys.

    estimated_value is NaN when the submitted text was not a number; the
    record is stored anyway and the NaN is written as null.
    status is always "approved": there is no review step.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(description="sub-<epoch ms>-<9 random base36 chars>")
    contributor_name: str
    character_name: str = ""
    series: str
    rarity: str
    estimated_value: float
    notes: str = ""
    image_path: Optional[str] = None
    submitted_at: str = Field(description="ISO-8601 UTC timestamp, millisecond precision")
    status: str = "approved"


# ══════════════════════════════════════════════════════════════════════════
# Response Models: what POST /submit returns
# ══════════════════════════════════════════════════════════════════════════


class PriceSubmitResponse(BaseModel):
    """Success payload for the price variant."""

    ok: bool = True
    image_path: Optional[str] = None


class CatalogSubmitResponse(BaseModel):
    """Success payload for the catalog variant."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    submission_id: str
    image_path: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    What:  Error body shared by every non-2xx response.

    Example:
        {
            "error": "Missing required fields",
            "details": {"missing": ["series"]},
            "request_id": "a1b2c3d4"
        }
    """

    error: str = Field(description="Short error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    """Health check response showing service and content store status."""

    status: str = Field(description="Overall service status: healthy, degraded")
    version: str = Field(description="Application version")
    variant: str = Field(description="Active submission variant")
    content_store: str = Field(description="GitHub reachability: reachable, unreachable")
    uptime_seconds: float = Field(description="Seconds since service started")
