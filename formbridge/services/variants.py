"""
FormBridge - Submission Variants
=================================

What:  The per-deployment differences between the two submission forms.
How:   Each variant is a small strategy object; SubmissionService is written
       against SubmissionVariant and never checks which one it holds.
Who:   Selected once at startup from ``settings.submission_variant``.

    ┌───────────────┬──────────────────────────┬──────────────────────────────┐
    │               │ price                    │ catalog                      │
    ├───────────────┼──────────────────────────┼──────────────────────────────┤
    │ record list   │ prices.json              │ submissions.json             │
    │ images        │ images/                  │ images/submissions/          │
    │ slug from     │ set_name (or "set")      │ characterName (or            │
    │               │                          │ "submission")                │
    │ missing list  │ error (500)              │ empty list                   │
    │ early read    │ no                       │ yes, before the image upload │
    │ response      │ {ok, image_path}         │ {success, submissionId,      │
    │               │                          │  imagePath}                  │
    └───────────────┴──────────────────────────┴──────────────────────────────┘
"""

from abc import ABC, abstractmethod
from typing import Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from formbridge.schemas.submission import (
    CatalogSubmission,
    CatalogSubmitResponse,
    PriceEntry,
    PriceSubmitResponse,
)
from formbridge.services.record_builder import (
    build_catalog_submission,
    build_price_entry,
)


class SubmissionVariant(ABC):
    """
    Describes one submission form and the files it maintains.

    Class attributes:
        name:               Value of SUBMISSION_VARIANT selecting this variant
        required_fields:    Form fields that must be present and non-empty
        records_path:       Default record-list file
        images_dir:         Default directory for uploaded images
        subject_field:      Form field the image slug is derived from
        slug_fallback:      Slug used when subject_field slugifies to nothing
        missing_records_ok: Treat an absent record list as an empty one
        prefetch_records:   Read the record list once before uploading the image
    """

    name: str = ""
    required_fields: Tuple[str, ...] = ()
    records_path: str = ""
    images_dir: str = ""
    subject_field: str = ""
    slug_fallback: str = ""
    missing_records_ok: bool = False
    prefetch_records: bool = False

    def __init__(self, records_path: Optional[str] = None, images_dir: Optional[str] = None):
        if records_path:
            self.records_path = records_path
        if images_dir:
            self.images_dir = images_dir

    def missing_fields(self, fields: Mapping[str, str]) -> list:
        """Required fields that are absent or empty, in declaration order."""
        return [name for name in self.required_fields if not fields.get(name)]

    def image_subject(self, fields: Mapping[str, str]) -> str:
        return fields.get(self.subject_field) or ""

    @abstractmethod
    def build_record(self, fields: Mapping[str, str], image_path: Optional[str]) -> BaseModel:
        ...

    @abstractmethod
    def image_commit_message(self, fields: Mapping[str, str]) -> str:
        ...

    @abstractmethod
    def records_commit_message(self, fields: Mapping[str, str]) -> str:
        ...

    @abstractmethod
    def success_payload(self, record: BaseModel, image_path: Optional[str]) -> BaseModel:
        ...


class PriceVariant(SubmissionVariant):
    """Price sightings: one entry per set/store/price/date."""

    name = "price"
    required_fields = ("set_name", "store", "price", "date_seen")
    records_path = "prices.json"
    images_dir = "images"
    subject_field = "set_name"
    slug_fallback = "set"

    def build_record(self, fields: Mapping[str, str], image_path: Optional[str]) -> PriceEntry:
        return build_price_entry(fields, image_path)

    def image_commit_message(self, fields: Mapping[str, str]) -> str:
        return f"Add image for set {fields['set_name']}"

    def records_commit_message(self, fields: Mapping[str, str]) -> str:
        return f"Add price entry for {fields['set_name']}"

    def success_payload(self, record: BaseModel, image_path: Optional[str]) -> PriceSubmitResponse:
        return PriceSubmitResponse(ok=True, image_path=image_path)


class CatalogVariant(SubmissionVariant):
    """Community catalog submissions, published without review."""

    name = "catalog"
    required_fields = ("contributorName", "series", "rarity", "estimatedValue")
    records_path = "submissions.json"
    images_dir = "images/submissions"
    subject_field = "characterName"
    slug_fallback = "submission"
    missing_records_ok = True
    prefetch_records = True

    def build_record(
        self, fields: Mapping[str, str], image_path: Optional[str]
    ) -> CatalogSubmission:
        return build_catalog_submission(fields, image_path)

    def image_commit_message(self, fields: Mapping[str, str]) -> str:
        subject = fields.get("characterName") or fields["series"]
        return f"Add submission image for {subject}"

    def records_commit_message(self, fields: Mapping[str, str]) -> str:
        return f"Add submission from {fields['contributorName']}"

    def success_payload(
        self, record: BaseModel, image_path: Optional[str]
    ) -> CatalogSubmitResponse:
        return CatalogSubmitResponse(
            success=True,
            submission_id=record.id,
            image_path=image_path,
        )


VARIANTS: Dict[str, Type[SubmissionVariant]] = {
    PriceVariant.name: PriceVariant,
    CatalogVariant.name: CatalogVariant,
}


def get_variant(
    name: str,
    records_path: Optional[str] = None,
    images_dir: Optional[str] = None,
) -> SubmissionVariant:
    """Instantiate the variant registered under ``name``."""
    try:
        variant_cls = VARIANTS[name]
    except KeyError:
        raise ValueError(
            f"Unknown submission variant '{name}'. Must be one of: {sorted(VARIANTS)}"
        ) from None
    return variant_cls(records_path=records_path, images_dir=images_dir)
