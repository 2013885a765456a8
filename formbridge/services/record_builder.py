"""
FormBridge - Record Builder
============================

What:  Turns submitted form fields into records, and derives image paths.
How:   Pure functions; the clock is injectable through ``now`` for tests.
Who:   Called by the submission variants.

Image paths look like ``<dir>/<slug>-<epoch ms>.<ext>``, e.g.
``images/submissions/mega-bot-1729342200123.PNG``.
"""

import math
import re
import secrets
import string
from datetime import datetime, timezone
from typing import Mapping, Optional

from formbridge.schemas.submission import CatalogSubmission, PriceEntry

_SLUG_INVALID = re.compile(r"[^a-z0-9]+")
_EXT_INVALID = re.compile(r"[^A-Za-z0-9]")
# Longest numeric prefix, the way JavaScript's parseFloat reads it
_FLOAT_PREFIX = re.compile(r"[+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
_ID_ALPHABET = string.ascii_lowercase + string.digits


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def epoch_millis(now: Optional[datetime] = None) -> int:
    return int((now or utcnow()).timestamp() * 1000)


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    moment = (now or utcnow()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def slugify(value: Optional[str], fallback: str) -> str:
    """Lowercase, runs of anything outside [a-z0-9] become '-', edges trimmed."""
    slug = _SLUG_INVALID.sub("-", (value or "").lower()).strip("-")
    return slug or fallback


def image_extension(filename: Optional[str], default: str = "jpg") -> str:
    """
    Extension of the uploaded file without the dot, case preserved.

    Characters outside [A-Za-z0-9] are dropped so a crafted filename cannot
    smuggle path separators into the repository path.
    """
    name = filename or ""
    if "." not in name:
        return default
    ext = _EXT_INVALID.sub("", name.rsplit(".", 1)[1])
    return ext or default


def build_image_path(
    directory: str,
    subject: Optional[str],
    filename: Optional[str],
    fallback: str,
    now: Optional[datetime] = None,
) -> str:
    slug = slugify(subject, fallback)
    ext = image_extension(filename)
    return f"{directory.strip('/')}/{slug}-{epoch_millis(now)}.{ext}"


def parse_float(value: Optional[str]) -> float:
    """
    Parse a number leniently: leading whitespace is skipped and the longest
    numeric prefix wins ("12.50 USD" → 12.5). Returns NaN when there is no
    numeric prefix at all; callers store the NaN rather than rejecting.
    """
    match = _FLOAT_PREFIX.match((value or "").lstrip())
    if not match:
        return math.nan
    return float(match.group(0))


def generate_submission_id(now: Optional[datetime] = None) -> str:
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"sub-{epoch_millis(now)}-{suffix}"


def _text(fields: Mapping[str, str], name: str) -> str:
    return fields.get(name) or ""


def build_price_entry(fields: Mapping[str, str], image_path: Optional[str]) -> PriceEntry:
    return PriceEntry(
        set_name=fields["set_name"],
        store=fields["store"],
        price=fields["price"],
        date_seen=fields["date_seen"],
        notes=_text(fields, "notes"),
        image_path=image_path,
    )


def build_catalog_submission(
    fields: Mapping[str, str],
    image_path: Optional[str],
    now: Optional[datetime] = None,
) -> CatalogSubmission:
    """
    Build a catalog record.

    The id and submittedAt come from the same clock reading, so a record's id
    timestamp always matches its submittedAt.
    """
    moment = now or utcnow()
    return CatalogSubmission(
        id=generate_submission_id(moment),
        contributor_name=fields["contributorName"],
        character_name=_text(fields, "characterName"),
        series=fields["series"],
        rarity=fields["rarity"],
        estimated_value=parse_float(fields.get("estimatedValue")),
        notes=_text(fields, "notes"),
        image_path=image_path,
        submitted_at=iso_timestamp(moment),
    )
