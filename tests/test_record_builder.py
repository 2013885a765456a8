"""
FormBridge - Record Builder Unit Tests
=======================================

What:  Slugs, extensions, image paths, lenient number parsing, id generation
       and the two record shapes.
How:   Pure functions with a fixed clock; no store involved.
"""

import math
import re
from datetime import datetime, timezone

import pytest

from formbridge.services.record_builder import (
    build_catalog_submission,
    build_image_path,
    build_price_entry,
    generate_submission_id,
    image_extension,
    iso_timestamp,
    parse_float,
    slugify,
)

FIXED_NOW = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
FIXED_MS = 1705320000000


class TestSlugify:

    def test_punctuation_and_spaces_collapse_to_single_hyphen(self):
        assert slugify("Mega Bot!", "submission") == "mega-bot"

    def test_runs_of_separators_collapse(self):
        assert slugify("  Hello__World -- 2  ", "set") == "hello-world-2"

    def test_empty_slug_uses_fallback(self):
        assert slugify("!!!", "set") == "set"
        assert slugify("", "submission") == "submission"
        assert slugify(None, "submission") == "submission"

    def test_non_ascii_letters_are_separators(self):
        assert slugify("Pokémon Ünited", "set") == "pok-mon-nited"


class TestImageExtension:

    def test_case_is_preserved(self):
        assert image_extension("photo.PNG") == "PNG"

    def test_last_suffix_wins(self):
        assert image_extension("archive.tar.gz") == "gz"

    @pytest.mark.parametrize("filename", ["photo", "photo.", "", None])
    def test_missing_extension_defaults_to_jpg(self, filename):
        assert image_extension(filename) == "jpg"

    def test_path_characters_are_stripped(self):
        assert image_extension("evil.p/ng") == "png"
        assert image_extension("evil./..") == "jpg"


class TestImagePath:

    def test_catalog_example(self):
        path = build_image_path(
            "images/submissions", "Mega Bot!", "photo.PNG", "submission", now=FIXED_NOW
        )
        assert path == f"images/submissions/mega-bot-{FIXED_MS}.PNG"

    def test_fallback_slug_and_default_extension(self):
        path = build_image_path("images/", "", "upload", "set", now=FIXED_NOW)
        assert path == f"images/set-{FIXED_MS}.jpg"


class TestParseFloat:

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("12.50", 12.5),
            ("  7", 7.0),
            ("12.50 USD", 12.5),
            ("-3e2", -300.0),
            (".5", 0.5),
            ("1e", 1.0),
            ("+4.", 4.0),
        ],
    )
    def test_numeric_prefix(self, raw, expected):
        assert parse_float(raw) == expected

    def test_infinity(self):
        assert parse_float("Infinity") == math.inf
        assert parse_float("-Infinity") == -math.inf

    @pytest.mark.parametrize("raw", ["abc", "", None, "$12", "e5"])
    def test_unparsable_is_nan(self, raw):
        assert math.isnan(parse_float(raw))


class TestIdsAndTimestamps:

    def test_submission_id_format(self):
        submission_id = generate_submission_id(FIXED_NOW)
        assert re.fullmatch(rf"sub-{FIXED_MS}-[a-z0-9]{{9}}", submission_id)

    def test_submission_ids_are_unique(self):
        ids = {generate_submission_id(FIXED_NOW) for _ in range(200)}
        assert len(ids) == 200

    def test_iso_timestamp_has_millis_and_z(self):
        assert iso_timestamp(FIXED_NOW) == "2024-01-15T12:00:00.000Z"


class TestRecords:

    def test_price_entry_defaults_notes_and_passes_price_through(self):
        entry = build_price_entry(
            {"set_name": "Series 9", "store": "Target", "price": "4.99", "date_seen": "2024-01-15"},
            image_path=None,
        )
        assert entry.model_dump(by_alias=True) == {
            "set_name": "Series 9",
            "store": "Target",
            "price": "4.99",
            "date_seen": "2024-01-15",
            "notes": "",
            "image_path": None,
        }

    def test_catalog_submission_shape(self):
        record = build_catalog_submission(
            {
                "contributorName": "Alice",
                "series": "S1",
                "rarity": "Rare",
                "estimatedValue": "12.50",
            },
            image_path=None,
            now=FIXED_NOW,
        )
        dumped = record.model_dump(by_alias=True)

        assert list(dumped) == [
            "id",
            "contributorName",
            "characterName",
            "series",
            "rarity",
            "estimatedValue",
            "notes",
            "imagePath",
            "submittedAt",
            "status",
        ]
        assert dumped["id"].startswith(f"sub-{FIXED_MS}-")
        assert dumped["estimatedValue"] == 12.5
        assert dumped["characterName"] == ""
        assert dumped["imagePath"] is None
        assert dumped["submittedAt"] == "2024-01-15T12:00:00.000Z"
        assert dumped["status"] == "approved"

    def test_catalog_submission_keeps_nan(self):
        record = build_catalog_submission(
            {"contributorName": "Bob", "series": "S1", "rarity": "Common", "estimatedValue": "abc"},
            image_path="images/submissions/x-1.jpg",
        )
        assert math.isnan(record.estimated_value)
        assert record.image_path == "images/submissions/x-1.jpg"
