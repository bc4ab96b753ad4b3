"""
SSVI - Evidence packaging tests
"""

import io
import os
from datetime import datetime, timezone

from PIL import Image

from app.services.evidence import (
    MAX_BYTES,
    EvidenceFile,
    burn_timestamp,
    compress_jpeg,
    evidence_filename,
    package_evidence,
    split_category,
)
from helpers import make_jpeg

TZ = "Asia/Bangkok"
# 2026-02-25 14:05 in Bangkok
WHEN = datetime(2026, 2, 25, 7, 5, tzinfo=timezone.utc)


class TestFilenames:

    def test_fixed_point_name(self):
        """Fixed-point photos have index 1."""
        assert split_category("building.jpg") == ("building", 1)
        assert split_category("Roof.JPG") == ("roof", 1)

    def test_checklist_name(self):
        assert split_category("checklist_3.jpg") == ("checklist", 3)

    def test_unrecognised_name(self):
        assert split_category("IMG 0001.heic") == ("IMG 0001", 1)
        assert split_category("") == ("photo", 1)

    def test_pattern(self):
        """{category}_{index}_{HHmm}_{DDMMYY}.jpg in local time."""
        assert evidence_filename("checklist", 2, WHEN, TZ) == "checklist_2_1405_250226.jpg"

    def test_buddhist_era_pattern(self):
        assert evidence_filename("yard", 1, WHEN, TZ, era="buddhist") == "yard_1_1405_250269.jpg"


class TestBurnIn:

    def test_stamp_changes_bottom_right_only(self):
        """Text lands in the bottom-right corner and the top-left is untouched."""
        original = make_jpeg(800, 600, color=(90, 90, 90))
        stamped = Image.open(io.BytesIO(burn_timestamp(original, "25/02/2026 14:05:00")))

        assert stamped.format == "JPEG"
        assert stamped.size == (800, 600)
        corner = stamped.crop((400, 450, 800, 600)).convert("L")
        assert corner.getextrema()[1] > 200  # white fill
        assert corner.getextrema()[0] < 50   # black outline
        top_left = stamped.crop((0, 0, 200, 200)).convert("L")
        low, high = top_left.getextrema()
        assert high - low < 20


class TestCompression:

    def test_downscales_longest_side(self):
        """Output fits in 1280 px, aspect ratio kept."""
        out = Image.open(io.BytesIO(compress_jpeg(make_jpeg(4000, 3000))))
        assert max(out.size) == 1280
        assert out.size == (1280, 960)

    def test_small_image_not_upscaled(self):
        out = Image.open(io.BytesIO(compress_jpeg(make_jpeg(320, 240))))
        assert out.size == (320, 240)

    def test_size_limit(self):
        """Noisy photos still end under 0.7 MB."""
        noisy = Image.frombytes("RGB", (2400, 1800), os.urandom(2400 * 1800 * 3))
        buf = io.BytesIO()
        noisy.save(buf, format="JPEG", quality=100)
        assert len(compress_jpeg(buf.getvalue())) <= MAX_BYTES


class TestPackageEvidence:

    def test_packages_and_renames(self):
        f = EvidenceFile(filename="checklist_1.jpg", content_type="image/png", content=make_jpeg(2000, 1500))
        out = package_evidence(f, WHEN, TZ)

        assert out.filename == "checklist_1_1405_250226.jpg"
        assert out.content_type == "image/jpeg"
        assert max(Image.open(io.BytesIO(out.content)).size) <= 1280

    def test_falls_back_to_original_on_bad_image(self):
        """Undecodable bytes are submitted unchanged."""
        f = EvidenceFile(filename="roof.jpg", content_type="image/jpeg", content=b"not an image")
        assert package_evidence(f, WHEN, TZ) is f
