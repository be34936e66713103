"""Tests for identities and cache keys."""

from fontfinder.fonts.fingerprint import (
    face_id,
    family_id,
    format_mtime,
    preview_request_key,
    raster_cache_name,
    sha1,
    vector_cache_name,
)


class TestIdentity:
    """Test face and family identities."""

    def test_face_id_is_deterministic(self):
        first = face_id("/fonts/A.ttf", "A-Regular", "Regular")
        second = face_id("/fonts/A.ttf", "A-Regular", "Regular")
        assert first == second
        assert first == sha1("/fonts/A.ttf|A-Regular|Regular")

    def test_face_id_distinct_for_distinct_triples(self):
        ids = {
            face_id("/fonts/A.ttf", "A-Regular", "Regular"),
            face_id("/fonts/A.ttf", "A-Bold", "Bold"),
            face_id("/fonts/B.ttf", "A-Regular", "Regular"),
            face_id("/fonts/A.ttf", None, "Regular"),
        }
        assert len(ids) == 4

    def test_missing_postscript_name_hashes_as_empty(self):
        assert face_id("/f.ttf", None, "Bold") == sha1("/f.ttf||Bold")

    def test_family_id(self):
        assert family_id("Arial") == sha1("Arial")
        assert family_id("Arial") != family_id("arial")


class TestCacheKeys:
    """Test content-addressed preview keys."""

    def test_format_mtime(self):
        assert format_mtime(1700000000000.0) == "1700000000000"
        assert format_mtime(1.5) == "1.5"

    def test_raster_name_changes_with_mtime(self):
        before = raster_cache_name("/fonts/A.ttf", 1000.0, 360)
        after = raster_cache_name("/fonts/A.ttf", 2000.0, 360)

        assert before != after
        assert before.endswith("@360.png")
        assert before == f"{sha1('/fonts/A.ttf:1000:360')}@360.png"

    def test_raster_name_changes_with_size(self):
        assert raster_cache_name("/a.ttf", 1.0, 360) != raster_cache_name("/a.ttf", 1.0, 128)

    def test_vector_name_depends_on_selector_and_family(self):
        base = vector_cache_name("/a.ttc", 1.0, "A-Regular", "A")
        assert base.endswith(".svg")
        assert base != vector_cache_name("/a.ttc", 1.0, "A-Bold", "A")
        assert base != vector_cache_name("/a.ttc", 1.0, "A-Regular", "B")
        assert base != vector_cache_name("/a.ttc", 2.0, "A-Regular", "A")

    def test_vector_name_is_versioned(self):
        assert vector_cache_name("/a.ttf", 1.0, None, None) == (
            sha1("vector:v4:/a.ttf:1::") + ".svg"
        )

    def test_preview_request_key_includes_size(self):
        small = preview_request_key("/a.ttf", 1.0, "A", "A", 128)
        large = preview_request_key("/a.ttf", 1.0, "A", "A", 360)
        assert small != large
        assert large == sha1("preview:/a.ttf:1:A:A:360")
