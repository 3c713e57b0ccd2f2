"""Unit tests for metadata sanitization and score parsing."""

from vector_index.codec import encode_vector
from vector_index.metadata import extract_score, sanitize_metadata


class TestSanitizeMetadata:
    """Tests for sanitize_metadata."""

    def test_strips_reserved_fields_and_content(self):
        properties = {
            "vec": encode_vector([0.1, 0.2]),
            "__vec_score": "0.42",
            "content": "hello",
            "tag": "x",
        }

        assert sanitize_metadata(properties, include_content=False) == {"tag": "x"}

    def test_keeps_content_when_requested(self):
        properties = {"vec": b"\x00" * 4, "__vec_score": "0.1", "content": "hello", "tag": "x"}

        assert sanitize_metadata(properties, include_content=True) == {
            "content": "hello",
            "tag": "x",
        }

    def test_custom_field_names(self):
        properties = {"embedding": b"", "dist": "1", "vec": "user value"}

        result = sanitize_metadata(
            properties, include_content=False, vector_field="embedding", score_field="dist"
        )

        assert result == {"vec": "user value"}

    def test_never_aliases_input(self):
        """Mutating the result must not touch the backend properties."""
        properties = {"tags": ["a", "b"], "content": "hello"}

        result = sanitize_metadata(properties, include_content=True)
        result["tags"].append("c")
        result["extra"] = 1

        assert properties == {"tags": ["a", "b"], "content": "hello"}


class TestExtractScore:
    """Tests for extract_score."""

    def test_parses_string_score(self):
        assert extract_score({"__vec_score": "0.42"}) == 0.42

    def test_absent_score_defaults_to_zero(self):
        assert extract_score({"tag": "x"}) == 0.0

    def test_non_string_score_defaults_to_zero(self):
        assert extract_score({"__vec_score": 0.42}) == 0.0
        assert extract_score({"__vec_score": b"0.42"}) == 0.0

    def test_malformed_score_defaults_to_zero(self):
        assert extract_score({"__vec_score": "not-a-number"}) == 0.0

    def test_custom_score_field(self):
        assert extract_score({"dist": "1.5"}, score_field="dist") == 1.5
