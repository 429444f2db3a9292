# ==============================================================================
# Tests for storage key generation and segment validation
# ==============================================================================
"""
Unit tests for RedisConnection.generate_key() and validate_segment_name().

Tests cover:
- Key layout with and without a partition
- Percent-encoding of every key component
- Determinism and uniqueness across segment/id/partition
- Rejection of invalid keys and segment names
- TTL to expiry-seconds conversion

Key generation is pure, so no connection is started.
"""

import pytest

from kvcache.core.errors import InvalidKeyError, InvalidSegmentNameError
from kvcache.core.models import CacheKey
from kvcache.infrastructure.cache import RedisConnection, encode_key_part, expiry_seconds


# ==============================================================================
# generate_key
# ==============================================================================


class TestGenerateKey:
    """Tests for storage key layout."""

    def test_with_partition(self):
        connection = RedisConnection(partition="foo")
        assert connection.generate_key(CacheKey(segment="baz", id="bar")) == "foo:baz:bar"

    def test_without_partition(self):
        connection = RedisConnection()
        assert connection.generate_key(CacheKey(segment="baz", id="bar")) == "baz:bar"

    def test_empty_partition_is_ignored(self):
        connection = RedisConnection(partition="")
        assert connection.generate_key(CacheKey(segment="baz", id="bar")) == "baz:bar"

    def test_components_are_percent_encoded(self):
        connection = RedisConnection(partition="my app")
        key = CacheKey(segment="a:b", id="c/d?e=f")
        assert connection.generate_key(key) == "my%20app:a%3Ab:c%2Fd%3Fe%3Df"

    def test_unicode_is_utf8_encoded(self):
        connection = RedisConnection()
        assert connection.generate_key(CacheKey(segment="s", id="é")) == "s:%C3%A9"

    def test_deterministic(self):
        connection = RedisConnection(partition="p")
        key = CacheKey(segment="s", id="i")
        assert connection.generate_key(key) == connection.generate_key(CacheKey(segment="s", id="i"))

    def test_separator_in_parts_does_not_collide(self):
        """Moving a ':' between segment and id yields a different storage key."""
        connection = RedisConnection()
        first = connection.generate_key(CacheKey(segment="a:b", id="c"))
        second = connection.generate_key(CacheKey(segment="a", id="b:c"))
        assert first != second

    def test_partition_distinguishes_keys(self):
        key = CacheKey(segment="s", id="i")
        assert RedisConnection(partition="one").generate_key(key) != RedisConnection(
            partition="two"
        ).generate_key(key)

    def test_accepts_objects_with_segment_and_id(self):
        """Any object exposing segment and id attributes can be encoded."""

        class _Key:
            segment = "seg"
            id = "42"

        assert RedisConnection().generate_key(_Key()) == "seg:42"


class TestGenerateKeyErrors:
    """Tests for keys that cannot be encoded."""

    @pytest.mark.parametrize("bad_key", [None, 42, "seg:id", {"segment": "s", "id": "i"}])
    def test_not_a_key(self, bad_key):
        with pytest.raises(InvalidKeyError):
            RedisConnection().generate_key(bad_key)

    def test_empty_segment(self):
        with pytest.raises(InvalidSegmentNameError, match="Empty string"):
            RedisConnection().generate_key(CacheKey(segment="", id="x"))

    def test_null_character_in_segment(self):
        with pytest.raises(InvalidSegmentNameError, match="null character"):
            RedisConnection().generate_key(CacheKey(segment="a\0b", id="x"))

    def test_empty_id(self):
        with pytest.raises(InvalidKeyError, match="Empty id"):
            RedisConnection().generate_key(CacheKey(segment="s", id=""))

    def test_non_string_parts(self):
        class _Key:
            segment = "s"
            id = None

        with pytest.raises(InvalidKeyError):
            RedisConnection().generate_key(_Key())


# ==============================================================================
# validate_segment_name
# ==============================================================================


class TestValidateSegmentName:
    """validate_segment_name() returns errors instead of raising."""

    def test_empty_name(self):
        error = RedisConnection().validate_segment_name("")
        assert isinstance(error, InvalidSegmentNameError)
        assert str(error) == "Empty string"

    def test_null_character(self):
        error = RedisConnection().validate_segment_name("a\0b")
        assert isinstance(error, InvalidSegmentNameError)
        assert str(error) == "Includes null character"

    def test_valid_name(self):
        assert RedisConnection().validate_segment_name("valid") is None

    def test_none(self):
        assert isinstance(RedisConnection().validate_segment_name(None), InvalidSegmentNameError)


# ==============================================================================
# Helpers
# ==============================================================================


class TestEncodeKeyPart:
    """encode_key_part() leaves the same characters as encodeURIComponent."""

    def test_unreserved_characters_kept(self):
        assert encode_key_part("AZaz09-_.!~*'()") == "AZaz09-_.!~*'()"

    def test_reserved_characters_escaped(self):
        assert encode_key_part(":/?#[]@&=+$, %") == "%3A%2F%3F%23%5B%5D%40%26%3D%2B%24%2C%20%25"


class TestExpirySeconds:
    """TTL milliseconds convert to whole seconds, minimum 1."""

    @pytest.mark.parametrize(
        "ttl, expected",
        [(1, 1), (999, 1), (1000, 1), (1999, 1), (2000, 2), (60_000, 60), (0, 1), (-5000, 1)],
    )
    def test_conversion(self, ttl, expected):
        assert expiry_seconds(ttl) == expected
