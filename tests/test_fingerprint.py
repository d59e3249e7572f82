"""Tests for error fingerprinting."""

from observatory.core.fingerprint import ERROR_HASH_LENGTH, compute_error_hash


def test_error_hash_is_deterministic():
    """Same inputs should generate the same hash."""
    hash1 = compute_error_hash("api", "Timeout", "upstream 504", "/v1/x")
    hash2 = compute_error_hash("api", "Timeout", "upstream 504", "/v1/x")

    assert hash1 == hash2
    assert len(hash1) == ERROR_HASH_LENGTH


def test_error_hash_changes_with_each_field():
    """Changing any one of the four fields changes the hash."""
    base = compute_error_hash("api", "Timeout", "upstream 504", "/v1/x")

    assert compute_error_hash("web", "Timeout", "upstream 504", "/v1/x") != base
    assert compute_error_hash("api", "ValueError", "upstream 504", "/v1/x") != base
    assert compute_error_hash("api", "Timeout", "upstream 502", "/v1/x") != base
    assert compute_error_hash("api", "Timeout", "upstream 504", "/v1/y") != base


def test_missing_endpoint_matches_empty_endpoint():
    assert compute_error_hash("api", "Timeout", "boom") == compute_error_hash("api", "Timeout", "boom", "")


def test_long_messages_with_common_prefix_do_not_collide():
    """Messages sharing a long prefix still hash differently."""
    prefix = "x" * 500
    assert compute_error_hash("api", "E", prefix + "a") != compute_error_hash("api", "E", prefix + "b")
