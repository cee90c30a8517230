"""Tests for NuGet version and version-range parsing."""

import pytest

from versioning import (
    NuGetVersion,
    VersionRange,
    parse_version,
    parse_version_range,
    parse_version_range_or_all,
    try_parse_version,
)


class TestParseVersion:
    """Test NuGetVersion parsing and ordering."""

    def test_pads_missing_parts(self):
        v = parse_version("1.2")
        assert (v.major, v.minor, v.patch, v.revision) == (1, 2, 0, 0)
        assert v.to_normalized_string() == "1.2.0"

    def test_keeps_revision_and_labels(self):
        v = parse_version("2.1.0.4-beta.2+sha.abc")
        assert v.revision == 4
        assert v.release_labels == ("beta", "2")
        assert v.metadata == "sha.abc"
        assert v.to_normalized_string() == "2.1.0.4-beta.2"

    def test_invalid_raises(self):
        with pytest.raises(ValueError):
            parse_version("not-a-version")
        assert try_parse_version("1.x") is None
        assert try_parse_version("") is None

    def test_stable_sorts_after_prerelease(self):
        assert parse_version("1.0.0-rc.1") < parse_version("1.0.0")
        assert parse_version("1.0.0-alpha") < parse_version("1.0.0-beta")
        assert parse_version("1.0.0-beta.2") < parse_version("1.0.0-beta.10")

    def test_equality_ignores_metadata_and_label_case(self):
        assert parse_version("1.0.0-Beta+a") == parse_version("1.0.0-beta+b")
        assert hash(parse_version("1.0.0-Beta")) == hash(parse_version("1.0.0-beta"))
        assert parse_version("1.0") == NuGetVersion(1)

    def test_numeric_labels_with_leading_zeros_hash_alike(self):
        padded, plain = parse_version("1.0.0-01"), parse_version("1.0.0-1")
        assert padded == plain
        assert hash(padded) == hash(plain)
        assert len({padded, plain}) == 1


class TestParseVersionRange:
    """Test NuGet range notation."""

    def test_empty_is_all(self):
        r = parse_version_range("")
        assert r.is_unconstrained
        assert r.to_normalized_string() == "(, )"
        assert parse_version_range("*").is_unconstrained

    def test_bare_version_is_minimum(self):
        r = parse_version_range("1.0")
        assert r.to_normalized_string() == "[1.0.0, )"
        assert r.satisfies(parse_version("5.0"))
        assert not r.satisfies(parse_version("0.9"))

    def test_exact(self):
        r = parse_version_range("[1.2.3]")
        assert r.to_normalized_string() == "[1.2.3]"
        assert r.satisfies(parse_version("1.2.3"))
        assert not r.satisfies(parse_version("1.2.4"))

    def test_interval(self):
        r = parse_version_range("[1.0, 2.0)")
        assert r.to_normalized_string() == "[1.0.0, 2.0.0)"
        assert r.satisfies(parse_version("1.9.9"))
        assert not r.satisfies(parse_version("2.0.0"))

    def test_open_bounds(self):
        assert parse_version_range("(, 3.0]").to_normalized_string() == "(, 3.0.0]"
        assert parse_version_range("(1.0, )").to_normalized_string() == "(1.0.0, )"

    def test_floating(self):
        r = parse_version_range("1.*")
        assert r.is_floating
        assert r.min_version == parse_version("1.0")
        assert r.to_normalized_string() == "[1.*, )"
        assert parse_version_range("[1.*, )") == r

    def test_floating_prerelease(self):
        r = parse_version_range("1.0.0-*")
        assert r.is_floating
        assert r.min_version == parse_version("1.0.0-0")

    @pytest.mark.parametrize("text", ["[2.0, 1.0]", "(1.0, 1.0)", "[1.0", "[1.0, 2.0, 3.0]", "1.*.3"])
    def test_invalid_ranges(self, text):
        with pytest.raises(ValueError):
            parse_version_range(text)

    def test_or_all_falls_back(self):
        assert parse_version_range_or_all("garbage") == VersionRange.all()

    def test_original_text_not_compared(self):
        assert parse_version_range("1.0") == parse_version_range("1.0.0")
