"""Unit tests for upstream version parsing and ranges."""

from __future__ import annotations

import pytest

from core.errors import VersionFormatError
from core.versioning import UpstreamVersionRange, parse_upstream_version


def test_parse_upstream_version_reads_components() -> None:
    """Semantic versions should parse into numeric components."""
    version = parse_upstream_version("2.3.10")

    assert (version.major, version.minor, version.patch) == (2, 3, 10)


@pytest.mark.parametrize("raw_value", ["v2.3.10", "2.3", "latest", "", "02.1.0"])
def test_parse_upstream_version_rejects_malformed_values(raw_value: str) -> None:
    """Non-semver identifiers should raise a version format error."""
    with pytest.raises(VersionFormatError):
        parse_upstream_version(raw_value)


def test_range_contains_versions_inside_bounds() -> None:
    """Half-open range should include its lower bound and later patches."""
    version_range = UpstreamVersionRange.parse(">=2.0.0,<3.0.0")

    assert version_range.contains(parse_upstream_version("2.0.0"))
    assert version_range.contains(parse_upstream_version("2.3.10"))


def test_range_excludes_upper_bound_and_earlier_majors() -> None:
    """Upper bound should be exclusive."""
    version_range = UpstreamVersionRange.parse(">=2.0.0,<3.0.0")

    assert not version_range.contains(parse_upstream_version("3.0.0"))
    assert not version_range.contains(parse_upstream_version("1.5.2"))


def test_prerelease_sorts_before_release() -> None:
    """A pre-release of the lower bound is outside the range."""
    version_range = UpstreamVersionRange.parse(">=2.0.0,<3.0.0")

    assert not version_range.contains(parse_upstream_version("2.0.0-beta.1"))


def test_range_parse_requires_lower_bound() -> None:
    """Constraints without a lower bound should be rejected."""
    with pytest.raises(VersionFormatError):
        UpstreamVersionRange.parse("<3.0.0")


def test_range_excludes_prereleases_of_upper_bound() -> None:
    """Alphas of the next major should not be claimed by the current range."""
    version_range = UpstreamVersionRange.parse(">=2.0.0,<3.0.0")

    assert not version_range.contains(parse_upstream_version("3.0.0-alpha.1"))
    assert version_range.contains(parse_upstream_version("2.9.9"))


def test_numeric_prerelease_identifiers_compare_numerically() -> None:
    """``beta.10`` should sort after ``beta.2``."""
    version_range = UpstreamVersionRange.parse(">=2.1.0-beta.2,<3.0.0")

    assert version_range.contains(parse_upstream_version("2.1.0-beta.10"))
    assert not version_range.contains(parse_upstream_version("2.1.0-beta.1"))
