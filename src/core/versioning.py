"""Upstream release identifier parsing and compatibility ranges.

A transformation covers a range of upstream releases. This module makes
that mapping an explicit predicate instead of a naming convention.
"""

from __future__ import annotations

from dataclasses import dataclass
import re

from core.errors import VersionFormatError

_SEMVER_PATTERN = re.compile(
    r"^(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z.-]+))?(?:\+(?P<build>[0-9A-Za-z.-]+))?$"
)


@dataclass(frozen=True)
class UpstreamVersion:
    """Parsed semantic version used for range checks.

    Pre-releases sort before the release they precede. Build metadata is
    kept for display only and does not take part in ordering.
    """

    major: int
    minor: int
    patch: int
    release_rank: int
    prerelease: str
    raw: str

    def __str__(self) -> str:
        return self.raw


def parse_upstream_version(raw_value: str) -> UpstreamVersion:
    """Parse an upstream release identifier such as ``2.3.10``.

    Raises:
        VersionFormatError: If the value is not a semantic version.
    """
    match = _SEMVER_PATTERN.match(raw_value.strip())
    if match is None:
        raise VersionFormatError(
            f"Invalid upstream version '{raw_value}': expected MAJOR.MINOR.PATCH, "
            "for example 2.3.10 (without a leading 'v')."
        )
    prerelease = match.group("prerelease") or ""
    return UpstreamVersion(
        major=int(match.group("major")),
        minor=int(match.group("minor")),
        patch=int(match.group("patch")),
        release_rank=0 if prerelease else 1,
        prerelease=prerelease,
        raw=raw_value.strip(),
    )


@dataclass(frozen=True)
class UpstreamVersionRange:
    """Half-open compatibility range ``>=minimum,<maximum``."""

    minimum: UpstreamVersion
    maximum: UpstreamVersion | None = None

    @classmethod
    def parse(cls, constraint: str) -> "UpstreamVersionRange":
        """Parse a ``>=A`` or ``>=A,<B`` constraint string."""
        minimum: UpstreamVersion | None = None
        maximum: UpstreamVersion | None = None
        for clause in (part.strip() for part in constraint.split(",")):
            if clause.startswith(">="):
                minimum = parse_upstream_version(clause[2:])
            elif clause.startswith("<"):
                maximum = parse_upstream_version(clause[1:])
            else:
                raise VersionFormatError(
                    f"Invalid version constraint clause '{clause}' in '{constraint}': "
                    "expected '>=X.Y.Z' or '<X.Y.Z'."
                )
        if minimum is None:
            raise VersionFormatError(
                f"Invalid version constraint '{constraint}': a '>=' lower bound is required."
            )
        return cls(minimum=minimum, maximum=maximum)

    def contains(self, version: UpstreamVersion) -> bool:
        """Return whether the release falls inside this range.

        Pre-releases of an exclusive upper bound are outside the range, so
        ``3.0.0-alpha.1`` does not satisfy ``<3.0.0``.
        """
        if _ordering_key(version) < _ordering_key(self.minimum):
            return False
        if self.maximum is None:
            return True
        if _ordering_key(version) >= _ordering_key(self.maximum):
            return False
        return not (
            version.prerelease
            and not self.maximum.prerelease
            and _release_triple(version) == _release_triple(self.maximum)
        )

    def __str__(self) -> str:
        if self.maximum is None:
            return f">={self.minimum}"
        return f">={self.minimum},<{self.maximum}"


def _release_triple(version: UpstreamVersion) -> tuple[int, int, int]:
    return (version.major, version.minor, version.patch)


def _ordering_key(
    version: UpstreamVersion,
) -> tuple[int, int, int, int, tuple[tuple[int, int, str], ...]]:
    return (*_release_triple(version), version.release_rank, _prerelease_key(version.prerelease))


def _prerelease_key(prerelease: str) -> tuple[tuple[int, int, str], ...]:
    # Numeric identifiers compare numerically and sort before alphanumeric ones.
    if not prerelease:
        return ()
    return tuple(
        (0, int(identifier), "") if identifier.isdigit() else (1, 0, identifier)
        for identifier in prerelease.split(".")
    )
