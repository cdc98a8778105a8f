"""Unity version parsing, comparison and release catalog matching."""

from __future__ import annotations

import logging
import platform
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Final

import semantic_version

from unity_provision.exceptions import (
    InvalidArchitectureError,
    InvalidVersionError,
    InvalidVersionFormatError,
)

_logger = logging.getLogger(__name__)

# major.minor.patch<channel><build>, e.g. 2022.3.10f1 or 6000.1.0b12
_TOKEN_PATTERN: Final[str] = r"(\d{1,4})\.(\d+)\.(\d+)([abcfpx])(\d+)"
_TOKEN_SEARCH_RE = re.compile(_TOKEN_PATTERN)
_TOKEN_FULL_RE = re.compile(rf"^{_TOKEN_PATTERN}$")

_COERCE_RE = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")
_REQUEST_RE = re.compile(r"^(\d{1,4})(?:\.(\d+|x|\*))?(?:\.(\d+|x|\*))?")
_WILDCARD_RE = re.compile(r"\.(?:x|\*)(?:$|[^\w])")

WILDCARDS: Final[frozenset[str]] = frozenset({"x", "*"})
FINAL_CHANNEL: Final[str] = "f"
LEGACY_MAJOR: Final[int] = 4
ARM_FLOOR: Final = semantic_version.Version("2021.0.0")


class Architecture(StrEnum):
    """Editor CPU architecture."""

    X86_64 = "x86_64"
    ARM64 = "arm64"


def host_architecture() -> Architecture:
    """Return the architecture of the running interpreter's host."""
    if platform.machine().lower() in ("arm64", "aarch64"):
        return Architecture.ARM64
    return Architecture.X86_64


@dataclass(frozen=True)
class ReleaseToken:
    """A fully-qualified Unity release identifier.

    Grammar::

        token   := major "." minor "." patch channel build
        major   := 1-4 digits
        channel := "a" | "b" | "c" | "f" | "p" | "x"

    ``text`` keeps the token exactly as it appeared in its source string.
    """

    text: str
    major: int
    minor: int
    patch: int
    channel: str
    build: int

    @classmethod
    def _from_match(cls, match: re.Match[str]) -> ReleaseToken:
        major, minor, patch, channel, build = match.groups()
        return cls(
            text=match.group(0),
            major=int(major),
            minor=int(minor),
            patch=int(patch),
            channel=channel,
            build=int(build),
        )

    @classmethod
    def search(cls, text: str) -> ReleaseToken | None:
        """Return the first token embedded in free-form text, if any."""
        match = _TOKEN_SEARCH_RE.search(text)
        return cls._from_match(match) if match else None

    @classmethod
    def parse(cls, text: str) -> ReleaseToken | None:
        """Parse text that must consist of exactly one token."""
        match = _TOKEN_FULL_RE.match(text)
        return cls._from_match(match) if match else None

    @property
    def rank(self) -> tuple[int, int, int]:
        """Ranking key within a single major version."""
        return (self.minor, self.patch, self.build)

    def __str__(self) -> str:
        return self.text


def _parse_architecture(value: Architecture | str) -> Architecture:
    try:
        return Architecture(value.lower())
    except ValueError as e:
        raise InvalidArchitectureError(value) from e


def _coerce(text: str) -> semantic_version.Version | None:
    match = _COERCE_RE.match(text)
    if not match:
        return None
    major, minor, patch = (int(part) if part else 0 for part in match.groups())
    return semantic_version.Version(major=major, minor=minor, patch=patch)


def is_fully_qualified(version: str) -> bool:
    """Check whether a version string is a complete release identifier."""
    return ReleaseToken.parse(version) is not None


def has_wildcard(version: str) -> bool:
    """Check whether a version string contains a ``.x`` or ``.*`` component."""
    return _WILDCARD_RE.search(version) is not None


class UnityVersion:
    """A requested or resolved Unity Editor version.

    The raw ``version`` string is kept verbatim; comparisons operate on its
    coerced ``major.minor.patch`` value, so channel and build suffixes never
    take part in ordering.
    """

    __slots__ = ("_version", "_changeset", "_architecture", "_semver")

    def __init__(
        self,
        version: str,
        changeset: str | None = None,
        architecture: Architecture | str | None = None,
    ):
        """Create a version value.

        Args:
            version: Raw version request (e.g. ``2022.x`` or ``2021.3.5f1``).
            changeset: Optional opaque changeset identifier.
            architecture: Target architecture. Defaults to the host's.

        Raises:
            InvalidVersionFormatError: If ``version`` has no numeric prefix.
        """
        coerced = _coerce(version)
        if coerced is None:
            raise InvalidVersionFormatError(version)

        self._version = version
        self._changeset = changeset or None
        self._semver = coerced

        arch = _parse_architecture(architecture) if architecture else host_architecture()
        if arch is Architecture.ARM64 and not self.is_arm_compatible():
            arch = Architecture.X86_64
        self._architecture = arch

    @property
    def version(self) -> str:
        return self._version

    @property
    def changeset(self) -> str | None:
        return self._changeset

    @property
    def architecture(self) -> Architecture:
        return self._architecture

    @property
    def major(self) -> int:
        return self._semver.major

    @property
    def minor(self) -> int:
        return self._semver.minor

    @property
    def patch(self) -> int:
        return self._semver.patch

    @property
    def semver(self) -> semantic_version.Version:
        """Coerced semantic version (channel and build dropped)."""
        return self._semver

    def __str__(self) -> str:
        if self._changeset:
            return f"{self._version} ({self._changeset})"
        return self._version

    def __repr__(self) -> str:
        return (
            f"UnityVersion({self._version!r}, {self._changeset!r}, "
            f"{self._architecture.value!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, UnityVersion):
            return NotImplemented
        return (self._version, self._changeset, self._architecture) == (
            other._version,
            other._changeset,
            other._architecture,
        )

    def __hash__(self) -> int:
        return hash((self._version, self._changeset, self._architecture))

    def __lt__(self, other: UnityVersion | str) -> bool:
        return self._semver < _as_semver(other)

    def __le__(self, other: UnityVersion | str) -> bool:
        return self._semver <= _as_semver(other)

    def __gt__(self, other: UnityVersion | str) -> bool:
        return self._semver > _as_semver(other)

    def __ge__(self, other: UnityVersion | str) -> bool:
        return self._semver >= _as_semver(other)

    @staticmethod
    def compare(a: UnityVersion, b: UnityVersion) -> int:
        """Compare two versions by coerced value, returning -1, 0 or 1."""
        if a.semver < b.semver:
            return -1
        if a.semver > b.semver:
            return 1
        return 0

    def is_legacy(self) -> bool:
        """Check for the pre-Unity 5 versioning scheme."""
        return self._semver.major <= LEGACY_MAJOR

    def is_arm_compatible(self) -> bool:
        """Check whether native ARM64 editors exist for this version."""
        if self._semver.major < ARM_FLOOR.major:
            return False
        return self._semver >= ARM_FLOOR

    def satisfies(self, other: UnityVersion | str) -> bool:
        """Check whether ``other`` falls in the caret range of this version.

        Raises:
            InvalidVersionError: If ``other`` cannot be coerced to a version.
        """
        spec = semantic_version.NpmSpec(f"^{self._semver}")
        return spec.match(_as_semver(other))

    def in_range(self, expression: str) -> bool:
        """Check this version against an npm-style range expression.

        Raises:
            InvalidVersionError: If the range expression cannot be parsed.
        """
        try:
            spec = semantic_version.NpmSpec(expression)
        except ValueError as e:
            raise InvalidVersionError(f"Invalid version range: {expression}") from e
        return spec.match(self._semver)

    def find_match(
        self,
        catalog: Iterable[str],
        channels: Sequence[str] = (FINAL_CHANNEL,),
        logger: logging.Logger | None = None,
    ) -> UnityVersion | None:
        """Find the catalog release that best satisfies this request.

        An exact, fully-qualified request must appear verbatim in the catalog.
        Partial and wildcard requests fall back to the highest
        ``(minor, patch, build)`` release of the same major within
        ``channels``. A request for minor ``"0"`` with no such release is
        broadened to any minor of that major.
        Numeric minors compare by value, so "6000.00" matches 6000.0 releases
        even though it does not trigger broadening.

        Args:
            catalog: Free-form release strings; only the first embedded
                release token of each is considered.
            channels: Release channels eligible for fallback.
            logger: Destination for diagnostic messages.

        Returns:
            The resolved version without changeset, or None if nothing matched.
        """
        log = logger or _logger
        tokens = [token for token in map(ReleaseToken.search, catalog) if token]

        if any(token.text == self._version for token in tokens):
            log.debug("Exact match found for %s", self._version)
            return UnityVersion(self._version, None, self._architecture)

        if not has_wildcard(self._version) and is_fully_qualified(self._version):
            log.debug("No matching Unity version found for %s", self._version)
            return None

        request = _REQUEST_RE.match(self._version)
        if request is None:
            log.debug("No matching Unity version found for %s", self._version)
            return None

        major = int(request.group(1))
        minor = request.group(2)
        candidates = _filter_releases(tokens, major, minor, channels)

        if not candidates and minor == "0":
            log.debug("No %s.0 releases, broadening to any minor", major)
            candidates = _filter_releases(tokens, major, None, channels)

        log.debug("Searching for fallback match for %s:", self._version)
        for token in sorted(candidates, key=lambda t: t.rank, reverse=True):
            log.debug("  > %s", token)

        if not candidates:
            log.debug("No matching Unity version found for %s", self._version)
            return None

        best = max(candidates, key=lambda t: t.rank)
        log.debug("Found fallback Unity %s", best)
        return UnityVersion(best.text, None, self._architecture)


def _as_semver(other: UnityVersion | str) -> semantic_version.Version:
    if isinstance(other, UnityVersion):
        return other.semver
    coerced = _coerce(other)
    if coerced is None:
        raise InvalidVersionError(f"Invalid version to check against: {other}")
    return coerced


def _filter_releases(
    tokens: Iterable[ReleaseToken],
    major: int,
    minor: str | None,
    channels: Sequence[str],
) -> list[ReleaseToken]:
    any_minor = minor is None or minor in WILDCARDS
    return [
        token
        for token in tokens
        if token.channel in channels
        and token.major == major
        and (any_minor or token.minor == int(minor))
    ]


def resolve_version(
    spec: UnityVersion,
    catalog: Iterable[str],
    channels: Sequence[str] = (FINAL_CHANNEL,),
    logger: logging.Logger | None = None,
) -> UnityVersion | None:
    """Resolve a version request against a release catalog.

    Returns None when no release matches; the request itself is never
    returned as a stand-in for a resolved release.
    """
    return spec.find_match(catalog, channels=channels, logger=logger)
