"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects and the
transforms applied when formatting a module's next version: release and
prerelease bumps, build metadata and the snapshot suffix.
"""

from __future__ import annotations

from datetime import datetime, timezone

import semver

from .models import BumpSeverity

SNAPSHOT_SUFFIX = "-SNAPSHOT"

_PARTS = {
    BumpSeverity.PATCH: "patch",
    BumpSeverity.MINOR: "minor",
    BumpSeverity.MAJOR: "major",
}


def parse_version(version_str: str, module_id: str | None = None) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Only complete versions are accepted; "1.2" and "v1.2.3" are rejected
    rather than padded or stripped.

    Raises:
        ValueError: If the string is not a valid semantic version. The
                    message names the module when module_id is given.
    """
    try:
        return semver.Version.parse(version_str)
    except (ValueError, TypeError) as exc:
        owner = f" for module {module_id}" if module_id else ""
        raise ValueError(
            f"Invalid semantic version{owner}: {version_str!r}"
        ) from exc


def bump_release(version: semver.Version, severity: BumpSeverity) -> semver.Version:
    """Apply a plain release bump.

    A prerelease that already implies the bump is finalized instead:
        "1.1.0-alpha.0" + MINOR → "1.1.0"
        "1.1.1-alpha.0" + MINOR → "1.2.0"
    """
    if severity == BumpSeverity.NONE:
        return version
    return version.next_version(part=_PARTS[severity])


def bump_prerelease(
    version: semver.Version, severity: BumpSeverity, prerelease_id: str
) -> semver.Version:
    """Apply a prerelease bump of the given severity.

    With a severity, the matching release component is bumped and a fresh
    prerelease counter opened:
        "1.0.0" + MINOR ("alpha") → "1.1.0-alpha.0"

    With NONE, an existing prerelease for the same identifier has its
    trailing counter incremented, anything else starts a patch prerelease
    or restarts the counter under the new identifier:
        "1.1.0-alpha.0" → "1.1.0-alpha.1"
        "1.0.0" → "1.0.1-alpha.0"
        "1.0.0-beta.3" → "1.0.0-alpha.0"
    """
    opened = f"{prerelease_id}.0"

    if severity != BumpSeverity.NONE:
        released = getattr(version, f"bump_{_PARTS[severity]}")()
        return released.replace(prerelease=opened, build=None)

    if not version.prerelease:
        return version.bump_patch().replace(prerelease=opened)

    prefix = f"{prerelease_id}."
    counter = version.prerelease[len(prefix) :]
    if version.prerelease.startswith(prefix) and counter.isdigit():
        return version.replace(prerelease=f"{prefix}{int(counter) + 1}", build=None)
    return version.replace(prerelease=opened, build=None)


def add_build_metadata(version: semver.Version, metadata: str) -> semver.Version:
    """Set build metadata, replacing any that is already present."""
    return version.replace(build=metadata)


def apply_snapshot_suffix(version_str: str) -> str:
    """Append the snapshot suffix unless the version already ends with it.

    Examples:
        "1.0.0" → "1.0.0-SNAPSHOT"
        "1.0.0-SNAPSHOT" → "1.0.0-SNAPSHOT"
    """
    if version_str.endswith(SNAPSHOT_SUFFIX):
        return version_str
    return f"{version_str}{SNAPSHOT_SUFFIX}"


def timestamp_prerelease_id(base_id: str, now: datetime | None = None) -> str:
    """Stamp a prerelease id with the UTC date and time.

    Date and time form one numeric identifier so it never starts with a
    zero, which semver forbids for numeric identifiers.

    Example:
        "alpha" at 2024-01-15 09:05 UTC → "alpha.202401150905"
    """
    moment = (now or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return f"{base_id}.{moment:%Y%m%d%H%M}"
