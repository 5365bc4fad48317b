"""Git-backed commit source.

Fetches the commits that belong to a module since its last release tag
and parses them as Conventional Commits. This is the only part of the
calculation that talks to git; everything downstream works on the parsed
Commit records.
"""

from __future__ import annotations

import re
import subprocess
from pathlib import Path

from .models import Commit, Module
from .shell import git, warn

COMMIT_END = "---COMMIT-END---"
LOG_FORMAT = f"--format=%H%n%s%n%b%n{COMMIT_END}"

# type(scope)!: subject
_HEADER = re.compile(
    r"^(?P<type>\w[\w-]*)(?:\((?P<scope>[^()]*)\))?(?P<bang>!)?: (?P<subject>.+)$"
)
_BREAKING_FOOTER = re.compile(r"^BREAKING[ -]CHANGE:", re.MULTILINE)


def parse_commit(hash_: str, subject: str, body: str) -> Commit:
    """Build a Commit from raw log fields.

    Subjects that don't follow the Conventional Commits header format get
    type "unknown" and keep the full subject line.
    """
    body = body.strip()
    match = _HEADER.match(subject.strip())
    if not match:
        return Commit(hash=hash_, type="unknown", subject=subject, body=body or None)

    breaking = bool(match["bang"]) or bool(_BREAKING_FOOTER.search(body))
    return Commit(
        hash=hash_,
        type=match["type"].lower(),
        scope=match["scope"] or None,
        subject=match["subject"],
        body=body or None,
        breaking=breaking,
    )


def parse_git_log(output: str) -> list[Commit]:
    """Parse `git log` output written with LOG_FORMAT."""
    commits: list[Commit] = []
    for block in output.split(COMMIT_END):
        lines = block.strip().splitlines()
        # Need at least a hash and a subject
        if len(lines) < 2:
            continue
        commits.append(parse_commit(lines[0], lines[1], "\n".join(lines[2:])))
    return commits


def get_last_tag_for_module(module: Module, cwd: Path | str | None = None) -> str | None:
    """Find the most recent release tag for a module.

    Non-root modules use tags of the form {name}@{version}. When none
    exist (or for the root module) the nearest tag reachable from HEAD is
    used. Returns None if the repository has no tags at all.
    """
    if module.type != "root":
        tags = git(
            "tag",
            "--list",
            f"{module.name}@*",
            "--sort=-v:refname",
            cwd=cwd,
            check=False,
        )
        if tags:
            return tags.splitlines()[0]

    tag = git("describe", "--tags", "--abbrev=0", "HEAD", cwd=cwd, check=False)
    return tag or None


def get_commits_in_range(
    rev_range: str | None,
    path: str,
    exclude_paths: list[str],
    cwd: Path | str | None = None,
) -> list[Commit]:
    """List commits touching path but none of exclude_paths.

    The root path adds no include pathspec; git still needs the "--"
    separator before the exclusions.
    """
    args = ["log", LOG_FORMAT]
    if rev_range:
        args.append(rev_range)

    pathspecs: list[str] = []
    if path and path != ".":
        pathspecs.append(path)
    pathspecs.extend(f":(exclude){p}" for p in exclude_paths if p and p != ".")
    if pathspecs:
        args.extend(["--", *pathspecs])

    return parse_git_log(git(*args, cwd=cwd))


def get_commits_since_last_tag(
    module: Module,
    exclude_paths: list[str],
    cwd: Path | str | None = None,
) -> list[Commit]:
    """Fetch a module's own commits since its last release.

    Git failures are not fatal: the module is treated as having no
    commits and the run continues.
    """
    try:
        last_tag = get_last_tag_for_module(module, cwd=cwd)
        rev_range = f"{last_tag}..HEAD" if last_tag else None
        return get_commits_in_range(rev_range, module.path, exclude_paths, cwd=cwd)
    except (subprocess.CalledProcessError, OSError) as exc:
        warn(f"failed to read commits for {module.id}: {exc}")
        return []


def get_current_short_sha(cwd: Path | str | None = None) -> str:
    """Return the abbreviated hash of HEAD."""
    return git("rev-parse", "--short", "HEAD", cwd=cwd)
