from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

_TAG_REF_RE = re.compile(r"refs/tags/(v?(\d+)\.(\d+)\.(\d+))$")


@dataclass(frozen=True, order=True)
class TagVersion:
    key: Tuple[int, int, int]
    tag: str

    @property
    def version(self) -> str:
        return self.tag[1:] if self.tag.startswith("v") else self.tag


def parse_ls_remote_tags(output: str) -> List[TagVersion]:
    """Parse `git ls-remote --tags` output into X.Y.Z tags.

    Peeled entries (`^{}`) and non-semver tags are ignored.
    """

    found: dict[str, TagVersion] = {}
    for line in output.splitlines():
        parts = line.split()
        if not parts:
            continue
        m = _TAG_REF_RE.search(parts[-1])
        if not m:
            continue
        tag = m.group(1)
        key = (int(m.group(2)), int(m.group(3)), int(m.group(4)))
        found[tag] = TagVersion(key=key, tag=tag)
    return list(found.values())


def latest_tag(tags: Iterable[TagVersion]) -> Optional[TagVersion]:
    ordered = sorted(tags)
    return ordered[-1] if ordered else None


def version_key(version: str) -> Optional[Tuple[int, int, int]]:
    m = re.fullmatch(r"v?(\d+)\.(\d+)\.(\d+)", version.strip())
    if not m:
        return None
    return int(m.group(1)), int(m.group(2)), int(m.group(3))


def is_newer(candidate: str, current: str) -> bool:
    """True if candidate > current; non-semver current (dev builds) never compares older."""

    c = version_key(candidate)
    cur = version_key(current)
    if c is None or cur is None:
        return False
    return c > cur
