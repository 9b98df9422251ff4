from __future__ import annotations

import re

_VERSION_RE = re.compile(r"^(\d+(?:\.\d+)*)(?:[-.]?([a-z]+[-.]?\d*))?$", re.IGNORECASE)


def normalize(version: str) -> str:
    """Return `version` as "x.y.z" when it looks like a WordPress version, else ""."""

    match = _VERSION_RE.match(version.strip())
    if not match:
        return ""

    numbers = [int(part) for part in match.group(1).split(".")][:3]
    if numbers[0] < 1:
        return ""
    while len(numbers) < 3:
        numbers.append(0)

    return ".".join(str(number) for number in numbers)
