"""Line-oriented regular expression matching over file content."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Union


@dataclass(frozen=True)
class MatchLine:
    """A single matching line: the matched text and its capture groups."""

    fullmatch: str
    groups: List[str] = field(default_factory=list)


@dataclass
class ContentMatch:
    """Every matching line found in one file, in reading order."""

    path: str
    matches: List[MatchLine] = field(default_factory=list)


def file_content_check(path: str, expression: Union[str, re.Pattern[str]]) -> List[MatchLine]:
    """Return the lines of ``path`` matched by ``expression``.

    Each line is searched without its line terminator. Groups that did not
    participate in a match are reported as empty strings. An empty list means
    the file was read successfully but nothing matched; ``re.error`` and
    ``OSError`` propagate to the caller.
    """

    pattern = re.compile(expression)
    found: List[MatchLine] = []
    with open(path, "r", encoding="utf-8", errors="replace", newline="") as handle:
        for line in handle:
            match = pattern.search(line.rstrip("\r\n"))
            if match is None:
                continue
            groups = [group if group is not None else "" for group in match.groups()]
            found.append(MatchLine(fullmatch=match.group(0), groups=groups))
    return found
