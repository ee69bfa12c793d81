"""
Destination Scanner

Recovers the produced filename from the extraction tool's progress output.

The tool prints an unknown number of lines while it works (progress, network
retries, post-processing). Some of them announce where a file is written.
Each recognized line replaces the current candidate, so after the process
exits the candidate names the last file the tool reported, which is the
deliverable (e.g. the merged container rather than the intermediate streams).
"""

import ntpath
import posixpath
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Pattern, Tuple


@dataclass(frozen=True)
class DestinationRule:
    """A named pattern whose first group captures a destination path."""

    name: str
    pattern: Pattern[str]

    def extract(self, line: str) -> Optional[str]:
        match = self.pattern.search(line)
        if match and match.group(1):
            return match.group(1).strip()
        return None


# Evaluated in order; the first rule matching a line wins for that line.
DESTINATION_RULES: Tuple[DestinationRule, ...] = (
    DestinationRule("audio_extraction", re.compile(r"\[ExtractAudio\] Destination: (.+)")),
    DestinationRule("merge", re.compile(r'\[Merger\] Merging formats into "(.+)"')),
    DestinationRule("download", re.compile(r"\[download\] Destination: (.+)")),
    DestinationRule("already_downloaded", re.compile(r"\[download\] (.+) has already been downloaded")),
)


def base_name(path: str) -> str:
    """Return the final component of a path printed by the tool on any platform."""
    return ntpath.basename(posixpath.basename(path))


class DestinationScanner:
    """
    Line-by-line state machine over the tool's stdout.

    States: no candidate yet, or candidate = X. Any recognized line moves to
    candidate = basename(path); there is no transition back.
    """

    def __init__(self, rules: Iterable[DestinationRule] = DESTINATION_RULES):
        self._rules = tuple(rules)
        self.file_name: Optional[str] = None
        self.matched_rule: Optional[str] = None
        self.lines_seen = 0

    def feed(self, line: str) -> Optional[str]:
        """
        Scan one output line.

        Returns:
            The basename captured from this line, or None if nothing matched
        """
        self.lines_seen += 1
        for rule in self._rules:
            path = rule.extract(line)
            if path:
                self.file_name = base_name(path)
                self.matched_rule = rule.name
                return self.file_name
        return None

    def feed_all(self, lines: Iterable[str]) -> Optional[str]:
        for line in lines:
            self.feed(line)
        return self.file_name

    @property
    def resolved(self) -> bool:
        return self.file_name is not None
