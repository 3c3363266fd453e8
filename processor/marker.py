"""Encoding of the dedup marker embedded in mirrored event descriptions.

A mirrored event carries ``### {id} ###`` at the end of its description.
That substring is the only record that a TruckersMP event has already been
published, so everything that reads or writes it goes through here.
"""
import re
from typing import Iterable, List, Optional

MARKER_TEMPLATE = "### {id} ###"
MARKER_PATTERN = re.compile(r"### (\d+) ###")


def make_marker(event_id: int) -> str:
    """Return the marker text for a TruckersMP event id."""
    return MARKER_TEMPLATE.format(id=event_id)


def has_marker(description: Optional[str], event_id: int) -> bool:
    """Check whether a description already carries the marker for event_id."""
    if not description:
        return False
    return make_marker(event_id) in description


def find_marker_ids(descriptions: Iterable[Optional[str]]) -> List[int]:
    """
    Collect every event id referenced by a marker in the given descriptions.

    Args:
        descriptions: Descriptions of existing scheduled events (None allowed)

    Returns:
        List of ids in the order they were found
    """
    ids = []
    for description in descriptions:
        if not description:
            continue
        ids.extend(int(match) for match in MARKER_PATTERN.findall(description))
    return ids
