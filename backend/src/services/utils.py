"""Pure helpers deriving board counters from the loaded collections."""
import re
from collections.abc import Iterable

from schemas.note import Note


def note_id_pattern(prefix: str) -> re.Pattern[str]:
    """Return the pattern matching allocator-issued ids: prefix + decimal counter."""
    return re.compile(rf"^{re.escape(prefix)}(\d+)$")


def next_note_id(existing_ids: Iterable[str], prefix: str) -> str:
    """
    Allocate the id following the highest numeric suffix among existing ids.

    Ids that do not match the allocator pattern (e.g. "legacy", "nfoo",
    "x7") are ignored, so a malformed seed can never block allocation.

    Args:
        existing_ids: Every id currently known, active, trashed or reserved.
        prefix: Id prefix, e.g. "n".

    Returns:
        The next id, e.g. "n4" when "n3" is the highest existing id.

    Example:
        >>> next_note_id(["n1", "n7", "legacy"], "n")
        'n8'
    """
    pattern = note_id_pattern(prefix)
    highest = 0
    for note_id in existing_ids:
        match = pattern.match(note_id)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1}"


def max_z_index(notes: Iterable[Note]) -> int:
    """Highest z_index among the given notes, 0 for none."""
    return max((note.z_index for note in notes), default=0)


def replace_by_id(notes: Iterable[Note], replacement: Note) -> tuple[Note, ...]:
    """Return the collection with the note sharing replacement's id swapped in."""
    return tuple(replacement if note.id == replacement.id else note for note in notes)
