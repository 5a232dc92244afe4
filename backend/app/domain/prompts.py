"""Pure helpers for prompt tags and listing filters.

No DB access; used by the prompt service and the list route.
"""

from collections.abc import Iterable, Sequence
from enum import StrEnum


class FolderSelection(StrEnum):
    """Special values for the ``folder`` listing filter."""

    ALL = "all"
    FAVORITES = "favorites"
    NO_FOLDER = "no-folder"


def normalize_tags(tags: Iterable[str] | None) -> list[str]:
    """Trim, lowercase and deduplicate tags, keeping first-seen order."""
    normalized: list[str] = []
    for raw in tags or []:
        tag = raw.strip().lower()
        if tag and tag not in normalized:
            normalized.append(tag)
    return normalized


def matches_search(prompt, query: str) -> bool:
    """Case-insensitive match of ``query`` against title, content or any tag."""
    if not query:
        return True
    needle = query.lower()
    return (
        needle in prompt.title.lower()
        or needle in prompt.content.lower()
        or any(needle in tag.lower() for tag in prompt.tags or [])
    )


def matches_folder(prompt, selection: str) -> bool:
    """Match a prompt against a folder selection (special value or folder id)."""
    if selection == FolderSelection.ALL:
        return True
    if selection == FolderSelection.FAVORITES:
        return bool(prompt.is_favorite)
    if selection == FolderSelection.NO_FOLDER:
        return prompt.folder_id is None
    return prompt.folder_id is not None and str(prompt.folder_id) == selection


def filter_prompts(prompts: Sequence, query: str = "", selection: str = FolderSelection.ALL) -> list:
    """Apply the dashboard's search box and folder selector to a prompt list."""
    return [p for p in prompts if matches_search(p, query) and matches_folder(p, selection)]
