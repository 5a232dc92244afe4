"""Tier gate: pure predicate over a profile's pro flag.

Only ``is_pro`` is consulted. ``trial_ends_at`` is carried on the profile
but is not evaluated here.
"""

from app.core.exceptions import UpgradeRequiredError

FEATURE_FOLDERS = "Folders"
FEATURE_EXPORT = "Export"


def is_pro(profile) -> bool:
    """Return True if the profile is on the Pro tier."""
    return bool(profile is not None and profile.is_pro)


def ensure_pro(profile, feature: str) -> None:
    """Raise UpgradeRequiredError unless the profile is on the Pro tier."""
    if not is_pro(profile):
        raise UpgradeRequiredError(feature)


def prompt_limit_for(profile, free_limit: int) -> int:
    """Return the prompt cap for this profile (-1 = unlimited)."""
    return -1 if is_pro(profile) else free_limit
