"""Re-export all models so Base.metadata sees them."""

from app.db.models.folder import Folder
from app.db.models.profile import Profile
from app.db.models.prompt import Prompt

__all__ = [
    "Folder",
    "Profile",
    "Prompt",
]
