class PromptVaultError(Exception):
    """Base exception for Prompt Vault application.

    Subclasses carry the HTTP status and a stable machine-readable code so
    the API layer can translate them without inspecting messages.
    """

    status_code: int = 500
    code: str = "internal_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class UpgradeRequiredError(PromptVaultError):
    """Raised when a free-tier user touches a Pro-only feature."""

    status_code = 403
    code = "upgrade_required"

    def __init__(self, feature: str):
        self.feature = feature
        super().__init__(f"{feature} is a Pro feature")


class PromptLimitExceededError(PromptVaultError):
    """Raised by the store layer when a free-tier user hits the prompt cap."""

    status_code = 403
    code = "prompt_limit_reached"

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__("Free tier limit reached! Upgrade to Pro for unlimited prompts.")


class NotFoundError(PromptVaultError):
    """Raised when a row is missing or owned by someone else."""

    status_code = 404
    code = "not_found"

    def __init__(self, resource: str):
        self.resource = resource
        super().__init__(f"{resource} not found")


class ExportFormatError(PromptVaultError):
    """Raised when an export is requested in an unsupported format."""

    status_code = 400
    code = "invalid_format"

    def __init__(self, requested: str):
        self.requested = requested
        super().__init__("Invalid format. Use json, csv, or md")
