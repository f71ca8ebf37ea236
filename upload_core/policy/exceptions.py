class ConfigurationError(Exception):
    """Raised when an upload policy or settings value is malformed.

    Always raised before any file is processed, so a policy is never
    partially applied.
    """
