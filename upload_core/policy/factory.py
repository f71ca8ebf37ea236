from upload_core.config.settings import Settings
from upload_core.policy.models import UploadPolicy


class PolicyFactory:
    """Builds the default upload policy from settings."""

    @classmethod
    def create(cls, settings: Settings) -> UploadPolicy:
        """Create an UploadPolicy and check it.

        Raises:
            ConfigurationError: if the configured values are inconsistent.
        """
        policy = UploadPolicy(
            max_file_size=settings.upload_max_file_size,
            allowed_mime_types=frozenset(settings.upload_allowed_mime_types),
            allowed_extensions=frozenset(settings.upload_allowed_extensions),
            naming_strategy=settings.upload_naming_strategy,  # type: ignore[arg-type]
            upload_root=settings.upload_root,
            enable_security=settings.upload_enable_security,
        )
        policy.ensure_valid()
        return policy
