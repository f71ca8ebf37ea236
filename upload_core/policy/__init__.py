from upload_core.policy.exceptions import ConfigurationError
from upload_core.policy.models import NamingStrategy, UploadPolicy
from upload_core.policy.presets import (
    AVATAR_UPLOAD_POLICY,
    DOCUMENT_UPLOAD_POLICY,
    IMAGE_UPLOAD_POLICY,
)

__all__ = [
    "AVATAR_UPLOAD_POLICY",
    "DOCUMENT_UPLOAD_POLICY",
    "IMAGE_UPLOAD_POLICY",
    "ConfigurationError",
    "NamingStrategy",
    "UploadPolicy",
]
