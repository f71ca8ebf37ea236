"""Ready-made policies for the common upload kinds."""

from upload_core.policy.models import NamingStrategy, UploadPolicy

IMAGE_UPLOAD_POLICY = UploadPolicy(
    max_file_size=10 * 1024 * 1024,
    allowed_mime_types=frozenset(
        {"image/jpeg", "image/png", "image/gif", "image/webp"}
    ),
    allowed_extensions=frozenset({"jpg", "jpeg", "png", "gif", "webp"}),
    naming_strategy=NamingStrategy.UNIQUE,
    upload_root="images",
    enable_security=True,
)

AVATAR_UPLOAD_POLICY = UploadPolicy(
    max_file_size=2 * 1024 * 1024,
    allowed_mime_types=frozenset({"image/jpeg", "image/png", "image/webp"}),
    allowed_extensions=frozenset({"jpg", "jpeg", "png", "webp"}),
    naming_strategy=NamingStrategy.UNIQUE,
    upload_root="avatars",
    enable_security=True,
)

DOCUMENT_UPLOAD_POLICY = UploadPolicy(
    max_file_size=50 * 1024 * 1024,
    allowed_mime_types=frozenset(
        {
            "application/pdf",
            "text/plain",
            "text/csv",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
            "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        }
    ),
    allowed_extensions=frozenset({"pdf", "txt", "csv", "docx", "xlsx"}),
    naming_strategy=NamingStrategy.PRESERVE,
    upload_root="documents",
    enable_security=True,
)

PRESETS: dict[str, UploadPolicy] = {
    "images": IMAGE_UPLOAD_POLICY,
    "avatars": AVATAR_UPLOAD_POLICY,
    "documents": DOCUMENT_UPLOAD_POLICY,
}
