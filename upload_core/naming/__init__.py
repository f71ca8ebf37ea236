from upload_core.naming.exceptions import NameCollisionError
from upload_core.naming.generator import NameGenerator, sanitize_filename

__all__ = ["NameCollisionError", "NameGenerator", "sanitize_filename"]
