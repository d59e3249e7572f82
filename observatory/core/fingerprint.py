"""Error fingerprint used to group repeated occurrences of the same error."""

import hashlib

ERROR_HASH_LENGTH = 32


def compute_error_hash(
    service_name: str,
    error_type: str,
    error_message: str,
    endpoint: str | None = None,
) -> str:
    """Generate a stable fingerprint for an error signature.

    Args:
        service_name: Service that reported the error
        error_type: Error class or category
        error_message: Error message text
        endpoint: Optional endpoint the error occurred on

    Returns:
        32 hex characters (128 bits) of the SHA-256 digest
    """
    key_string = f"{service_name}:{error_type}:{error_message}:{endpoint or ''}"
    return hashlib.sha256(key_string.encode("utf-8")).hexdigest()[:ERROR_HASH_LENGTH]
