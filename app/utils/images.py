"""Image path helpers for turning stored references into display URLs."""

from typing import Optional

FALLBACK_IMAGE = "/default-fallback-image.png"


def normalize_image_path(path: Optional[str], base_url: str = "") -> str:
    """Map a stored image reference to a fully-qualified display URL.

    Absolute http(s) URLs pass through untouched. Relative references get
    forward slashes, a single leading slash and the base URL prefix.

    Args:
        path: Stored reference (e.g., "uploads\\seasons\\a.png" or "seasons/a.png")
        base_url: Origin serving stored media (e.g., "https://api.example.com")

    Returns:
        Display URL, or FALLBACK_IMAGE when path is empty
    """
    if not path or not path.strip():
        return FALLBACK_IMAGE

    fixed = path.strip().replace("\\", "/")
    if fixed.startswith(("http://", "https://")):
        return fixed

    if not fixed.startswith("/"):
        fixed = "/" + fixed

    return f"{base_url.rstrip('/')}{fixed}"


def strip_base_url(url: str, base_url: str = "") -> str:
    """Recover the stored reference from a display URL.

    Used when sending back the gallery references a user kept.
    """
    base = base_url.rstrip("/")
    if base and url.startswith(base):
        url = url[len(base):]
    return url.lstrip("/")
