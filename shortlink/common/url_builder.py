"""URL building utilities for the short link service."""


def normalize_path_prefix(path_prefix: str) -> str:
    """Normalize a path prefix to a leading slash and no trailing slash.

    Args:
        path_prefix: Raw prefix (e.g., "go", "/go/", "")

    Returns:
        "/go" style prefix, or "" when no prefix is configured
    """
    prefix = (path_prefix or "").strip().strip("/")
    return f"/{prefix}" if prefix else ""


def build_short_url(
    short_code: str,
    base_url: str,
    path_prefix: str = "",
) -> str:
    """Build complete short URL.

    Args:
        short_code: The short code
        base_url: Base URL (e.g., http://10.0.0.5:8080)
        path_prefix: Optional path prefix (e.g., /go)

    Returns:
        Complete short URL
    """
    base = base_url.rstrip("/")
    return f"{base}{normalize_path_prefix(path_prefix)}/{short_code}"
