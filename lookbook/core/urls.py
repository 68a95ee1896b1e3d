"""Strict URL splitting for outbound redirect targets."""

from urllib.parse import SplitResult, urlsplit


def split_url(url: str | None) -> SplitResult | None:
    """Parse a redirect URL, refusing anything a browser may read differently.

    Backslashes, whitespace, control characters and userinfo ("user@host")
    are rejected outright: urlsplit and browsers disagree on where the host
    ends for such input.

    Returns:
        The split URL, or None if it must not be followed
    """
    if not isinstance(url, str):
        return None
    candidate = url.strip()
    if not candidate or "\\" in candidate:
        return None
    if any(ch.isspace() or ord(ch) < 0x20 or ord(ch) == 0x7F for ch in candidate):
        return None
    try:
        parts = urlsplit(candidate)
        # port is validated lazily and raises on "host:abc"
        hostname, _port = parts.hostname, parts.port
    except ValueError:
        return None
    if "@" in parts.netloc or not hostname:
        return None
    return parts


def clean_netloc(parts: SplitResult) -> str:
    """Rebuild "host[:port]" from parsed parts, dropping anything else."""
    hostname = parts.hostname or ""
    if ":" in hostname:
        hostname = f"[{hostname}]"
    return f"{hostname}:{parts.port}" if parts.port is not None else hostname
