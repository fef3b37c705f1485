"""Display helpers shared by the dashboard responses."""
from typing import Dict, Optional
from urllib.parse import urljoin, urlparse


def _ellipsize(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[:max_length - 3] + "..."


def truncate_url(url: str, max_length: int = 50) -> str:
    """Show the path of an absolute URL (or the raw value otherwise), shortened with '...'."""
    parsed = urlparse(url)
    if parsed.scheme and parsed.netloc:
        return _ellipsize(parsed.path or "/", max_length)
    return _ellipsize(url, max_length)


def format_bytes(size: Optional[int]) -> str:
    if not size:
        return "0 B"
    units = ["B", "KB", "MB", "GB"]
    unit_index = 0
    value = float(size)
    while value >= 1024 and unit_index < len(units) - 1:
        value /= 1024
        unit_index += 1
    if unit_index == 0:
        return f"{value:.0f} {units[unit_index]}"
    return f"{value:.1f} {units[unit_index]}"


def format_load_time(ms: Optional[float]) -> str:
    if not ms:
        return "0ms"
    if ms < 1000:
        return f"{round(ms)}ms"
    return f"{ms / 1000:.1f}s"


def get_image_filename(src: str, max_length: int = 30) -> str:
    """Last path segment of an image URL; relative sources are resolved first."""
    path = urlparse(urljoin("https://example.com", src)).path
    filename = path.split("/")[-1] or src
    return _ellipsize(filename, max_length)


# Issue severity -> dashboard level
SEVERITY_LEVELS = {
    "critical": "critical",
    "high": "critical",
    "medium": "warning",
    "low": "info",
}

SEVERITY_STYLES = {
    "critical": {"bg": "bg-red-50", "text": "text-red-700", "border": "border-red-200"},
    "warning": {"bg": "bg-orange-50", "text": "text-orange-700", "border": "border-orange-200"},
    "info": {"bg": "bg-blue-50", "text": "text-blue-700", "border": "border-blue-200"},
}


def severity_level(severity: Optional[str]) -> str:
    return SEVERITY_LEVELS.get((severity or "").lower(), "info")


def severity_style(level: str) -> Dict[str, str]:
    return SEVERITY_STYLES.get(level, SEVERITY_STYLES["info"])
