"""URL helpers"""


def normalize_project_url(url: str) -> str:
    """Prefix https:// when the user typed a bare domain"""
    url = url.strip()
    if url.startswith("http://") or url.startswith("https://"):
        return url
    return f"https://{url}"
