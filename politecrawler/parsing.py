from typing import AbstractSet, List, Optional
from urllib.parse import urldefrag, urljoin, urlsplit

from bs4 import BeautifulSoup


DEFAULT_PORTS = {"http": 80, "https": 443}
ALLOWED_SCHEMES = ("http", "https")
SESSION_ID_KEYS = frozenset({"jsessionid", "phpsessid", "sid", "sessionid", "aspsessionid"})
BLOCKED_EXTENSIONS = (
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".zip", ".rar", ".exe", ".dll",
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".ico", ".mp3", ".mp4", ".avi",
)


def _strip_session_ids(query: str) -> str:
    kept = []
    for part in query.split("&"):
        if not part:
            continue
        key = part.split("=", 1)[0]
        if key.lower() in SESSION_ID_KEYS:
            continue
        kept.append(part)
    return "&".join(kept)


class UrlTools:
    @staticmethod
    def canonicalize(raw: str) -> Optional[str]:
        """Normalize `raw` into the dedupe key form, or None if it is not an absolute URL.

        scheme and host are lower-cased, one trailing slash is dropped, default
        ports and session-id query parameters are removed and the fragment is
        discarded: ``https://EXAMPLE.com:443/page/?sid=1`` becomes
        ``https://example.com/page``.
        """
        if not raw:
            return None
        try:
            parts = urlsplit(raw.strip())
            port = parts.port
        except ValueError:
            return None
        scheme = parts.scheme.lower()
        host = parts.hostname or ""
        if not scheme or not host:
            return None
        if ":" in host:
            host = f"[{host}]"
        path = parts.path
        if path.endswith("/"):
            path = path[:-1]
        netloc = host
        if port is not None and DEFAULT_PORTS.get(scheme) != port:
            netloc = f"{host}:{port}"
        query = _strip_session_ids(parts.query) if parts.query else ""
        url = f"{scheme}://{netloc}{path}"
        if query:
            url += "?" + query
        return url

    @staticmethod
    def is_valid(url: str, allowed_domains: AbstractSet[str], blocked_domains: AbstractSet[str]) -> bool:
        try:
            parts = urlsplit(url)
        except ValueError:
            return False
        if parts.scheme not in ALLOWED_SCHEMES:
            return False
        host = (parts.hostname or "").lower()
        if not host:
            return False
        if allowed_domains and host not in allowed_domains:
            return False
        if host in blocked_domains:
            return False
        return not parts.path.lower().endswith(BLOCKED_EXTENSIONS)

    @staticmethod
    def normalize_link(base_url: str, href: str) -> Optional[str]:
        if not href:
            return None
        href = href.strip()
        if not href or href.lower().startswith(("javascript:", "mailto:", "tel:")):
            return None
        absolute = urljoin(base_url, href)
        absolute, _ = urldefrag(absolute)
        if urlsplit(absolute).scheme not in ALLOWED_SCHEMES:
            return None
        return absolute


class Extractor:
    @staticmethod
    def extract_links(html: str, base_url: str) -> List[str]:
        soup = BeautifulSoup(html, "html.parser")
        base_el = soup.find("base", href=True)
        if base_el:
            base_url = urljoin(base_url, base_el["href"])
        links: List[str] = []
        for a in soup.find_all("a", href=True):
            normalized = UrlTools.normalize_link(base_url, a["href"])
            if normalized:
                links.append(normalized)
        return links
