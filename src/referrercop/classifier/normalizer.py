"""URL normalization for list matching.

Reduces a URL to the comparison keys used by rule lists:
- Host, lower-cased, with a leading ``www.`` label removed
- Host plus path, with a single trailing slash removed

URLs that cannot be parsed into a host fall back to the raw trimmed string.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from referrercop.core.constants import WWW_PREFIX_RE


@dataclass(frozen=True)
class NormalizedURL:
    """Comparison keys for one URL."""
    host: Optional[str]                     # None when the URL had no parsable host
    key: str                                # host + path, or the raw fallback


class URLNormalizer:
    """Normalize URLs for list lookups.

    Normalization steps:
    1. Parse scheme, host and path
    2. Lower-case the host and drop any port or credentials
    3. Strip a leading ``www.`` label from the host
    4. Remove one trailing slash from the path

    If parsing fails, the raw string (trimmed, without a trailing slash) is
    the key and there is no host component.
    """

    def normalize(self, url: str) -> NormalizedURL:
        """Normalize a single URL.

        Args:
            url: URL as captured from the input

        Returns:
            NormalizedURL with host (possibly None) and key
        """
        try:
            parsed = urlsplit(url.strip())
            host = parsed.hostname
        except ValueError:
            host = None

        if not host:
            return NormalizedURL(host=None, key=_chomp_slash(url.strip()))

        host = WWW_PREFIX_RE.sub("", host)
        return NormalizedURL(host=host, key=host + _chomp_slash(parsed.path))

    def normalize_entry(self, url: str) -> str:
        """Return the exact-entry form of a URL found in a list source.

        Unlike normalize, there is no raw fallback: a list URL without a
        parsable host is an error.

        Raises:
            ValueError: If the URL has no parsable host
        """
        if not urlsplit(url.strip()).hostname:
            raise ValueError(f"no host in URL {url.strip()!r}")
        return self.normalize(url).key

    def normalize_token(self, token: str) -> str:
        """Return the exact-entry form of a bare ``host[/path]`` list token.

        The host part gets the same treatment as URL hosts (lower-cased,
        leading ``www.`` removed) and one trailing slash is dropped, so the
        token can match the keys produced by normalize.
        """
        host, slash, path = token.strip().partition("/")
        host = WWW_PREFIX_RE.sub("", host.lower())
        return host + _chomp_slash(slash + path)


def _chomp_slash(text: str) -> str:
    """Remove a single trailing slash."""
    return text[:-1] if text.endswith("/") else text
