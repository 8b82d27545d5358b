"""URL comparison and navigation target resolution.

The current URL is always absolute and read live from the browser. Expected
URLs written in tests may be absolute, scheme-relative (``//host/path``) or
relative to the current site (``/path`` or ``path``); they are resolved
against the current URL before comparing the selected components.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import reduce
from operator import or_
from urllib.parse import unquote, urlsplit, urlunsplit

from browserscope.core.protocols import UrlComponent, UrlKind
from browserscope.utils.exceptions import ConfigurationError, InvalidRedirectError

# Escapes of these characters change a URL's meaning and stay escaped
_RESERVED_ESCAPE = re.compile(r"(%(?:25|2[Ff]|3[Ff]|23|26|3[Dd]|2[Bb]|3[Bb]))")

_OPAQUE_SCHEMES = ("about", "data", "javascript", "mailto")

_DEFAULT_PORTS = {"http": 80, "https": 443, "ws": 80, "wss": 443, "ftp": 21}


@dataclass(frozen=True)
class _CanonicalUrl:
    scheme: str
    host: str
    port: int | None
    path: str
    query: str
    fragment: str


def safe_unescape(value: str) -> str:
    """Decode percent escapes except those of reserved characters.

    Kept escapes are upper-cased, so ``%2f`` and ``%2F`` compare equal.
    """
    parts = _RESERVED_ESCAPE.split(value)
    return "".join(
        part.upper() if _RESERVED_ESCAPE.fullmatch(part) else unquote(part)
        for part in parts
    )


def _canonical(url: str) -> _CanonicalUrl:
    split = urlsplit(url)
    scheme = split.scheme.lower()
    try:
        port = split.port
    except ValueError as e:
        raise ConfigurationError(f"Invalid port in URL '{url}'") from e
    if port is None:
        port = _DEFAULT_PORTS.get(scheme)
    return _CanonicalUrl(
        scheme=scheme,
        host=(split.hostname or "").lower(),
        port=port,
        path=safe_unescape(split.path or "/"),
        query=safe_unescape(split.query),
        fragment=safe_unescape(split.fragment),
    )


def is_absolute_url(url: str) -> bool:
    """Whether ``url`` is a well-formed absolute URL."""
    split = urlsplit(url)
    if not split.scheme:
        return False
    return bool(split.netloc) or split.scheme.lower() in _OPAQUE_SCHEMES


def resolve_expected(current_url: str, expected: str, kind: UrlKind) -> str:
    """Turn an expected URL into an absolute one using the current URL.

    Args:
        current_url: Absolute URL of the page.
        expected: Expected URL as written by the test.
        kind: Whether ``expected`` is relative to the current site.

    Returns:
        The absolute expected URL.

    Raises:
        ConfigurationError: If the result is still not an absolute URL.
    """
    current = urlsplit(current_url)
    url = expected
    if kind is UrlKind.RELATIVE:
        prefix = f"{current.scheme}://{current.hostname or ''}"
        url = f"{prefix}{url}" if url.startswith("/") else f"{prefix}/{url}"
    elif url.startswith("//") and current.scheme:
        url = f"{current.scheme}:{url}"

    if not is_absolute_url(url):
        raise ConfigurationError(
            f"Expected URL '{expected}' is not absolute; pass UrlKind.RELATIVE "
            "for URLs relative to the current site"
        )
    return url


def compare_url(
    current_url: str,
    expected: str,
    kind: UrlKind,
    *components: UrlComponent,
) -> bool:
    """Compare selected parts of the current URL with an expected URL.

    The comparison is case-insensitive and works on safe-unescaped values.
    Query and fragment only constrain the result when the expected URL
    contains them.

    Args:
        current_url: Absolute URL of the page.
        expected: Expected URL, absolute or relative according to ``kind``.
        kind: How to interpret ``expected``.
        *components: URL parts to compare; at least one is required.

    Returns:
        True when all selected parts match.

    Raises:
        ConfigurationError: If no components are given.

    Example:
        >>> compare_url(
        ...     "https://host/path?x=1", "//host/path",
        ...     UrlKind.ABSOLUTE, UrlComponent.PATH_AND_QUERY,
        ... )
        True
    """
    if not components:
        raise ConfigurationError("compare_url requires at least one UrlComponent")
    if not all(isinstance(c, UrlComponent) for c in components):
        raise ConfigurationError("components must be UrlComponent values")
    selected = reduce(or_, components)

    current = _canonical(current_url)
    wanted = _canonical(resolve_expected(current_url, expected, kind))

    checks = [
        (UrlComponent.SCHEME, current.scheme, wanted.scheme, True),
        (UrlComponent.HOST, current.host, wanted.host, True),
        (UrlComponent.PATH, current.path, wanted.path, True),
        (UrlComponent.QUERY, current.query, wanted.query, bool(wanted.query)),
        (UrlComponent.FRAGMENT, current.fragment, wanted.fragment, bool(wanted.fragment)),
    ]
    for component, actual, expected_value, constrained in checks:
        if component in selected and constrained:
            if actual.casefold() != expected_value.casefold():
                return False
    return True


def urls_equal(current_url: str, expected: str) -> bool:
    """Exact URL equality, ignoring only the fragment.

    Scheme and host compare case-insensitively, default ports are implied,
    path and query compare exactly after safe unescaping. A relative
    ``expected`` never equals an absolute URL.
    """
    if not is_absolute_url(expected):
        return False
    a = _canonical(current_url)
    b = _canonical(expected)
    return (a.scheme, a.host, a.port, a.path, a.query) == (
        b.scheme,
        b.host,
        b.port,
        b.path,
        b.query,
    )


def url_path(url: str) -> str:
    """Return ``url`` up to and including its path."""
    split = urlsplit(url)
    return urlunsplit((split.scheme, split.netloc, split.path or "/", "", ""))


def absolute_url(relative_url: str, base_url: str) -> str:
    """Resolve a site-relative URL against the base URL's origin.

    The port is always spelled out, e.g. ``http://localhost:80/page``.
    """
    base = urlsplit(base_url)
    port = base.port or _DEFAULT_PORTS.get(base.scheme.lower())
    origin = f"{base.scheme}://{base.hostname}"
    if port is not None:
        origin += f":{port}"
    if relative_url.startswith("/"):
        return f"{origin}{relative_url}"
    return f"{origin}/{relative_url}"


def navigation_target(url: str | None, base_url: str, current_url: str | None = None) -> str:
    """Compute the URL a navigation request should load.

    Rules:
    - empty ``url``: the base URL
    - absolute ``url``: loaded as is
    - ``//host/path``: current page's scheme is prepended
    - ``/path``: appended to the base URL's origin
    - ``path``: appended to the full base URL

    Raises:
        InvalidRedirectError: If a base URL is needed but not configured.
    """
    if url is None or not url.strip():
        if not base_url or not base_url.strip():
            raise InvalidRedirectError()
        return base_url

    if is_absolute_url(url):
        return url

    if url.startswith("//"):
        scheme = urlsplit(current_url).scheme if current_url else ""
        return f"{scheme or 'https'}:{url}"

    if not base_url or not base_url.strip():
        raise InvalidRedirectError()
    base = urlsplit(base_url)
    if url.startswith("/"):
        origin = urlunsplit((base.scheme, base.netloc, "", "", ""))
        return origin.rstrip("/") + "/" + url.lstrip("/")

    root = urlunsplit((base.scheme, base.netloc, base.path, "", ""))
    return root.rstrip("/") + "/" + url.lstrip("/")
