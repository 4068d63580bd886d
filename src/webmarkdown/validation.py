"""Validation of user-supplied URLs before any network call is made."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlsplit

from .errors import InvalidUrlError, MissingUrlError

# Schemes with an authority component and a well-known default port.
HIERARCHICAL_SCHEMES = {
    "http": 80,
    "https": 443,
    "ws": 80,
    "wss": 443,
    "ftp": 21,
}

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.\-]*$")
_WHITESPACE_RE = re.compile(r"\s")


@dataclass(frozen=True)
class ValidatedUrl:
    href: str
    scheme: str
    host: str = ""
    port: Optional[int] = None

    @property
    def origin(self) -> str:
        if self.scheme not in HIERARCHICAL_SCHEMES:
            return "null"
        host = f"[{self.host}]" if ":" in self.host else self.host
        if self.port is None or self.port == HIERARCHICAL_SCHEMES[self.scheme]:
            return f"{self.scheme}://{host}"
        return f"{self.scheme}://{host}:{self.port}"

    def __str__(self) -> str:
        return self.href


def _restore_authority(candidate: str, scheme: str) -> str:
    rest = candidate[len(scheme) + 1:].lstrip("/\\")
    return f"{scheme.lower()}://{rest}"


def validate_url(value: Optional[str]) -> ValidatedUrl:
    """Parse ``value`` as an absolute URL.

    Any scheme is accepted; hierarchical schemes additionally need a host.
    Those written without "//" (``http:example.com``, ``https:/example.com``)
    are rewritten to ``scheme://host`` form, as browsers do.
    Non-HTTP targets pass here and fail at fetch time.
    """

    if not value:
        raise MissingUrlError()

    candidate = value.strip()
    if not candidate:
        raise InvalidUrlError()

    try:
        parts = urlsplit(candidate)
        if parts.scheme.lower() in HIERARCHICAL_SCHEMES and not parts.netloc:
            candidate = _restore_authority(candidate, parts.scheme)
            parts = urlsplit(candidate)
        port = parts.port
    except ValueError as exc:
        raise InvalidUrlError() from exc

    scheme = parts.scheme.lower()
    if not scheme or not _SCHEME_RE.match(scheme):
        raise InvalidUrlError()

    if scheme in HIERARCHICAL_SCHEMES:
        host = parts.hostname or ""
        if not host or _WHITESPACE_RE.search(parts.netloc):
            raise InvalidUrlError()
        return ValidatedUrl(href=candidate, scheme=scheme, host=host, port=port)

    if not (parts.netloc or parts.path):
        raise InvalidUrlError()
    return ValidatedUrl(href=candidate, scheme=scheme, host=parts.hostname or "", port=port)
