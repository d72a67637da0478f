"""
URL canonicalization.

A listing's canonical key is its url with redirect wrappers unwrapped, the
fragment and tracking parameters removed and, where the site embeds a stable
listing id, collapsed to a fixed id-bearing form. canonicalize() is total and
idempotent: canonicalize(canonicalize(u)) == canonicalize(u).
"""

import logging
import re
from dataclasses import dataclass
from typing import FrozenSet, Optional, Tuple
from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

logger = logging.getLogger(__name__)

# Parameters that never identify a listing, on any site
GLOBAL_TRACKING_PARAMS: FrozenSet[str] = frozenset(
    {"gclid", "fbclid", "msclkid", "mc_cid", "mc_eid", "_ga"}
)
GLOBAL_TRACKING_PREFIXES: Tuple[str, ...] = ("utm_",)


@dataclass(frozen=True)
class RedirectWrapper:
    """
    An outbound redirect such as https://www.google.com/url?q=<destination>.
    """

    host_suffix: str
    params: Tuple[str, ...]
    path_prefixes: Tuple[str, ...] = ()

    def matches(self, host: str, path: str) -> bool:
        host = host.lower()
        suffix = self.host_suffix.lower()
        if host != suffix and not host.endswith("." + suffix):
            return False
        return not self.path_prefixes or any(path.startswith(p) for p in self.path_prefixes)


@dataclass(frozen=True)
class CanonicalRules:
    """
    Per-site canonicalization rules.

    id_template receives `scheme`, `host` and `id`, e.g.
    "{scheme}://{host}/jobs/view/{id}".
    """

    tracking_params: FrozenSet[str] = frozenset()
    redirect_wrappers: Tuple[RedirectWrapper, ...] = ()
    id_path_pattern: Optional[str] = None
    id_query_param: Optional[str] = None
    id_template: Optional[str] = None
    # Applied after id detection, overrides the url's own host
    canonical_host: Optional[str] = None


class Canonicalizer:
    def __init__(self, rules: Optional[CanonicalRules] = None):
        self.rules = rules or CanonicalRules()
        self._id_path_re = (
            re.compile(self.rules.id_path_pattern) if self.rules.id_path_pattern else None
        )
        self._tracking = {p.lower() for p in self.rules.tracking_params} | GLOBAL_TRACKING_PARAMS

    def canonicalize(self, url: str) -> str:
        """Canonical key for url. Never raises."""
        if not url:
            return ""
        url = url.strip()
        try:
            return self._canonicalize(url)
        except ValueError as e:
            logger.debug(f"Unparseable url '{url}': {e}")
            return _strip_query_and_fragment(url)

    __call__ = canonicalize

    def _canonicalize(self, url: str) -> str:
        parts = urlsplit(url)
        scheme = parts.scheme.lower()
        host = (parts.hostname or "").lower()
        if parts.port:
            host = f"{host}:{parts.port}"

        # 1. redirect wrappers (the inner url is strictly shorter than the wrapper)
        inner = self._unwrap(host, parts.path, parts.query)
        if inner:
            try:
                return self._canonicalize(inner)
            except ValueError as e:
                # Keep the destination as the key, not the wrapper
                logger.debug(f"Unparseable redirect target '{inner}': {e}")
                return _strip_query_and_fragment(inner)

        # 2 + 3. fragment and tracking parameters
        query = [
            (k, v)
            for k, v in parse_qsl(parts.query, keep_blank_values=True)
            if not self._is_tracking(k)
        ]

        # 4. stable listing ids
        listing_id = self._listing_id(parts.path, query)
        if listing_id and self.rules.id_template:
            return self.rules.id_template.format(
                scheme=scheme or "https",
                host=self.rules.canonical_host or host,
                id=quote(listing_id, safe=""),
            )

        netloc = self.rules.canonical_host or host
        if parts.username:
            netloc = f"{parts.username}@{netloc}"
        return urlunsplit((scheme, netloc, parts.path, urlencode(query), ""))

    def _unwrap(self, host: str, path: str, query: str) -> Optional[str]:
        for wrapper in self.rules.redirect_wrappers:
            if not wrapper.matches(host, path):
                continue
            values = dict(parse_qsl(query))
            for param in wrapper.params:
                inner = values.get(param, "").strip()
                if inner.startswith(("http://", "https://")):
                    return inner
        return None

    def _is_tracking(self, key: str) -> bool:
        key = key.lower()
        return key in self._tracking or key.startswith(GLOBAL_TRACKING_PREFIXES)

    def _listing_id(self, path: str, query) -> Optional[str]:
        if self._id_path_re:
            match = self._id_path_re.search(path)
            if match:
                return match.group(1)
        if self.rules.id_query_param:
            for key, value in query:
                if key == self.rules.id_query_param and value:
                    return value
        return None


def _strip_query_and_fragment(url: str) -> str:
    return url.split("#", 1)[0].split("?", 1)[0]


def canonicalize(url: str, rules: Optional[CanonicalRules] = None) -> str:
    """Canonicalize with one-off rules (or the generic defaults)."""
    return Canonicalizer(rules).canonicalize(url)
