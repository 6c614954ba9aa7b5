# src/core/keys.py - v1
"""Resource key derivation: request URL <-> manifest key.

A resource key is the request path relative to the serving origin, with
"/" reserved for the site root. Storage keys are request URLs without
fragment, which is how partitions index entries.
"""

from __future__ import annotations

from urllib.parse import urlsplit

ROOT_KEY = "/"
VERSION_QUERY = "?v="


def normalize_origin(origin: str) -> str:
    """Strip trailing slashes so that prefix arithmetic is stable."""
    return origin.rstrip("/")


def normalize_key(key: str) -> str:
    """The empty key denotes the site root."""
    return ROOT_KEY if key == "" else key


def storage_key(url: str) -> str:
    """Return the partition key for a request URL.

    The fragment is removed and an empty path becomes "/", so
    ``https://host`` and ``https://host/`` share one entry.
    """
    url = url.split("#", 1)[0]
    parts = urlsplit(url)
    if parts.netloc and not parts.path:
        query = f"?{parts.query}" if parts.query else ""
        return f"{parts.scheme}://{parts.netloc}/{query}"
    return url


def resource_key(
    url: str,
    origin: str,
    entry_document: str | None = "index.html",
) -> str | None:
    """Derive the manifest key for a request URL.

    Returns None when the URL is not served from ``origin``.

    Rules, in order:
      1. Strip ``origin + "/"``.
      2. Drop any ``?v=`` cache-busting suffix.
      3. The bare origin, fragment-only navigations (``origin/#/route``) and
         an empty remainder map to ``/``.
      4. The entry document itself maps to ``/`` so it is always served
         network-first.
    """
    origin = normalize_origin(origin)
    if url == origin:
        return ROOT_KEY
    prefix = origin + "/"
    if not url.startswith(prefix):
        return None
    if url.startswith(origin + "/#"):
        return ROOT_KEY

    key = url[len(prefix):]
    if VERSION_QUERY in key:
        key = key.split(VERSION_QUERY, 1)[0]
    key = key.split("#", 1)[0]
    if key == "" or (entry_document and key == entry_document):
        return ROOT_KEY
    return key


def stored_resource_key(url: str, origin: str) -> str | None:
    """Key of an entry already stored in a partition.

    Stored entries are indexed by their exact URL, so only the origin prefix
    and the ``?v=`` suffix are stripped. The entry document keeps its own key
    here so that its fingerprint is compared under the name the build step
    gave it.
    """
    return resource_key(url, origin, entry_document=None)


def resource_url(key: str, origin: str) -> str:
    """Build the absolute request URL for a manifest key."""
    origin = normalize_origin(origin)
    if key == ROOT_KEY:
        return origin + "/"
    return f"{origin}/{key.lstrip('/')}"
