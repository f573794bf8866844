"""
URL validation, classification and relative-link resolution.

Resolution is a pure string transformation: nothing here touches the
network, follows redirects or checks reachability.
"""

import enum
import re
import urllib.parse

from multifile_downloader.errors import ValidationError

_VALID_URL_RE = re.compile(r"^https?://\S+$")
_ABSOLUTE_RE = re.compile(r"^https?://")
# scheme ("https:"), host, remainder of the URL (path, query, fragment)
_BASE_RE = re.compile(r"^(https?:)//([^/]+)(.*)$")


class UrlKind(enum.Enum):
    ABSOLUTE = "absolute"
    PROTOCOL_RELATIVE = "protocol-relative"
    ROOT_RELATIVE = "root-relative"
    PATH_RELATIVE = "path-relative"


def validate_url(url: str) -> bool:
    """Return ``True`` when *url* is an ``http(s)://`` URL without whitespace."""
    return bool(_VALID_URL_RE.match(url))


def require_valid_url(url: str) -> str:
    """Return *url* unchanged, or raise ``ValidationError``."""
    if not validate_url(url):
        raise ValidationError(f"Invalid URL (expected http:// or https://): {url!r}")
    return url


def classify_url(candidate: str) -> UrlKind:
    if _ABSOLUTE_RE.match(candidate):
        return UrlKind.ABSOLUTE
    if candidate.startswith("//"):
        return UrlKind.PROTOCOL_RELATIVE
    if candidate.startswith("/"):
        return UrlKind.ROOT_RELATIVE
    return UrlKind.PATH_RELATIVE


def _split_base(base_url: str) -> tuple[str, str, str]:
    m = _BASE_RE.match(base_url)
    if not m:
        raise ValidationError(f"Base URL is not absolute: {base_url!r}")
    return m.group(1), m.group(2), m.group(3)


def resolve_url(base_url: str, candidate: str) -> str:
    """
    Convert *candidate* to an absolute URL relative to the page *base_url*.

    * ``https://…``      returned unchanged
    * ``//host/f.mp4``   gets the scheme of *base_url*
    * ``/dir/f.mp4``     gets the scheme and host of *base_url*
    * ``f.mp4``          gets the scheme, host and directory of *base_url*
      (the base path with its last segment removed)

    A base with no path (``https://host``) is treated as ``https://host/``,
    so ``f.mp4`` becomes ``https://host/f.mp4`` rather than the literal
    concatenation ``https://hostf.mp4``.

    Dot segments (``../``) are kept as-is; the server resolves them.
    """
    kind = classify_url(candidate)
    if kind is UrlKind.ABSOLUTE:
        return candidate

    scheme, host, rest = _split_base(base_url)
    if kind is UrlKind.PROTOCOL_RELATIVE:
        return f"{scheme}{candidate}"

    origin = f"{scheme}//{host}"
    if kind is UrlKind.ROOT_RELATIVE:
        return f"{origin}{candidate}"

    # Query and fragment never belong to the directory part
    path = re.split(r"[?#]", rest, maxsplit=1)[0]
    directory = path[: path.rfind("/") + 1] if "/" in path else ""
    if not directory:
        directory = "/"
    return f"{origin}{directory}{candidate}"


def extract_domain(url: str) -> str:
    """Return the ``host[:port]`` part of *url* (``""`` when not http(s))."""
    m = _BASE_RE.match(url)
    return m.group(2) if m else ""


def filename_from_url(url: str) -> str:
    """Last path segment of *url*, query and fragment removed, percent-decoded.

    Returns ``""`` when the URL path ends with ``/`` or has no path.
    """
    path = urllib.parse.urlparse(url).path
    name = urllib.parse.unquote(path.rsplit("/", 1)[-1])
    # Never let a decoded name escape the output directory
    return name.replace("/", "_").replace("\\", "_").strip()
