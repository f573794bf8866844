"""
HTTP session creation and the HTTP client used by the downloader.

The client offers three capabilities, which is all the rest of the package
relies on:

* ``fetch``    – GET a page, redirects followed
* ``post``     – POST a form, redirects followed
* ``download`` – stream a file to disk

Cookie state is owned by the caller (see ``auth.login.SessionAuthState``):
cookies go in through the *cookies* argument and come back on the
``HttpResponse``; the underlying ``requests.Session`` is cleared after each
call so nothing leaks between domains or runs.
"""

import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import requests
from requests.adapters import HTTPAdapter
from requests.cookies import RequestsCookieJar
from tqdm import tqdm
from urllib3.util.retry import Retry

from multifile_downloader.config import (
    MAX_RETRIES,
    REQUEST_TIMEOUT,
    STREAM_CHUNK,
    USER_AGENT,
)
from multifile_downloader.errors import FetchError
from multifile_downloader.utils.log import log


def build_session(verify_ssl: bool = True) -> requests.Session:
    """Return a requests.Session with retry logic and keep-alive pre-configured."""
    session = requests.Session()
    retry = Retry(
        total=MAX_RETRIES,
        backoff_factor=0.5,
        status_forcelist=[500, 502, 503, 504],
    )
    adapter = HTTPAdapter(max_retries=retry)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = verify_ssl
    session.headers.update({
        "User-Agent": USER_AGENT,
        "Connection": "keep-alive",
    })
    return session


@dataclass
class HttpResponse:
    url: str
    status_code: int
    body: bytes
    elapsed: float = 0.0
    cookies: RequestsCookieJar = field(default_factory=RequestsCookieJar)

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")


@dataclass
class DownloadResult:
    success: bool
    bytes_written: int = 0
    error: str = ""


def _collect_cookies(resp: requests.Response) -> RequestsCookieJar:
    """Cookies set anywhere along the redirect chain of *resp*."""
    jar = RequestsCookieJar()
    for r in (*resp.history, resp):
        jar.update(r.cookies)
    return jar


def stream_to_file(local_path: Path, chunks: Iterator[bytes], bar: tqdm | None = None) -> int:
    """Write streaming *chunks* to *local_path*.

    Returns the total number of bytes written.  Creates parent
    directories as needed.
    """
    local_path.parent.mkdir(parents=True, exist_ok=True)
    total = 0
    with local_path.open("wb") as fh:
        for chunk in chunks:
            if chunk:
                fh.write(chunk)
                total += len(chunk)
                if bar is not None:
                    bar.update(len(chunk))
    log.debug("Streamed → %s (%d bytes)", local_path, total)
    return total


class HttpClient:
    """Thin blocking wrapper around ``requests`` (one request at a time)."""

    def __init__(
        self,
        session: requests.Session | None = None,
        timeout: float = REQUEST_TIMEOUT,
        verify_ssl: bool = True,
        progress: bool = True,
    ) -> None:
        self.session = session or build_session(verify_ssl=verify_ssl)
        self.timeout = timeout
        self.progress = progress

    def _request(
        self,
        method: str,
        url: str,
        headers: dict[str, str] | None = None,
        cookies: RequestsCookieJar | None = None,
        data: dict[str, str] | None = None,
    ) -> HttpResponse:
        t0 = time.monotonic()
        try:
            resp = self.session.request(
                method,
                url,
                headers=headers,
                cookies=cookies,
                data=data,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            raise FetchError(url, str(exc)) from exc
        finally:
            self.session.cookies.clear()
        elapsed = time.monotonic() - t0
        log.debug("  ← %s %s HTTP %s  %d bytes  %.2fs",
                  method, url, resp.status_code, len(resp.content), elapsed)
        return HttpResponse(
            url=resp.url,
            status_code=resp.status_code,
            body=resp.content,
            elapsed=elapsed,
            cookies=_collect_cookies(resp),
        )

    def fetch(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        cookies: RequestsCookieJar | None = None,
    ) -> HttpResponse:
        return self._request("GET", url, headers=headers, cookies=cookies)

    def post(
        self,
        url: str,
        data: dict[str, str],
        headers: dict[str, str] | None = None,
        cookies: RequestsCookieJar | None = None,
    ) -> HttpResponse:
        return self._request("POST", url, headers=headers, cookies=cookies, data=data)

    def download(
        self,
        url: str,
        destination: Path,
        cookies: RequestsCookieJar | None = None,
    ) -> DownloadResult:
        """
        Stream *url* into *destination*.

        Bytes go to ``<destination>.part`` first and are moved into place
        only once the transfer completed, so a failed download never leaves
        a truncated file under the final name.
        """
        part = destination.with_name(destination.name + ".part")
        try:
            with self.session.get(
                url,
                cookies=cookies,
                timeout=self.timeout,
                stream=True,
                allow_redirects=True,
            ) as resp:
                resp.raise_for_status()
                total = int(resp.headers.get("Content-Length") or 0) or None
                with tqdm(
                    total=total,
                    desc=destination.name[:40],
                    unit="B",
                    unit_scale=True,
                    unit_divisor=1024,
                    leave=False,
                    dynamic_ncols=True,
                    disable=not self.progress,
                ) as bar:
                    written = stream_to_file(
                        part, resp.iter_content(chunk_size=STREAM_CHUNK), bar
                    )
            os.replace(part, destination)
        except (requests.RequestException, OSError) as exc:
            part.unlink(missing_ok=True)
            return DownloadResult(success=False, error=str(exc))
        finally:
            self.session.cookies.clear()
        return DownloadResult(success=True, bytes_written=written)

    def close(self) -> None:
        self.session.close()
