"""
Artifact fetching — single files over HTTP and whole directories via wget.

``fetch`` is idempotent per destination path: once a file exists in the
destination directory it is never downloaded again (no freshness
check). Downloads stream into a ``.part`` sibling and are renamed into
place only when complete, so an interrupted transfer never leaves a
file that a later call would mistake for a finished one.

``fetch_remote_dir`` mirrors one remote directory level with wget. The
``--cut-dirs`` depth is ``len(segments) - 2``: the path segments of the
URL (leading empty segment included) minus one for the host and one for
the leaf, so only the leaf directory is reproduced locally. Deeper
layouts than ``http://host/.../leaf/`` have not been needed.
"""

from __future__ import annotations

import http.client
import logging
import shutil
import subprocess
import urllib.parse
import urllib.request
from pathlib import Path

from harness.core.errors import ConfigError, FetchError, MirrorError

logger = logging.getLogger(__name__)

_CHUNK = 64 * 1024

WGET_REJECT = "index.html*,*.gif"


def fetch(base_url: str, file_name: str, dest_dir: str | Path) -> Path:
    """Download ``<base_url>/<file_name>`` into ``dest_dir`` unless already there.

    Args:
        base_url: Directory URL (a trailing slash is tolerated).
        file_name: Name of the file under ``base_url``; also the local name.
        dest_dir: Local directory, created if missing.

    Returns:
        Path of the local file.

    Raises:
        FetchError: The transfer failed. No partial file is left behind.
    """
    dest_dir = Path(dest_dir)
    dest_dir.mkdir(parents=True, exist_ok=True)

    src = f"{base_url.rstrip('/')}/{file_name}"
    dst = dest_dir / file_name

    if dst.exists():
        logger.info("Already fetched %s", dst)
        return dst

    logger.info("Fetching: %s", src)
    logger.info("  and saving to %s", dst)

    partial = dst.with_name(dst.name + ".part")
    try:
        with urllib.request.urlopen(src) as remote, open(partial, "wb") as out:
            shutil.copyfileobj(remote, out, _CHUNK)
    except (OSError, ValueError, http.client.HTTPException) as e:
        partial.unlink(missing_ok=True)
        raise FetchError(src, f"Failed to fetch '{src}': {e}") from e

    partial.replace(dst)
    return dst


def link_exists(url: str, timeout: int | None = None) -> bool:
    """Whether ``url`` answers a HEAD request with a 2xx status."""
    req = urllib.request.Request(url, method="HEAD")
    try:
        kwargs = {"timeout": timeout} if timeout is not None else {}
        with urllib.request.urlopen(req, **kwargs) as resp:
            status = resp.status
    except (OSError, ValueError, http.client.HTTPException) as e:
        logger.debug("HEAD %s failed: %s", url, e)
        return False
    return 200 <= status < 300


def mirror_layout(url: str) -> tuple[str, str, int]:
    """Normalize a directory URL and derive its local leaf and cut depth.

    Returns:
        ``(url_with_trailing_slash, leaf_name, cut_dirs)``

    Raises:
        ConfigError: The URL has no directory component.
    """
    if not url.endswith("/"):
        url += "/"

    segments = urllib.parse.urlparse(url).path.rstrip("/").split("/")
    leaf = segments[-1]
    if not leaf:
        raise ConfigError(f"Cannot mirror '{url}': URL has no directory component")

    return url, leaf, len(segments) - 2


def wget_command(url: str, dest_dir: str | Path, cut_dirs: int) -> list[str]:
    """The wget argv used to mirror ``url`` into ``dest_dir``."""
    return [
        "wget",
        "-nv",
        "-P", str(dest_dir),
        "--reject", WGET_REJECT,
        f"--cut-dirs={cut_dirs}",
        "-np",
        "-nH",
        "--no-check-certificate",
        "-r",
        url,
    ]


def fetch_remote_dir(url: str, dest_dir: str | Path) -> Path:
    """Recursively mirror the remote directory at ``url`` into ``dest_dir``.

    Returns:
        Path of the local copy, ``dest_dir/<leaf>``.

    Raises:
        ConfigError: The URL has no directory component.
        MirrorError: wget exited non-zero.
    """
    logger.info("fetch_remote_dir (url: %s, dst_dir %s)", url, dest_dir)

    url, leaf, cut = mirror_layout(url)
    dst = Path(dest_dir) / leaf
    cmd = wget_command(url, dest_dir, cut)

    logger.info("Fetching remote directory: %s", url)
    logger.info("  and saving to %s", dst)
    logger.info("  using command: %s", " ".join(cmd))

    try:
        proc = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except FileNotFoundError:
        logger.error("wget is not installed")
        raise MirrorError(url, 127) from None

    for line in (proc.stdout or "").splitlines():
        logger.debug(line)

    if proc.returncode != 0:
        raise MirrorError(url, proc.returncode)

    return dst
