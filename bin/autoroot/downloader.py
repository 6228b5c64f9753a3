import zipfile
from pathlib import Path
from typing import Iterable, Optional, Tuple
from urllib.parse import urljoin

import requests  # type: ignore[import-untyped]
from bs4 import BeautifulSoup

from . import constants as const
from . import net
from .context import BuildArtifact
from .device import DeviceController
from .errors import AcquisitionError, BuildResolutionError, DownloadError
from .i18n import get_string
from .ui import ui

CHUNK_SIZE = 1024 * 1024


def download_resource(url: str, dest_path: Path) -> int:
    ui.echo(get_string("dl_downloading").format(filename=dest_path.name))
    try:
        with net.request_with_retries("GET", url) as response, open(dest_path, "wb") as f:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if chunk:
                    f.write(chunk)
    except (requests.RequestException, OSError) as e:
        if dest_path.exists():
            dest_path.unlink()
        raise DownloadError(get_string("dl_err_download").format(url=url, e=e))

    size = dest_path.stat().st_size
    ui.echo(get_string("dl_download_success").format(filename=dest_path.name, size=size))
    return size


def extract_archive(archive_path: Path, dest_dir: Path) -> None:
    ui.echo(get_string("dl_extracting").format(filename=archive_path.name))
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            zf.extractall(dest_dir)
    except (zipfile.BadZipFile, OSError) as e:
        raise AcquisitionError(get_string("dl_err_extract").format(filename=archive_path.name, e=e))


def iter_links(html: str, base_url: str) -> Iterable[Tuple[str, str]]:
    soup = BeautifulSoup(html, "html.parser")
    for a_tag in soup.find_all("a", href=True):
        yield urljoin(base_url, a_tag["href"]), a_tag.get_text(strip=True)


def select_build_link(html: str, version: str, base_url: str) -> Optional[str]:
    """Return the first link naming ``<version>-signed.zip``, in document order.

    Device props report ``NIGHTLY`` while mirror filenames use ``nightly``, so
    the comparison ignores case.
    """
    wanted = f"{version}{const.ARTIFACT_SUFFIX}".casefold()
    for link, text in iter_links(html, base_url):
        if wanted in link.casefold() or wanted in text.casefold():
            return link
    return None


def fetch_build_listing(model: str) -> str:
    listing_url = f"{const.BUILDS_LISTING_URL}/{model}"
    try:
        with net.request_with_retries("GET", listing_url, stream=False) as response:
            return response.text
    except requests.RequestException as e:
        raise BuildResolutionError(get_string("dl_err_listing").format(url=listing_url, e=e))


def resolve_latest_build_url(model: str, version: str) -> str:
    listing_url = f"{const.BUILDS_LISTING_URL}/{model}"
    html = fetch_build_listing(model)
    link = select_build_link(html, version, listing_url)
    if not link:
        raise BuildResolutionError(
            get_string("dl_err_no_build").format(version=version, model=model)
        )
    return link


def fetch_latest_build(dev: DeviceController, destination: Path) -> BuildArtifact:
    model = dev.get_prop(const.MODEL_PROP)
    version = dev.get_prop(const.VERSION_PROP)
    if not model or not version:
        raise BuildResolutionError(get_string("dl_err_device_props").format(model=model, version=version))
    ui.echo(get_string("dl_device_info").format(model=model, version=version))

    url = resolve_latest_build_url(model, version)
    ui.echo(get_string("dl_build_found").format(url=url))

    size = download_resource(url, destination)
    return BuildArtifact(path=destination, url=url, size=size)


def download_payload_dumper(dest_dir: Path) -> Path:
    archive = dest_dir / const.FN_PAYLOAD_DUMPER_ZIP
    download_resource(const.PAYLOAD_DUMPER_URL, archive)
    extract_archive(archive, dest_dir)

    scripts = sorted(dest_dir.rglob(const.PAYLOAD_DUMPER_SCRIPT))
    if not scripts:
        raise AcquisitionError(
            get_string("dl_err_tool_missing").format(name=const.PAYLOAD_DUMPER_SCRIPT, archive=archive.name)
        )
    return scripts[0]
