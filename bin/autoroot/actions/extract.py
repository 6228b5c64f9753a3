import shutil
import subprocess
import zipfile
from pathlib import Path

from .. import constants as const
from .. import downloader, utils
from ..errors import AcquisitionError, MissingExtractedFileError, UnsupportedArchiveFormatError
from ..i18n import get_string
from ..ui import ui


def _extract_member(zf: zipfile.ZipFile, name: str, output_dir: Path) -> Path:
    target_path = output_dir / name
    with zf.open(name) as source, open(target_path, "wb") as target:
        shutil.copyfileobj(source, target)
    ui.echo(get_string("ext_extracted").format(name=name))
    return target_path


def _extract_from_payload(payload: Path, output_dir: Path) -> Path:
    ui.echo(get_string("ext_payload_tool"))
    dumper = downloader.download_payload_dumper(output_dir)

    command = [
        str(const.PYTHON_EXE),
        str(dumper),
        "--images", "boot",
        "--out", str(output_dir),
        str(payload),
    ]
    try:
        utils.run_command(command, cwd=dumper.parent)
    except (subprocess.CalledProcessError, FileNotFoundError) as e:
        raise AcquisitionError(get_string("ext_err_payload_tool").format(e=e))

    boot_img = output_dir / const.FN_BOOT
    if not boot_img.exists():
        raise MissingExtractedFileError(get_string("ext_err_boot_missing").format(path=boot_img))
    return boot_img


def extract_boot_image(archive_path: Path, output_dir: Path) -> Path:
    ui.echo(get_string("ext_open_archive").format(name=archive_path.name))
    payload = None
    boot_img = None

    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            names = set(zf.namelist())
            if const.FN_PAYLOAD in names:
                ui.echo(get_string("ext_payload_format"))
                payload = _extract_member(zf, const.FN_PAYLOAD, output_dir)
            elif const.FN_BOOT in names:
                ui.echo(get_string("ext_direct_format"))
                boot_img = _extract_member(zf, const.FN_BOOT, output_dir)
            else:
                raise UnsupportedArchiveFormatError(
                    get_string("ext_err_unsupported").format(name=archive_path.name)
                )
    except zipfile.BadZipFile as e:
        raise UnsupportedArchiveFormatError(
            get_string("ext_err_bad_zip").format(name=archive_path.name, e=e)
        )

    if payload is not None:
        boot_img = _extract_from_payload(payload, output_dir)

    if boot_img is None or boot_img.stat().st_size == 0:
        raise MissingExtractedFileError(get_string("ext_err_boot_empty").format(path=boot_img))

    ui.echo(get_string("ext_boot_ready").format(path=boot_img))
    return boot_img
