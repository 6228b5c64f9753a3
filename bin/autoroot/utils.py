import os
import secrets
import shutil
import stat
import string
import subprocess
import sys
from pathlib import Path
from typing import List, Optional, Union

from . import constants as const
from .errors import RuntimeMissingError
from .i18n import get_string
from .ui import ui

WORKSPACE_ALPHABET = string.ascii_lowercase + string.digits


def run_command(
    command: Union[List[str], str],
    shell: bool = False,
    check: bool = True,
    env: Optional[dict] = None,
    capture: bool = False,
    cwd: Optional[Union[str, Path]] = None
) -> subprocess.CompletedProcess:
    if capture:
        return subprocess.run(
            command, shell=shell, check=check, capture_output=True,
            text=True, encoding='utf-8', errors='ignore', env=env, cwd=cwd
        )

    process = subprocess.Popen(
        command, shell=shell, env=env, cwd=cwd,
        stdout=subprocess.PIPE, stderr=subprocess.STDOUT,
        text=True, encoding='utf-8', errors='ignore', bufsize=1
    )

    output_lines = []
    if process.stdout:
        for line in process.stdout:
            ui.echo(f"    {line.rstrip()}")
            output_lines.append(line)

    process.wait()
    returncode = process.returncode

    if check and returncode != 0:
        raise subprocess.CalledProcessError(returncode, command, output="".join(output_lines))

    return subprocess.CompletedProcess(command, returncode, stdout="".join(output_lines), stderr=None)


def format_command_output(result: subprocess.CompletedProcess) -> str:
    parts = [(result.stderr or "").strip(), (result.stdout or "").strip()]
    return "\n".join(part for part in parts if part)


def random_workspace_name(length: int = const.WORKSPACE_NAME_LENGTH) -> str:
    return "".join(secrets.choice(WORKSPACE_ALPHABET) for _ in range(length))


def create_workspace(base_dir: Optional[Union[str, Path]] = None) -> Path:
    base = Path(base_dir) if base_dir else Path.cwd()
    base.mkdir(parents=True, exist_ok=True)
    path = base / random_workspace_name()
    path.mkdir()
    ui.echo(get_string("utils_workspace_created").format(path=path))
    return path


def _force_remove(func, path, _exc) -> None:
    os.chmod(path, stat.S_IWRITE | stat.S_IREAD | stat.S_IEXEC)
    func(path)


def remove_workspace(path: Optional[Union[str, Path]]) -> None:
    """Delete a workspace tree; empty or already-removed paths are a no-op."""
    if not path:
        return
    workspace = Path(path)
    if not workspace.exists():
        return
    if sys.version_info >= (3, 12):
        shutil.rmtree(workspace, onexc=_force_remove)
    else:
        shutil.rmtree(workspace, onerror=_force_remove)
    ui.echo(get_string("utils_workspace_removed").format(path=workspace))


def check_dependencies() -> None:
    dependencies = {
        "ADB": const.ADB_EXE,
        "Fastboot": const.FASTBOOT_EXE,
    }

    missing_deps = [
        name for name, path in dependencies.items()
        if not (Path(path).is_file() or shutil.which(str(path)))
    ]

    if missing_deps:
        for name in missing_deps:
            ui.warn(get_string("utils_missing_dep").format(name=name))
        raise RuntimeMissingError(get_string("utils_err_missing_deps").format(names=", ".join(missing_deps)))

    ui.echo(get_string("utils_deps_found"))
