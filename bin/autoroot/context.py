from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .device import DeviceController


@dataclass(frozen=True)
class DeviceHandle:
    serial: str
    description: str = ""


@dataclass(frozen=True)
class BuildArtifact:
    path: Path
    url: str
    size: int


@dataclass
class TaskContext:
    dev: DeviceController
    device: Optional[DeviceHandle] = None
    workspace: Optional[Path] = None
    artifact: Optional[BuildArtifact] = None
    boot_image: Optional[Path] = None
    patched_image: Optional[Path] = None
    bootloader_ready: bool = False
