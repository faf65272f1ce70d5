"""Mountable devices: removable drives, LUKS volumes, and ISO images.

Each device exposes ``mount(username, password) -> bool`` and
``umount(username, password) -> bool``; the password is never logged.
"""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .commands import execute_and_capture, execute_sudo, execute_with_password

LOGGER = logging.getLogger(__name__)


class MountableDevice(Protocol):
    @property
    def label(self) -> str: ...

    @property
    def mount_point(self) -> Path | None: ...

    @property
    def needs_password(self) -> bool: ...

    def mount(self, username: str, password: str | None) -> bool: ...

    def umount(self, username: str, password: str | None) -> bool: ...


def _run_checked(args: list[str]) -> bool:
    try:
        result = execute_and_capture(args)
    except (OSError, subprocess.SubprocessError) as exc:
        LOGGER.warning("%s failed: %s", args[0], exc)
        return False
    if not result.ok:
        LOGGER.warning("%s failed: %s", " ".join(args[:2]), result.stderr.strip())
    return result.ok


@dataclass
class RemovableDevice:
    """Hotplugged block device mounted with ``udisksctl``."""

    device: str
    name: str
    mount_point: Path | None = None
    needs_password: bool = False

    @property
    def label(self) -> str:
        where = f" -> {self.mount_point}" if self.mount_point else ""
        return f"{self.name} ({self.device}){where}"

    def mount(self, username: str, password: str | None) -> bool:
        return _run_checked(["udisksctl", "mount", "--no-user-interaction", "-b", self.device])

    def umount(self, username: str, password: str | None) -> bool:
        return _run_checked(["udisksctl", "unmount", "--no-user-interaction", "-b", self.device])


@dataclass
class EncryptedDevice:
    """LUKS partition unlocked with its passphrase, then mounted."""

    device: str
    name: str
    mount_point: Path | None = None
    needs_password: bool = True
    mapped_device: str | None = None

    @property
    def label(self) -> str:
        state = f" -> {self.mount_point}" if self.mount_point else " (locked)" if self.mapped_device is None else ""
        return f"{self.name} ({self.device}){state}"

    def mount(self, username: str, password: str | None) -> bool:
        if password is None:
            return False
        if self.mapped_device is None:
            try:
                result = execute_with_password(
                    ["udisksctl", "unlock", "--no-user-interaction", "-b", self.device, "--key-file", "/dev/stdin"],
                    password,
                )
            except (OSError, subprocess.SubprocessError) as exc:
                LOGGER.warning("unlock %s failed: %s", self.device, exc)
                return False
            if not result.ok:
                LOGGER.warning("unlock %s failed: %s", self.device, result.stderr.strip())
                return False
            # "Unlocked /dev/sdb1 as /dev/dm-0."
            self.mapped_device = result.stdout.strip().rstrip(".").rsplit(" ", 1)[-1] or None
        if self.mapped_device is None:
            return False
        return _run_checked(["udisksctl", "mount", "--no-user-interaction", "-b", self.mapped_device])

    def umount(self, username: str, password: str | None) -> bool:
        if self.mapped_device is not None and not _run_checked(
            ["udisksctl", "unmount", "--no-user-interaction", "-b", self.mapped_device]
        ):
            return False
        if not _run_checked(["udisksctl", "lock", "--no-user-interaction", "-b", self.device]):
            return False
        self.mapped_device = None
        self.mount_point = None
        return True


@dataclass
class IsoDevice:
    """Loop-mounted ISO image under ``/run/media/<user>/``; needs sudo."""

    image: Path
    mount_point: Path | None = None
    needs_password: bool = True

    @property
    def label(self) -> str:
        return f"{self.image.name}" + (f" -> {self.mount_point}" if self.mount_point else "")

    def _target(self, username: str) -> Path:
        return Path("/run/media") / username / self.image.stem

    def mount(self, username: str, password: str | None) -> bool:
        if password is None:
            return False
        target = self._target(username)
        try:
            created = execute_sudo(["mkdir", "-p", str(target)], password)
            if not created.ok:
                LOGGER.warning("mkdir %s failed: %s", target, created.stderr.strip())
                return False
            result = execute_sudo(["mount", "-o", "loop,ro", str(self.image), str(target)], password)
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("mount %s failed: %s", self.image, exc)
            return False
        if not result.ok:
            LOGGER.warning("mount %s failed: %s", self.image, result.stderr.strip())
            return False
        self.mount_point = target
        return True

    def umount(self, username: str, password: str | None) -> bool:
        if password is None or self.mount_point is None:
            return False
        try:
            result = execute_sudo(["umount", str(self.mount_point)], password)
        except (OSError, subprocess.SubprocessError) as exc:
            LOGGER.warning("umount %s failed: %s", self.mount_point, exc)
            return False
        if result.ok:
            self.mount_point = None
        return result.ok


def _walk_blockdevices(nodes: list[dict]) -> list[dict]:
    out: list[dict] = []
    for node in nodes:
        out.append(node)
        out.extend(_walk_blockdevices(node.get("children") or []))
    return out


def list_block_devices() -> list[dict]:
    """Flattened ``lsblk`` JSON output; empty when ``lsblk`` is unavailable."""
    try:
        result = execute_and_capture(
            ["lsblk", "-J", "-o", "NAME,PATH,FSTYPE,MOUNTPOINT,LABEL,HOTPLUG,TYPE"], timeout=5.0
        )
    except (OSError, subprocess.SubprocessError) as exc:
        LOGGER.info("lsblk unavailable: %s", exc)
        return []
    if not result.ok:
        return []
    try:
        data = json.loads(result.stdout)
    except json.JSONDecodeError:
        LOGGER.warning("unexpected lsblk output")
        return []
    return _walk_blockdevices(data.get("blockdevices") or [])


def _mount_point(node: dict) -> Path | None:
    value = node.get("mountpoint")
    return Path(value) if isinstance(value, str) and value else None


def _is_hotplug(node: dict) -> bool:
    return node.get("hotplug") in (True, "1", 1)


def removable_devices(nodes: list[dict]) -> list[RemovableDevice]:
    devices: list[RemovableDevice] = []
    for node in nodes:
        if not _is_hotplug(node) or node.get("type") not in ("part", "disk"):
            continue
        if not node.get("fstype") or node.get("fstype") == "crypto_LUKS":
            continue
        devices.append(
            RemovableDevice(
                device=str(node.get("path") or f"/dev/{node.get('name')}"),
                name=str(node.get("label") or node.get("name")),
                mount_point=_mount_point(node),
            )
        )
    return devices


def encrypted_devices(nodes: list[dict]) -> list[EncryptedDevice]:
    devices: list[EncryptedDevice] = []
    for node in nodes:
        if node.get("fstype") != "crypto_LUKS":
            continue
        device = EncryptedDevice(
            device=str(node.get("path") or f"/dev/{node.get('name')}"),
            name=str(node.get("label") or node.get("name")),
        )
        for child in node.get("children") or []:
            if child.get("type") == "crypt":
                device.mapped_device = str(child.get("path") or f"/dev/mapper/{child.get('name')}")
                device.mount_point = _mount_point(child)
        devices.append(device)
    return devices
