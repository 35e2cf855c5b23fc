"""File-system and process helpers."""

from __future__ import annotations

import os
import shutil
import subprocess

from ybbs.common import ten_to_62, xxhash64


def auto_create_dir(path: str | os.PathLike) -> None:
    """Create ``path`` and its parents unless something already exists there."""
    if not os.path.exists(path):
        os.makedirs(path, mode=0o711, exist_ok=True)


def cmd_exists(cmd: str) -> bool:
    """True when ``cmd`` can be found and run."""
    return shutil.which(cmd) is not None


def find_in_ps(cmd: str, text: str) -> tuple[bool, str]:
    """Grep the process list for ``cmd``; report whether ``text`` occurs, with the output."""
    try:
        ps = subprocess.Popen(["ps", "-ef"], stdout=subprocess.PIPE)
    except OSError:
        return False, ""
    with ps:
        try:
            grep = subprocess.Popen(
                ["grep", cmd],
                stdin=ps.stdout,
                stdout=subprocess.PIPE,
                text=True,
                errors="replace",
            )
        except OSError:
            return False, ""
        ps.stdout.close()
        out, _ = grep.communicate()
    return text in out, out


def hash_file(path: str | os.PathLike) -> str:
    """Base-62 XXH64 of a file's contents, or an empty string when it cannot be read."""
    try:
        with open(path, "rb") as fh:
            data = fh.read()
    except OSError:
        return ""
    return ten_to_62(xxhash64(data))