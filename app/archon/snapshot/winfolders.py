"""Windows known-folder lookup.

Asks the shell for the real location of AppData and Documents folders
(which users may have redirected) through SHGetKnownFolderPath.
"""

import ctypes
import logging
import sys
import uuid
from pathlib import Path

from archon.snapshot.errors import SnapshotEnvironmentError, UnsupportedEnvironmentError

logger = logging.getLogger(__name__)

# KNOWNFOLDERID values from KnownFolders.h
KNOWN_FOLDER_IDS: dict[str, uuid.UUID] = {
    "Local": uuid.UUID("F1B32785-6FBA-4FCF-9D55-7B8E7F157091"),
    "LocalLow": uuid.UUID("A520A1A4-1780-4FF6-BD18-167343C5AF16"),
    "Roaming": uuid.UUID("3EB685DB-65F9-4CF6-A03A-E3EF65729F3D"),
    "Documents": uuid.UUID("FDD39AD0-238F-46AF-ADB4-6C85480369C7"),
}


class _GUID(ctypes.Structure):
    _fields_ = [
        ("Data1", ctypes.c_uint32),
        ("Data2", ctypes.c_uint16),
        ("Data3", ctypes.c_uint16),
        ("Data4", ctypes.c_ubyte * 8),
    ]

    @classmethod
    def from_uuid(cls, value: uuid.UUID) -> "_GUID":
        data4 = (ctypes.c_ubyte * 8)(*value.bytes[8:])
        return cls(value.fields[0], value.fields[1], value.fields[2], data4)


def known_folder_path(folder: str) -> Path:
    """Get the location of a Windows known folder.

    Args:
        folder: One of "Local", "LocalLow", "Roaming" or "Documents".

    Returns:
        Absolute path reported by the shell.

    Raises:
        UnsupportedEnvironmentError: If not running on Windows.
        SnapshotEnvironmentError: If the folder is unknown or the lookup fails.
    """
    if sys.platform != "win32":
        msg = f"Windows known folder '{folder}' can only be queried on Windows"
        raise UnsupportedEnvironmentError(msg)

    folder_id = KNOWN_FOLDER_IDS.get(folder)
    if folder_id is None:
        raise SnapshotEnvironmentError(f"Unsupported Windows folder type: {folder}")

    guid = _GUID.from_uuid(folder_id)
    buffer = ctypes.c_wchar_p()
    windll = ctypes.windll  # type: ignore[attr-defined]
    result = windll.shell32.SHGetKnownFolderPath(
        ctypes.byref(guid), 0, None, ctypes.byref(buffer)
    )
    try:
        if result != 0 or buffer.value is None:
            msg = f"Failed to get Windows folder '{folder}' (HRESULT {result & 0xFFFFFFFF:#010x})"
            raise SnapshotEnvironmentError(msg)
        logger.debug("Known folder %s -> %s", folder, buffer.value)
        return Path(buffer.value)
    finally:
        windll.ole32.CoTaskMemFree(buffer)
