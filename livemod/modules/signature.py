"""
Source file signatures used to detect changes since the last load.
"""

import hashlib
from pathlib import Path
from typing import Hashable, Union

from ..config import SIGNATURE_MODES

_CHUNK_SIZE = 65536


def compute_signature(path: Union[str, Path], mode: str = 'mtime') -> Hashable:
    """
    Compute a file signature.

    'mtime' -> (st_mtime_ns, st_size)
    'hash'  -> SHA-256 hex digest of the file contents

    Raises:
        OSError: If the file cannot be read
        ValueError: For an unknown mode
    """
    path = Path(path)
    if mode == 'mtime':
        st = path.stat()
        return (st.st_mtime_ns, st.st_size)
    if mode == 'hash':
        h = hashlib.sha256()
        with path.open('rb') as f:
            for chunk in iter(lambda: f.read(_CHUNK_SIZE), b""):
                h.update(chunk)
        return h.hexdigest()
    raise ValueError(
        f"Unknown signature mode '{mode}' (expected one of: {', '.join(SIGNATURE_MODES)})"
    )
