# -*- coding: utf-8 -*-
"""
Per-panel quota metrics kept in a shell-style KEY=VALUE file.

    PANEL_1_QUOTA_GB=100
    PANEL_1_USED_BYTES=52428800
    PANEL_1_USED_GB=0.05
    PANEL_1_LAST_BYTES=91750400

Every set() rewrites the line(s) of one key (or appends one) and swaps the file in
with os.replace, so a reader never sees a half-written file. Fields of one
record are written independently; there is no transaction across them.
"""

import enum
import logging
import os
import tempfile
from dataclasses import dataclass
from typing import Dict

from xuimanager.errors import MetaStoreError
from xuimanager.units import bytes_to_gb, safe_int

log = logging.getLogger("xuimanager.meta_store")


class Field(enum.Enum):
    QUOTA_GB = "QUOTA_GB"
    USED_GB = "USED_GB"
    USED_BYTES = "USED_BYTES"
    LAST_BYTES = "LAST_BYTES"


def meta_key(index: int, field: Field) -> str:
    return f"PANEL_{int(index)}_{field.value}"


def file_mode(path: str, default=0o644) -> int:
    """Permission bits to give a file that replaces `path`."""
    try:
        return os.stat(path).st_mode & 0o777
    except OSError:
        return default


@dataclass
class QuotaRecord:
    index: int
    quota_gb: int = 0
    used_bytes: int = 0
    used_gb: float = 0.0
    last_bytes: int = 0

    @property
    def unlimited(self):
        return self.quota_gb == 0


def _split_line(line: str):
    s = line.strip()
    if not s or s.startswith("#") or "=" not in s:
        return None, None
    k, v = s.split("=", 1)
    v = v.strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in "\"'":
        v = v[1:-1]
    return k.strip(), v


class MetricsStore:
    def __init__(self, path: str):
        self.path = path
        self.values: Dict[str, str] = {}

    def load(self):
        """Read the whole file. A missing file leaves the store empty."""
        self.values = {}
        if not os.path.exists(self.path):
            return self
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for line in f:
                    k, v = _split_line(line)
                    if k:
                        self.values[k] = v
        except OSError as e:
            raise MetaStoreError(f"cannot read {self.path}: {e}") from e
        return self

    def get(self, index: int, field: Field, default: str = "0") -> str:
        return self.values.get(meta_key(index, field), default)

    def get_int(self, index: int, field: Field) -> int:
        return max(0, safe_int(self.get(index, field), 0))

    def record(self, index: int) -> QuotaRecord:
        try:
            used_gb = float(self.get(index, Field.USED_GB))
        except ValueError:
            used_gb = 0.0
        return QuotaRecord(
            index=index,
            quota_gb=self.get_int(index, Field.QUOTA_GB),
            used_bytes=self.get_int(index, Field.USED_BYTES),
            used_gb=used_gb,
            last_bytes=self.get_int(index, Field.LAST_BYTES),
        )

    def set(self, index: int, field: Field, value) -> None:
        key = meta_key(index, field)
        value = str(value)
        lines = []
        if os.path.exists(self.path):
            try:
                with open(self.path, "r", encoding="utf-8") as f:
                    lines = f.read().splitlines()
            except OSError as e:
                raise MetaStoreError(f"cannot read {self.path}: {e}") from e

        # every copy of the key, since load() keeps the last one it reads
        replaced = False
        for i, line in enumerate(lines):
            k, _ = _split_line(line)
            if k == key:
                lines[i] = f"{key}={value}"
                replaced = True
        if not replaced:
            lines.append(f"{key}={value}")

        self._write(lines)
        self.values[key] = value

    def _write(self, lines):
        d = os.path.dirname(self.path) or "."
        try:
            os.makedirs(d, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=".meta-", dir=d, text=True)
        except OSError as e:
            raise MetaStoreError(f"cannot write {self.path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
            os.chmod(tmp, file_mode(self.path))
            os.replace(tmp, self.path)
        except OSError as e:
            raise MetaStoreError(f"cannot write {self.path}: {e}") from e
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)

    # ---------- record helpers ----------

    def init_record(self, index: int, quota_gb: int = 0):
        self.set(index, Field.QUOTA_GB, int(quota_gb))
        self.set(index, Field.USED_GB, "0")
        self.set(index, Field.USED_BYTES, 0)
        self.set(index, Field.LAST_BYTES, 0)

    def set_quota(self, index: int, quota_gb: int):
        self.set(index, Field.QUOTA_GB, int(quota_gb))
        log.info("panel #%s quota set to %s GB", index, quota_gb)

    def reset_usage(self, index: int):
        self.set(index, Field.USED_GB, "0")
        self.set(index, Field.USED_BYTES, 0)
        self.set(index, Field.LAST_BYTES, 0)
        log.info("panel #%s usage reset", index)

    def set_used(self, index: int, used_bytes: int):
        self.set(index, Field.USED_BYTES, int(used_bytes))
        self.set(index, Field.USED_GB, f"{bytes_to_gb(used_bytes):.2f}")

    def clear(self):
        """Start from an empty file (initial install / rebuild)."""
        self._write([])
        self.values = {}
