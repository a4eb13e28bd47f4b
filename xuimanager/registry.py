# -*- coding: utf-8 -*-
import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from xuimanager.errors import RegistryError
from xuimanager.meta_store import file_mode

log = logging.getLogger("xuimanager.registry")


@dataclass(frozen=True)
class Panel:
    index: int
    web_port: int
    range_start: int
    range_end: int

    @property
    def container(self) -> str:
        return f"xui_panel_{self.index}"

    @property
    def service(self) -> str:
        return f"xui{self.index}"

    def url(self, server_ip: str) -> str:
        return f"http://{server_ip}:{self.web_port}"


def atomic_write_json(path: str, data: dict):
    d = os.path.dirname(path) or "."
    os.makedirs(d, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=d, text=True)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        os.chmod(tmp, file_mode(path))
        os.replace(tmp, path)
    finally:
        if os.path.exists(tmp):
            os.unlink(tmp)


class PanelRegistry:
    """Provisioned panels, ordered by index, backed by panels.json."""

    def __init__(self, path: str):
        self.path = path
        self._panels: Dict[int, Panel] = {}

    def load(self):
        self._panels = {}
        if not os.path.isfile(self.path):
            return self
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f) or {}
        except (OSError, ValueError) as e:
            raise RegistryError(f"cannot read {self.path}: {e}") from e
        for item in data.get("panels", []):
            try:
                p = Panel(
                    index=int(item["index"]),
                    web_port=int(item["web_port"]),
                    range_start=int(item["range_start"]),
                    range_end=int(item["range_end"]),
                )
            except (KeyError, TypeError, ValueError):
                log.warning("skipping malformed registry entry: %r", item)
                continue
            self._panels[p.index] = p
        return self

    def save(self):
        data = {"panels": [asdict(p) for p in self.panels()]}
        try:
            atomic_write_json(self.path, data)
        except OSError as e:
            raise RegistryError(f"cannot write {self.path}: {e}") from e

    def panels(self) -> List[Panel]:
        return [self._panels[i] for i in sorted(self._panels)]

    def get(self, index: int) -> Optional[Panel]:
        return self._panels.get(index)

    def __len__(self):
        return len(self._panels)

    def __contains__(self, index):
        return index in self._panels

    def next_index(self) -> int:
        return max(self._panels, default=0) + 1

    def add(self, panel: Panel):
        if panel.index in self._panels:
            raise RegistryError(f"panel #{panel.index} already exists")
        self._panels[panel.index] = panel
        self.save()
        log.info("registered panel #%s web=%s range=%s-%s",
                 panel.index, panel.web_port, panel.range_start, panel.range_end)

    def clear(self):
        self._panels = {}
        self.save()
