import json

import pytest

from xuimanager.errors import RegistryError
from xuimanager.registry import Panel, PanelRegistry


def test_add_persists_and_orders(tmp_path):
    path = str(tmp_path / "panels.json")
    reg = PanelRegistry(path)
    reg.add(Panel(2, 2021, 10100, 10199))
    reg.add(Panel(1, 2020, 10000, 10099))

    fresh = PanelRegistry(path).load()
    assert [p.index for p in fresh.panels()] == [1, 2]
    assert fresh.next_index() == 3
    assert 2 in fresh and 5 not in fresh
    assert fresh.get(1).container == "xui_panel_1"
    assert fresh.get(1).service == "xui1"
    assert fresh.get(1).url("1.2.3.4") == "http://1.2.3.4:2020"


def test_duplicate_index_rejected(tmp_path):
    reg = PanelRegistry(str(tmp_path / "panels.json"))
    reg.add(Panel(1, 2020, 10000, 10099))
    with pytest.raises(RegistryError):
        reg.add(Panel(1, 2030, 11000, 11099))


def test_missing_file_is_empty(tmp_path):
    reg = PanelRegistry(str(tmp_path / "panels.json")).load()
    assert len(reg) == 0
    assert reg.next_index() == 1


def test_malformed_entries_skipped(tmp_path):
    path = tmp_path / "panels.json"
    path.write_text(json.dumps({"panels": [
        {"index": 1, "web_port": 2020, "range_start": 10000, "range_end": 10099},
        {"index": 2, "web_port": "x"},
    ]}), encoding="utf-8")
    reg = PanelRegistry(str(path)).load()
    assert [p.index for p in reg.panels()] == [1]


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "panels.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(RegistryError):
        PanelRegistry(str(path)).load()


def test_clear(tmp_path):
    path = str(tmp_path / "panels.json")
    reg = PanelRegistry(path)
    reg.add(Panel(1, 2020, 10000, 10099))
    reg.clear()
    assert len(PanelRegistry(path).load()) == 0
