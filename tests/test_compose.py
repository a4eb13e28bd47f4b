import os

import yaml

from xuimanager.compose import build_compose, write_compose
from xuimanager.registry import Panel


def test_service_layout():
    data = build_compose([Panel(1, 2020, 10000, 10099)], "img:latest")
    svc = data["services"]["xui1"]
    assert svc["image"] == "img:latest"
    assert svc["container_name"] == "xui_panel_1"
    assert svc["restart"] == "unless-stopped"
    assert svc["ports"] == ["2020:2053", "10000-10099:10000-10099"]
    assert "./xui1/db:/etc/x-ui" in svc["volumes"]


def test_write_compose(settings, registry):
    registry.add(Panel(2, 2021, 10100, 10199))

    path = write_compose(settings, registry)

    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    assert list(data["services"]) == ["xui1", "xui2"]
    assert data["services"]["xui2"]["ports"][1] == "10100-10199:10100-10199"
    for i in (1, 2):
        assert os.path.isdir(os.path.join(settings.panel_dir(i), "db"))
        assert os.path.isdir(os.path.join(settings.panel_dir(i), "cert"))
    assert not os.path.exists(path + ".tmp")
