# -*- coding: utf-8 -*-
import logging
import os

import yaml

from xuimanager.config import PANEL_CONTAINER_PORT

log = logging.getLogger("xuimanager.compose")


def service_definition(panel, image):
    ports_range = f"{panel.range_start}-{panel.range_end}"
    return {
        "image": image,
        "container_name": panel.container,
        "restart": "unless-stopped",
        "tty": True,
        "environment": {
            "XRAY_VMESS_AEAD_FORCED": "false",
            "XUI_ENABLE_FAIL2BAN": "true",
        },
        "volumes": [
            f"./{panel.service}/db:/etc/x-ui",
            f"./{panel.service}/cert:/root/cert",
        ],
        "ports": [
            f"{panel.web_port}:{PANEL_CONTAINER_PORT}",
            f"{ports_range}:{ports_range}",
        ],
    }


def build_compose(panels, image):
    return {"services": {p.service: service_definition(p, image) for p in panels}}


def write_compose(settings, registry):
    """Regenerate docker-compose.yml from the registry and create data dirs."""
    panels = registry.panels()
    for p in panels:
        for sub in ("db", "cert"):
            os.makedirs(os.path.join(settings.panel_dir(p.index), sub), exist_ok=True)

    data = build_compose(panels, settings.image)
    tmp = settings.compose_file + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
    os.replace(tmp, settings.compose_file)
    log.info("wrote %s with %d panel(s)", settings.compose_file, len(panels))
    return settings.compose_file
