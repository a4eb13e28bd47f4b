# -*- coding: utf-8 -*-
import logging

import requests

from xuimanager.docker_cli import run_cmd

log = logging.getLogger("xuimanager.netinfo")

IP_SERVICES = ("https://ifconfig.me/ip", "https://ipv4.icanhazip.com")
PLACEHOLDER = "YOUR_SERVER_IP"


def detect_server_ip(settings=None):
    if settings is not None and settings.server_ip:
        return settings.server_ip
    for url in IP_SERVICES:
        try:
            r = requests.get(url, timeout=5)
            ip = r.text.strip()
            if r.ok and ip:
                return ip
        except requests.RequestException as e:
            log.debug("ip lookup via %s failed: %s", url, e)
    rc, out, _ = run_cmd(["hostname", "-I"])
    if rc == 0 and out.split():
        return out.split()[0]
    return PLACEHOLDER
