# -*- coding: utf-8 -*-
import logging
import os
import shutil
import subprocess
from dataclasses import dataclass
from typing import Optional

# ---------- Configuration (override with environment variables) ----------
DEFAULT_BASE_DIR = "/opt/3xui-multi"
SNAP_BASE_DIR = "/var/snap/docker/common/3xui-multi"
DEFAULT_LOG_FILE = "/var/log/xuimanager.log"
COMPOSE_NAME = "docker-compose.yml"
META_NAME = "panels-meta.conf"
REGISTRY_NAME = "panels.json"

IMAGE = "ghcr.io/mhsanaei/3x-ui:latest"
PANEL_CONTAINER_PORT = 2053

CRON_TAG = "# MULTI_3XUI_QUOTA"
CRON_EXPR = "*/5 * * * *"
LIVE_INTERVAL = 1.0

LOG_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

log = logging.getLogger("xuimanager.config")


def docker_is_snap():
    if not shutil.which("snap"):
        return False
    try:
        p = subprocess.run(["snap", "list", "docker"], capture_output=True, text=True, timeout=10, check=False)
    except Exception:
        return False
    return p.returncode == 0


def detect_base_dir():
    return SNAP_BASE_DIR if docker_is_snap() else DEFAULT_BASE_DIR


@dataclass
class Settings:
    base_dir: str
    log_file: str = DEFAULT_LOG_FILE
    bot_token: str = ""
    admin_id: int = 0
    server_ip: Optional[str] = None
    image: str = IMAGE
    cron_expr: str = CRON_EXPR
    live_interval: float = LIVE_INTERVAL

    @property
    def compose_file(self):
        return os.path.join(self.base_dir, COMPOSE_NAME)

    @property
    def meta_file(self):
        return os.path.join(self.base_dir, META_NAME)

    @property
    def registry_file(self):
        return os.path.join(self.base_dir, REGISTRY_NAME)

    def panel_dir(self, index):
        return os.path.join(self.base_dir, f"xui{index}")

    @classmethod
    def from_env(cls, environ=None):
        env = os.environ if environ is None else environ
        base_dir = env.get("XUI_BASE_DIR") or detect_base_dir()
        try:
            admin_id = int(env.get("XUI_ADMIN_ID") or 0)
        except ValueError:
            log.warning("ignoring non-numeric XUI_ADMIN_ID=%r", env.get("XUI_ADMIN_ID"))
            admin_id = 0
        return cls(
            base_dir=base_dir,
            log_file=env.get("XUI_LOG_FILE") or DEFAULT_LOG_FILE,
            bot_token=env.get("XUI_BOT_TOKEN", ""),
            admin_id=admin_id,
            server_ip=env.get("XUI_SERVER_IP") or None,
            image=env.get("XUI_IMAGE") or IMAGE,
        )


def setup_logging(settings, console_level=logging.INFO):
    """File log at INFO plus a console handler; safe to call twice."""
    root = logging.getLogger("xuimanager")
    root.setLevel(logging.INFO)
    for h in list(root.handlers):
        root.removeHandler(h)
        h.close()

    console = logging.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    try:
        os.makedirs(os.path.dirname(settings.log_file) or ".", exist_ok=True)
        fh = logging.FileHandler(settings.log_file, encoding="utf-8")
    except OSError as e:
        root.warning("cannot open log file %s: %s", settings.log_file, e)
        return root
    fh.setLevel(logging.INFO)
    fh.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(fh)
    return root
