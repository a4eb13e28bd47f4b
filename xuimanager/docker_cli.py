# -*- coding: utf-8 -*-
"""Thin wrapper over the docker / docker compose command line."""

import logging
import shutil
import subprocess
from typing import List, Optional, Tuple

from xuimanager.errors import RuntimeUnavailable

log = logging.getLogger("xuimanager.docker")


def run_cmd(cmd: List[str], timeout=30) -> Tuple[int, str, str]:
    """Run a command, never raise: (returncode, stdout, stderr)."""
    try:
        p = subprocess.run(cmd, capture_output=True, text=True, timeout=timeout, check=False)
        return p.returncode, (p.stdout or "").strip(), (p.stderr or "").strip()
    except subprocess.TimeoutExpired as e:
        return 124, "", f"timeout: {e}"
    except FileNotFoundError as e:
        return 127, "", str(e)
    except Exception as e:
        log.exception("run_cmd unexpected error: %s", cmd)
        return 1, "", str(e)


class DockerRuntime:
    def __init__(self, docker="docker"):
        self.docker = docker
        self._compose = None

    def available(self) -> bool:
        return shutil.which(self.docker) is not None

    def _names(self, all_containers=False, name=None) -> Optional[List[str]]:
        cmd = [self.docker, "ps"]
        if all_containers:
            cmd.append("-a")
        if name:
            cmd += ["--filter", f"name=^{name}$"]
        cmd += ["--format", "{{.Names}}"]
        rc, out, err = run_cmd(cmd)
        if rc != 0:
            log.debug("docker ps failed rc=%s err=%s", rc, err)
            return None
        return [ln.strip() for ln in out.splitlines() if ln.strip()]

    def is_running(self, container: str) -> bool:
        names = self._names(name=container)
        return bool(names) and container in names

    def exists(self, container: str) -> bool:
        names = self._names(all_containers=True, name=container)
        return bool(names) and container in names

    def net_io(self, container: str) -> Optional[str]:
        """Raw NetIO text such as '1.2MB / 800kB', or None."""
        rc, out, err = run_cmd([self.docker, "stats", "--no-stream", "--format", "{{.NetIO}}", container])
        if rc != 0 or not out:
            log.debug("docker stats %s failed rc=%s err=%s", container, rc, err)
            return None
        return out.splitlines()[0].strip()

    def ps_table(self, name_part: str) -> Optional[List[str]]:
        """`docker ps` table (header kept) limited to containers whose name contains name_part."""
        rc, out, err = run_cmd([self.docker, "ps", "--format", "table {{.Names}}\t{{.Status}}\t{{.Ports}}"])
        if rc != 0:
            log.debug("docker ps failed rc=%s err=%s", rc, err)
            return None
        lines = out.splitlines()
        return lines[:1] + [ln for ln in lines[1:] if name_part in ln]

    def stop(self, container: str) -> bool:
        rc, out, err = run_cmd([self.docker, "stop", container], timeout=60)
        if rc != 0:
            log.error("docker stop %s failed rc=%s err=%s", container, rc, err or out)
            return False
        return True

    def start(self, container: str) -> bool:
        rc, out, err = run_cmd([self.docker, "start", container], timeout=60)
        if rc != 0:
            log.error("docker start %s failed rc=%s err=%s", container, rc, err or out)
            return False
        return True

    # ---------- compose ----------

    def compose_cmd(self) -> List[str]:
        if self._compose:
            return self._compose
        if not self.available():
            raise RuntimeUnavailable("docker is not installed; install Docker first (https://get.docker.com)")
        for candidate in ([self.docker, "compose"], ["docker-compose"]):
            rc, _, _ = run_cmd(candidate + ["version"])
            if rc == 0:
                self._compose = candidate
                return candidate
        raise RuntimeUnavailable("Docker Compose not found; install the docker-compose-plugin package")

    def compose_up(self, compose_file: str) -> bool:
        rc, out, err = run_cmd(self.compose_cmd() + ["-f", compose_file, "up", "-d"], timeout=600)
        if rc != 0:
            log.error("compose up failed rc=%s err=%s", rc, err or out)
            return False
        return True

    def compose_down(self, compose_file: str) -> bool:
        rc, out, err = run_cmd(self.compose_cmd() + ["-f", compose_file, "down"], timeout=600)
        if rc != 0:
            log.warning("compose down failed rc=%s err=%s", rc, err or out)
            return False
        return True
