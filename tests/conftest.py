"""Shared fixtures: a scripted docker runtime and on-disk stores under tmp_path."""

import pytest

from xuimanager.config import Settings
from xuimanager.meta_store import MetricsStore
from xuimanager.registry import Panel, PanelRegistry


class FakeRuntime:
    """Stands in for DockerRuntime. NetIO values are consumed one per call."""

    def __init__(self):
        self.running = set()
        self.created = set()
        self.net_io_queue = {}
        self.stop_ok = True
        self.stop_calls = []
        self.start_calls = []
        self.compose_ups = []
        self.compose_downs = []

    def add(self, container, running=True, net_io=()):
        self.created.add(container)
        if running:
            self.running.add(container)
        self.net_io_queue[container] = list(net_io)

    def is_running(self, container):
        return container in self.running

    def exists(self, container):
        return container in self.created

    def net_io(self, container):
        queue = self.net_io_queue.get(container) or []
        if not queue:
            return None
        return queue.pop(0)

    def ps_table(self, name_part):
        rows = [f"{c}\tUp 5 minutes\t0.0.0.0:2020->2053/tcp" for c in sorted(self.running) if name_part in c]
        return ["NAMES\tSTATUS\tPORTS"] + rows

    def stop(self, container):
        self.stop_calls.append(container)
        if self.stop_ok:
            self.running.discard(container)
        return self.stop_ok

    def start(self, container):
        self.start_calls.append(container)
        self.running.add(container)
        return True

    def compose_cmd(self):
        return ["docker", "compose"]

    def compose_up(self, compose_file):
        self.compose_ups.append(compose_file)
        return True

    def compose_down(self, compose_file):
        self.compose_downs.append(compose_file)
        return True


@pytest.fixture
def runtime():
    return FakeRuntime()


@pytest.fixture
def settings(tmp_path):
    return Settings(base_dir=str(tmp_path / "multi"), log_file=str(tmp_path / "xui.log"),
                    server_ip="203.0.113.7", live_interval=0)


@pytest.fixture
def store(settings):
    return MetricsStore(settings.meta_file)


@pytest.fixture
def registry(settings):
    reg = PanelRegistry(settings.registry_file)
    reg.add(Panel(index=1, web_port=2020, range_start=10000, range_end=10099))
    return reg


@pytest.fixture
def panel(registry):
    return registry.get(1)
