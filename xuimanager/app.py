# -*- coding: utf-8 -*-
from xuimanager.docker_cli import DockerRuntime
from xuimanager.meta_store import MetricsStore
from xuimanager.netinfo import detect_server_ip
from xuimanager.registry import PanelRegistry


class Context:
    """Everything one invocation works with, built once from Settings."""

    def __init__(self, settings, runtime=None):
        self.settings = settings
        self.registry = PanelRegistry(settings.registry_file)
        self.store = MetricsStore(settings.meta_file)
        self.runtime = runtime or DockerRuntime()
        self._server_ip = settings.server_ip

    @property
    def server_ip(self):
        if not self._server_ip:
            self._server_ip = detect_server_ip(self.settings)
        return self._server_ip

    def reload(self):
        self.registry.load()
        self.store.load()
        return self
