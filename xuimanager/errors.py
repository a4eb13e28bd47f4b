# -*- coding: utf-8 -*-


class XuiManagerError(Exception):
    """Base class for errors raised by xuimanager."""


class MetaStoreError(XuiManagerError):
    """The metrics file could not be read or written."""


class RegistryError(XuiManagerError):
    """The panel registry could not be read or written."""


class RuntimeUnavailable(XuiManagerError):
    """Docker or Docker Compose is missing or not answering."""


class PortAllocationError(XuiManagerError):
    DUPLICATE = "duplicate"
    INVALID_ORDER = "invalid_order"
    OVERLAP = "overlap"
    OUT_OF_RANGE = "out_of_range"

    def __init__(self, reason, message=None):
        self.reason = reason
        super().__init__(message or reason)
