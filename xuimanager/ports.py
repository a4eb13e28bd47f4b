# -*- coding: utf-8 -*-
"""
Web port and inbound range allocation for new panels.

Ranges are closed intervals: [100, 200] and [200, 300] overlap because they
share port 200. A rejected value is never adjusted automatically; the caller
asks the operator again.
"""

from typing import Iterable, List, Optional, Tuple

from xuimanager.errors import PortAllocationError

MIN_PORT = 1
MAX_PORT = 65535


def _in_port_range(*ports):
    return all(MIN_PORT <= p <= MAX_PORT for p in ports)


def ranges_overlap(s1: int, e1: int, s2: int, e2: int) -> bool:
    return s1 <= e2 and s2 <= e1


def check_web_port(requested: int, existing: Iterable[int]) -> Optional[str]:
    if not _in_port_range(requested):
        return PortAllocationError.OUT_OF_RANGE
    if any(requested == p for p in existing):
        return PortAllocationError.DUPLICATE
    return None


def check_range(start: int, end: int, existing_ranges: Iterable[Tuple[int, int]]) -> Optional[str]:
    if not _in_port_range(start, end):
        return PortAllocationError.OUT_OF_RANGE
    if start >= end:
        return PortAllocationError.INVALID_ORDER
    for s, e in existing_ranges:
        if ranges_overlap(start, end, s, e):
            return PortAllocationError.OVERLAP
    return None


class PortAllocator:
    def __init__(self, web_ports: Iterable[int] = (), ranges: Iterable[Tuple[int, int]] = ()):
        self.web_ports: List[int] = list(web_ports)
        self.ranges: List[Tuple[int, int]] = list(ranges)

    @classmethod
    def from_registry(cls, registry):
        panels = registry.panels()
        return cls(
            web_ports=[p.web_port for p in panels],
            ranges=[(p.range_start, p.range_end) for p in panels],
        )

    def allocate_web_port(self, requested: int) -> int:
        reason = check_web_port(requested, self.web_ports)
        if reason == PortAllocationError.DUPLICATE:
            raise PortAllocationError(reason, f"Port {requested} already used by another panel. Choose another.")
        if reason:
            raise PortAllocationError(reason, f"Port {requested} is outside {MIN_PORT}-{MAX_PORT}.")
        self.web_ports.append(requested)
        return requested

    def allocate_range(self, start: int, end: int) -> Tuple[int, int]:
        reason = check_range(start, end, self.ranges)
        if reason == PortAllocationError.INVALID_ORDER:
            raise PortAllocationError(reason, "Start must be less than end.")
        if reason == PortAllocationError.OVERLAP:
            raise PortAllocationError(
                reason, f"Port range {start}-{end} overlaps with an existing panel range.")
        if reason:
            raise PortAllocationError(reason, f"Port range {start}-{end} is outside {MIN_PORT}-{MAX_PORT}.")
        self.ranges.append((start, end))
        return start, end


def default_web_port(index: int) -> int:
    return 2020 + index - 1


def default_range(index: int) -> Tuple[int, int]:
    start = 10000 + (index - 1) * 100
    return start, start + 99
