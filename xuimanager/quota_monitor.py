# -*- coding: utf-8 -*-
"""
Traffic metering for the panels.

docker stats only exposes NetIO counters since the container last started.
Each check turns those lifetime counters into a running total per panel:

    first sample (LAST_BYTES == 0)  -> store baseline, add nothing
    counter grew or stayed          -> USED_BYTES += total - LAST_BYTES
    counter went backwards          -> container restarted, re-baseline only

Quota is enforced only after a sample that added usage.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from xuimanager.lock_panel import stop_panel
from xuimanager.meta_store import Field
from xuimanager.units import GB, bytes_to_gb, parse_quantity

log = logging.getLogger("xuimanager.quota_monitor")

SEPARATOR = "-----------------------------------------"


class Outcome(enum.Enum):
    SKIPPED = "skipped"
    BASELINED = "baselined"
    RESET = "reset"
    ACCUMULATED = "accumulated"
    ENFORCED = "enforced"
    ENFORCE_FAILED = "enforce_failed"


@dataclass
class Sample:
    net_io: str
    rx_bytes: int
    tx_bytes: int

    @property
    def total(self):
        return self.rx_bytes + self.tx_bytes


@dataclass
class SampleResult:
    index: int
    outcome: Outcome
    used_bytes: int = 0
    delta: int = 0
    sample: Optional[Sample] = None


def parse_net_io(net_io: str) -> Optional[Sample]:
    if not net_io or "/" not in net_io:
        return None
    rx_str, tx_str = net_io.split("/", 1)
    rx, tx = parse_quantity(rx_str), parse_quantity(tx_str)
    if rx is None or tx is None:
        return None
    return Sample(net_io=net_io.strip(), rx_bytes=rx, tx_bytes=tx)


def sample_counters(runtime, container: str, check_running=True) -> Optional[Sample]:
    """Current lifetime rx+tx of a running container, None if unavailable."""
    if check_running and not runtime.is_running(container):
        return None
    net_io = runtime.net_io(container)
    if not net_io:
        return None
    sample = parse_net_io(net_io)
    if sample is None:
        log.debug("%s: unparsable NetIO %r", container, net_io)
    return sample


def over_quota(used_bytes: int, quota_gb: int) -> bool:
    return quota_gb != 0 and used_bytes >= quota_gb * GB


def process_panel(panel, store, runtime, settings, verbose=False) -> SampleResult:
    idx = panel.index
    quota_gb = store.get_int(idx, Field.QUOTA_GB)
    used_bytes = store.get_int(idx, Field.USED_BYTES)
    last_bytes = store.get_int(idx, Field.LAST_BYTES)

    if not runtime.is_running(panel.container):
        if verbose:
            print(f"⚠️ Panel #{idx} ({panel.container}) is not running, skipping.")
        return SampleResult(idx, Outcome.SKIPPED, used_bytes)

    sample = sample_counters(runtime, panel.container, check_running=False)
    if sample is None:
        if verbose:
            print(f"⚠️ Panel #{idx}: unable to read NetIO.")
        return SampleResult(idx, Outcome.SKIPPED, used_bytes)

    total = sample.total

    if last_bytes == 0:
        store.set(idx, Field.LAST_BYTES, total)
        store.set(idx, Field.USED_BYTES, used_bytes)
        if verbose:
            print(f"🟢 Panel #{idx}: first run, baseline set. Total={total} bytes.")
        return SampleResult(idx, Outcome.BASELINED, used_bytes, 0, sample)

    if total < last_bytes:
        store.set(idx, Field.LAST_BYTES, total)
        store.set(idx, Field.USED_BYTES, used_bytes)
        log.info("panel #%s counters went from %s to %s, re-baselined", idx, last_bytes, total)
        if verbose:
            print(f"🔄 Panel #{idx}: docker counters reset, updating baseline only.")
        return SampleResult(idx, Outcome.RESET, used_bytes, 0, sample)

    delta = total - last_bytes
    used_bytes += delta
    store.set(idx, Field.LAST_BYTES, total)
    store.set_used(idx, used_bytes)
    used_gb = bytes_to_gb(used_bytes)

    if verbose:
        print(f"📊 Panel #{idx} ({panel.container}):")
        print(f"  • NetIO now : {sample.net_io}")
        print(f"  • Delta     : {delta} bytes (~{delta / GB:.3f} GB)")
        print(f"  • Used total: {used_bytes} bytes (~{used_gb:.2f} GB)")

    if over_quota(used_bytes, quota_gb):
        ok = stop_panel(panel, runtime, settings, used_gb, quota_gb)
        outcome = Outcome.ENFORCED if ok else Outcome.ENFORCE_FAILED
        return SampleResult(idx, outcome, used_bytes, delta, sample)

    if verbose:
        if quota_gb:
            print(f"  • Quota: {quota_gb} GB (still under limit) ✅")
        else:
            print("  • Quota: ♾️  unlimited")
    return SampleResult(idx, Outcome.ACCUMULATED, used_bytes, delta, sample)


def run_sweep(registry, store, runtime, settings, verbose=False) -> List[SampleResult]:
    """One pass over every panel, in index order."""
    panels = registry.load().panels()
    if not panels:
        if verbose:
            print("No panels defined.")
        return []

    store.load()
    if verbose:
        print(f"Running quota check for {len(panels)} panel(s)...")
    results = []
    for panel in panels:
        results.append(process_panel(panel, store, runtime, settings, verbose=verbose))
        if verbose:
            print(SEPARATOR)
    return results
