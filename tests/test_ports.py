import pytest

from xuimanager.errors import PortAllocationError
from xuimanager.ports import (
    PortAllocator,
    check_range,
    check_web_port,
    default_range,
    default_web_port,
    ranges_overlap,
)
from xuimanager.registry import Panel, PanelRegistry


def test_closed_interval_overlap():
    assert ranges_overlap(100, 200, 200, 300)
    assert ranges_overlap(100, 200, 150, 160)
    assert not ranges_overlap(100, 200, 201, 300)


def test_shared_endpoint_rejected():
    alloc = PortAllocator(ranges=[(100, 200)])
    with pytest.raises(PortAllocationError) as exc:
        alloc.allocate_range(200, 300)
    assert exc.value.reason == PortAllocationError.OVERLAP
    assert "overlaps" in str(exc.value)
    assert alloc.ranges == [(100, 200)]


@pytest.mark.parametrize("start,end", [(500, 500), (600, 500)])
def test_invalid_order_does_not_mutate(start, end):
    alloc = PortAllocator()
    with pytest.raises(PortAllocationError) as exc:
        alloc.allocate_range(start, end)
    assert exc.value.reason == PortAllocationError.INVALID_ORDER
    assert str(exc.value) == "Start must be less than end."
    assert alloc.ranges == []


def test_duplicate_web_port():
    alloc = PortAllocator(web_ports=[2020])
    with pytest.raises(PortAllocationError) as exc:
        alloc.allocate_web_port(2020)
    assert exc.value.reason == PortAllocationError.DUPLICATE
    assert alloc.web_ports == [2020]
    assert alloc.allocate_web_port(2021) == 2021
    assert alloc.web_ports == [2020, 2021]


def test_out_of_range_ports():
    assert check_web_port(0, []) == PortAllocationError.OUT_OF_RANGE
    assert check_range(60000, 70000, []) == PortAllocationError.OUT_OF_RANGE
    assert check_range(10000, 10099, [(20000, 20099)]) is None


def test_from_registry(tmp_path):
    reg = PanelRegistry(str(tmp_path / "panels.json"))
    reg.add(Panel(1, 2020, 10000, 10099))
    reg.add(Panel(2, 2021, 10100, 10199))
    alloc = PortAllocator.from_registry(reg)
    assert alloc.web_ports == [2020, 2021]
    with pytest.raises(PortAllocationError):
        alloc.allocate_range(10199, 10300)


def test_defaults_do_not_collide():
    assert default_web_port(1) == 2020
    assert default_range(1) == (10000, 10099)
    assert default_range(2) == (10100, 10199)
    alloc = PortAllocator()
    for i in range(1, 6):
        alloc.allocate_web_port(default_web_port(i))
        alloc.allocate_range(*default_range(i))
