# tests/hypervisor/test_lookup.py
import libvirt
import pytest
from unittest.mock import MagicMock

from virtrest.hypervisor.lookup import DomainLookup
from virtrest.hypervisor.tracker import ResourceTracker
from virtrest.exceptions import DomainLookupError, DomainNotFoundError
from tests.fakes import FakeConnection, FakeDomain, make_libvirt_error


def test_resolve_returns_tracked_handle(fake_conn):
    tracker = ResourceTracker()

    handle = DomainLookup(fake_conn, tracker).resolve("vm2")

    assert handle.name == "vm2"
    assert tracker.registered_count == 1


def test_resolve_missing_domain_raises_not_found(fake_conn):
    with pytest.raises(DomainNotFoundError) as exc_info:
        DomainLookup(fake_conn, ResourceTracker()).resolve("does-not-exist")

    assert "does-not-exist" in str(exc_info.value)


def test_not_found_is_decided_by_error_code_not_message():
    """메시지에 'not found'가 있어도 에러 코드가 다르면 NotFound가 아니어야 합니다."""
    # === Arrange ===
    conn = MagicMock()
    conn.lookupByName.side_effect = make_libvirt_error("Domain not found", libvirt.VIR_ERR_INTERNAL_ERROR)

    # === Act & Assert ===
    with pytest.raises(DomainLookupError):
        DomainLookup(conn, ResourceTracker()).resolve("vm1")


def test_enumerate_keeps_hypervisor_order():
    conn = FakeConnection([FakeDomain("zeta", "u-1"), FakeDomain("alpha", "u-2"), FakeDomain("mid", "u-3")])
    tracker = ResourceTracker()

    handles = DomainLookup(conn, tracker).enumerate()

    assert [handle.name for handle in handles] == ["zeta", "alpha", "mid"]
    assert tracker.registered_count == 3


def test_enumerate_failure_raises_lookup_error():
    conn = MagicMock()
    conn.listAllDomains.side_effect = make_libvirt_error("internal error: client socket is closed")

    with pytest.raises(DomainLookupError):
        DomainLookup(conn, ResourceTracker()).enumerate()
