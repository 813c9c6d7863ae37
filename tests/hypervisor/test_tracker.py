# tests/hypervisor/test_tracker.py
import pytest
from unittest.mock import MagicMock

from virtrest.hypervisor.tracker import DomainHandle, ResourceTracker
from virtrest.exceptions import HandleReleasedError, TrackerDrainedError
from tests.fakes import FakeDomain


def make_handle(name="vm1"):
    return DomainHandle(FakeDomain(name, f"{name}-uuid"))

# ===================================================================
#  DomainHandle 테스트
# ===================================================================
class TestDomainHandle:
    def test_release_is_idempotent(self):
        """두 번째 release()는 오류 없이 아무 일도 하지 않아야 합니다."""
        handle = make_handle()

        assert handle.release() is True
        assert handle.release() is False
        assert handle.released

    def test_domain_access_after_release_fails(self):
        handle = make_handle()
        handle.release()

        with pytest.raises(HandleReleasedError):
            handle.domain

    def test_name_survives_release(self):
        handle = make_handle("web-01")
        handle.release()

        assert handle.name == "web-01"
        assert "released" in repr(handle)

# ===================================================================
#  ResourceTracker 테스트
# ===================================================================
class TestResourceTracker:
    def test_drain_releases_every_handle_once(self):
        # === Arrange ===
        tracker = ResourceTracker()
        handles = [make_handle(f"vm{i}") for i in range(3)]
        for handle in handles:
            tracker.register(handle)

        # === Act ===
        tracker.drain()

        # === Assert ===
        assert all(handle.released for handle in handles)
        assert tracker.registered_count == tracker.released_count == 3

    def test_register_same_handle_twice_is_tracked_once(self):
        tracker = ResourceTracker()
        handle = make_handle()

        tracker.register(handle)
        tracker.register(handle)

        assert tracker.registered_count == 1

    def test_drain_preserves_registration_order(self):
        tracker = ResourceTracker()
        released = []
        for name in ["b", "a", "c"]:
            handle = MagicMock(spec=DomainHandle)
            handle.release.side_effect = lambda name=name: released.append(name)
            tracker.register(handle)

        tracker.drain()

        assert released == ["b", "a", "c"]

    def test_release_failure_does_not_block_remaining_handles(self):
        """개별 해제 실패는 로그만 남기고 나머지 핸들은 계속 해제되어야 합니다."""
        # === Arrange ===
        tracker = ResourceTracker()
        broken = MagicMock(spec=DomainHandle)
        broken.release.side_effect = RuntimeError("boom")
        healthy = make_handle("healthy")
        tracker.register(broken)
        tracker.register(healthy)

        # === Act ===
        tracker.drain()

        # === Assert ===
        broken.release.assert_called_once()
        assert healthy.released
        assert tracker.released_count == 2

    def test_handle_released_early_is_not_an_error(self):
        tracker = ResourceTracker()
        handle = tracker.register(make_handle())
        handle.release()

        tracker.drain()

        assert tracker.released_count == 1

    def test_register_after_drain_is_programming_error(self):
        tracker = ResourceTracker()
        tracker.drain()

        with pytest.raises(TrackerDrainedError):
            tracker.register(make_handle())

    def test_drain_runs_only_once(self):
        tracker = ResourceTracker()
        tracker.drain()

        with pytest.raises(TrackerDrainedError):
            tracker.drain()

# ===================================================================
#  네이티브 해제 시점 테스트
# ===================================================================
class TestNativeFree:
    def test_release_frees_native_object_immediately(self):
        """release()는 GC를 기다리지 않고 그 자리에서 virDomainFree를 호출해야 합니다."""
        # === Arrange ===
        domain = FakeDomain("vm1", "uuid-1")
        handle = DomainHandle(domain)
        extra_reference = domain  # 다른 참조가 남아 있어도 해제되어야 함

        # === Act ===
        handle.release()
        handle.release()

        # === Assert ===
        assert extra_reference.free_count == 1
        assert extra_reference.events == ["virDomainFree:vm1"]

    def test_every_handle_is_freed_inside_drain(self):
        # === Arrange ===
        events = []
        domains = [FakeDomain(name, f"{name}-uuid", events=events) for name in ["vm1", "vm2"]]
        tracker = ResourceTracker()
        for domain in domains:
            tracker.register(DomainHandle(domain))

        # === Act ===
        assert events == []
        tracker.drain()

        # === Assert ===
        assert events == ["virDomainFree:vm1", "virDomainFree:vm2"]
        assert [domain.free_count for domain in domains] == [1, 1]

    def test_release_without_free_hook_is_not_an_error(self):
        domain = MagicMock()
        domain.name.return_value = "vm1"

        assert DomainHandle(domain).release() is True
