import logging
from typing import List

import libvirt

from virtrest.exceptions import HandleReleasedError, TrackerDrainedError

logger = logging.getLogger(__name__)


def _free_native(domain):
    """
    virDomainFree를 즉시 호출합니다.

    libvirt-python에는 공개된 free 메서드가 없고, virDomain.__del__이 virDomainFree를 호출한 뒤
    _o를 None으로 비웁니다. 따라서 직접 호출해도 이후 GC가 부르는 __del__은 아무 일도 하지 않습니다.
    """
    free = getattr(domain, "__del__", None)
    if free is not None:
        free()


class DomainHandle:
    """
    libvirt 도메인 객체(virDomain)를 감싸는 네이티브 핸들.

    핸들을 획득한 쪽이 명시적으로 release()를 호출할 때까지 소유합니다.
    release()는 멱등적이며, 해제된 핸들을 통한 호출은 HandleReleasedError를 발생시킵니다.
    """

    def __init__(self, domain: libvirt.virDomain):
        self._domain = domain
        self._name = domain.name()

    @property
    def name(self) -> str:
        return self._name

    @property
    def released(self) -> bool:
        return self._domain is None

    @property
    def domain(self) -> libvirt.virDomain:
        if self._domain is None:
            raise HandleReleasedError(f"Handle for domain '{self._name}' has already been released.")
        return self._domain

    def release(self) -> bool:
        """
        네이티브 참조를 해제합니다. 이미 해제된 경우 아무 일도 하지 않습니다.

        Returns:
            이번 호출에서 실제로 해제했으면 True, 이미 해제되어 있었으면 False.
        """
        if self._domain is None:
            return False
        # 참조를 먼저 끊어 두면 해제 도중 예외가 나도 재해제되지 않는다
        domain, self._domain = self._domain, None
        logger.debug("Freeing: %s", self._name)
        _free_native(domain)
        return True

    def __repr__(self):
        state = "released" if self.released else "open"
        return f"<DomainHandle {self._name!r} ({state})>"


class ResourceTracker:
    """
    요청 단위로 획득한 핸들을 등록해 두었다가 요청 종료 시 한 번에 해제합니다.

    등록 순서대로 해제하며, 개별 해제 실패는 로그만 남기고 나머지 핸들 해제를 계속합니다.
    drain()은 요청당 정확히 한 번 실행됩니다.
    """

    def __init__(self):
        self._handles: List[DomainHandle] = []
        self._drained = False
        self.released_count = 0

    @property
    def registered_count(self) -> int:
        return len(self._handles)

    @property
    def drained(self) -> bool:
        return self._drained

    def register(self, handle: DomainHandle) -> DomainHandle:
        if self._drained:
            raise TrackerDrainedError(f"Cannot register {handle!r}: tracker already drained.")
        if any(tracked is handle for tracked in self._handles):
            return handle
        self._handles.append(handle)
        return handle

    def drain(self):
        if self._drained:
            raise TrackerDrainedError("Tracker has already been drained.")
        self._drained = True

        for handle in self._handles:
            try:
                handle.release()
            except Exception:
                logger.warning("Failed to release %r; continuing with remaining handles.", handle, exc_info=True)
            finally:
                self.released_count += 1
