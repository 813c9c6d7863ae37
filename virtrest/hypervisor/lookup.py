import logging
from typing import List

import libvirt

from virtrest.hypervisor.tracker import DomainHandle, ResourceTracker
from virtrest.exceptions import DomainLookupError, DomainNotFoundError

logger = logging.getLogger(__name__)


class DomainLookup:
    """활성 세션에서 도메인을 이름으로 찾거나 전체 도메인을 열거합니다."""

    def __init__(self, conn: libvirt.virConnect, tracker: ResourceTracker):
        self.conn = conn
        self.tracker = tracker

    def resolve(self, name: str) -> DomainHandle:
        """
        이름으로 도메인을 찾아 트래커에 등록된 핸들을 반환합니다.

        Raises:
            DomainNotFoundError: 하이퍼바이저가 VIR_ERR_NO_DOMAIN을 보고했을 때.
            DomainLookupError: 그 밖의 이유로 조회에 실패했을 때.
        """
        try:
            domain = self.conn.lookupByName(name)
        except libvirt.libvirtError as e:
            if e.get_error_code() == libvirt.VIR_ERR_NO_DOMAIN:
                raise DomainNotFoundError(f"Domain '{name}' not found.") from e
            raise DomainLookupError(f"Failed to look up domain '{name}': {e}") from e
        return self.tracker.register(DomainHandle(domain))

    def enumerate(self) -> List[DomainHandle]:
        """하이퍼바이저가 보고한 순서 그대로 모든 도메인의 핸들을 반환합니다."""
        try:
            domains = self.conn.listAllDomains(0)
        except libvirt.libvirtError as e:
            raise DomainLookupError(f"Failed to list domains: {e}") from e
        handles = [self.tracker.register(DomainHandle(domain)) for domain in domains]
        logger.debug("Enumerated %d domains", len(handles))
        return handles
