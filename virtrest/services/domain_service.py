from typing import List

import libvirt

from virtrest.hypervisor.lookup import DomainLookup
from virtrest.hypervisor.tracker import ResourceTracker
from virtrest.models import DomainDescriptor
from virtrest.services.action_dispatcher import ActionDispatcher, DomainAction
from virtrest.services.descriptor_builder import DescriptorBuilder


class DomainService:
    """한 요청 안에서 도메인 조회와 라이프사이클 제어를 조합하는 서비스."""

    def __init__(self, conn: libvirt.virConnect, tracker: ResourceTracker):
        """
        DomainService를 초기화합니다.

        Args:
            conn: 이 요청이 단독으로 소유하는 하이퍼바이저 세션.
            tracker: 이 요청에서 획득한 핸들을 해제할 리소스 트래커.
        """
        self.lookup = DomainLookup(conn, tracker)
        self.builder = DescriptorBuilder(tracker)
        self.dispatcher = ActionDispatcher(self.builder)

    def list_domains(self) -> List[DomainDescriptor]:
        """
        하이퍼바이저에 보이는 모든 도메인의 스냅샷을 보고된 순서대로 반환합니다.

        하나라도 실패하면 부분 목록 없이 예외가 전파됩니다.
        """
        return [self.builder.build(handle) for handle in self.lookup.enumerate()]

    def get_domain(self, name: str) -> DomainDescriptor:
        """
        이름으로 도메인을 찾아 스냅샷을 반환합니다.

        Raises:
            DomainNotFoundError: 해당 이름의 도메인이 없을 때.
        """
        return self.builder.build(self.lookup.resolve(name))

    def perform_action(self, name: str, action: DomainAction) -> DomainDescriptor:
        """
        도메인에 라이프사이클 액션을 수행하고, 수행 후의 스냅샷을 반환합니다.

        Args:
            name: 대상 도메인의 이름.
            action: 수행할 액션 (create, destroy, reboot, resume, suspend, shutdown).

        Returns:
            액션 수행 직후 다시 조회한 DomainDescriptor.

        Raises:
            DomainNotFoundError: 해당 이름의 도메인이 없을 때.
            ActionError: 하이퍼바이저가 전이를 거부했을 때.
        """
        return self.dispatcher.dispatch(self.lookup.resolve(name), action)
