import logging
from enum import Enum
from types import MappingProxyType

import libvirt

from virtrest.hypervisor.tracker import DomainHandle, ResourceTracker
from virtrest.models import DomainDescriptor
from virtrest.utils.domain_xml_parser import parse_domain_xml
from virtrest.exceptions import DescriptorError, StateMappingError

logger = logging.getLogger(__name__)


class DomainState(str, Enum):
    NOSTATE = "nostate"
    RUNNING = "running"
    BLOCKED = "blocked"
    PAUSED = "paused"
    SHUTDOWN = "shutdown"
    CRASHED = "crashed"
    SUSPENDED = "suspended"
    SHUTOFF = "shutoff"


# run-state 코드 -> 라벨. 모듈 로드 시 한 번 만들어지고 이후 변경되지 않는다.
STATE_LABELS = MappingProxyType({
    libvirt.VIR_DOMAIN_NOSTATE: DomainState.NOSTATE,
    libvirt.VIR_DOMAIN_RUNNING: DomainState.RUNNING,
    libvirt.VIR_DOMAIN_BLOCKED: DomainState.BLOCKED,
    libvirt.VIR_DOMAIN_PAUSED: DomainState.PAUSED,
    libvirt.VIR_DOMAIN_SHUTDOWN: DomainState.SHUTDOWN,
    libvirt.VIR_DOMAIN_SHUTOFF: DomainState.SHUTOFF,
    libvirt.VIR_DOMAIN_CRASHED: DomainState.CRASHED,
    libvirt.VIR_DOMAIN_PMSUSPENDED: DomainState.SUSPENDED,
})


def map_state(state_code: int) -> DomainState:
    """
    run-state 코드를 DomainState로 변환합니다.

    Raises:
        StateMappingError: 알려진 코드(0~7)가 아닐 때. 기본값으로 대체하지 않습니다.
    """
    try:
        return STATE_LABELS[state_code]
    except (KeyError, TypeError):
        raise StateMappingError(f"Unknown domain state code: {state_code!r}") from None


class DescriptorBuilder:
    """네이티브 핸들로부터 도메인의 시점 스냅샷(DomainDescriptor)을 만듭니다."""

    def __init__(self, tracker: ResourceTracker):
        self.tracker = tracker

    def build(self, handle: DomainHandle) -> DomainDescriptor:
        """
        디스크립터 XML과 run-state를 조회해 DomainDescriptor를 생성합니다.

        핸들은 조회 전에 트래커에 등록되므로, 중간에 실패하더라도 요청 종료 시 해제됩니다.
        하이퍼바이저 호출은 재시도하지 않습니다.

        Args:
            handle: 스냅샷을 만들 도메인의 핸들.

        Returns:
            state까지 채워진 DomainDescriptor.

        Raises:
            DescriptorError: XML 조회/파싱 또는 run-state 조회에 실패했을 때.
            StateMappingError: run-state 코드가 알려진 값이 아닐 때.
        """
        self.tracker.register(handle)
        domain = handle.domain

        try:
            xml_desc = domain.XMLDesc(0)
        except libvirt.libvirtError as e:
            raise DescriptorError(f"Failed to fetch XML for domain '{handle.name}': {e}") from e

        definition = parse_domain_xml(xml_desc)

        try:
            state_code = domain.info()[0]
        except libvirt.libvirtError as e:
            raise DescriptorError(f"Failed to fetch state for domain '{handle.name}': {e}") from e

        state = map_state(state_code)
        return DomainDescriptor.from_definition(definition, state.value)
