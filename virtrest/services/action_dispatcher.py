import logging
from enum import Enum
from types import MappingProxyType

import libvirt

from virtrest.hypervisor.tracker import DomainHandle
from virtrest.models import DomainDescriptor
from virtrest.services.descriptor_builder import DescriptorBuilder
from virtrest.exceptions import ActionError

logger = logging.getLogger(__name__)


class DomainAction(str, Enum):
    CREATE = "create"
    DESTROY = "destroy"
    REBOOT = "reboot"
    RESUME = "resume"
    SUSPEND = "suspend"
    SHUTDOWN = "shutdown"


_TRANSITIONS = MappingProxyType({
    DomainAction.CREATE: lambda domain: domain.create(),
    DomainAction.DESTROY: lambda domain: domain.destroy(),
    DomainAction.REBOOT: lambda domain: domain.reboot(0),
    DomainAction.RESUME: lambda domain: domain.resume(),
    DomainAction.SUSPEND: lambda domain: domain.suspend(),
    DomainAction.SHUTDOWN: lambda domain: domain.shutdown(),
})

_missing = set(DomainAction) - set(_TRANSITIONS)
if _missing:
    raise RuntimeError(f"No transition registered for actions: {sorted(a.value for a in _missing)}")


class ActionDispatcher:
    """
    라이프사이클 액션을 libvirt 호출로 위임하고, 성공하면 새 스냅샷을 반환합니다.

    전이의 합법성은 하이퍼바이저가 판단하므로 여기서는 미리 검증하지 않습니다.
    """

    def __init__(self, builder: DescriptorBuilder):
        self.builder = builder

    def dispatch(self, handle: DomainHandle, action: DomainAction) -> DomainDescriptor:
        """
        Raises:
            ActionError: 하이퍼바이저가 전이를 거부했을 때. 원래 메시지를 그대로 담습니다.
        """
        action = DomainAction(action)
        transition = _TRANSITIONS[action]
        logger.info("Dispatching '%s' to domain '%s'", action.value, handle.name)

        try:
            result = transition(handle.domain)
        except libvirt.libvirtError as e:
            raise ActionError(str(e)) from e
        if result is not None and result < 0:
            raise ActionError(f"Failed to {action.value} domain '{handle.name}'.")

        return self.builder.build(handle)
