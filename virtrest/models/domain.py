from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

__all__ = [
    "DiskDriver", "DiskSource", "DiskTarget", "Disk",
    "InterfaceSource", "FilterRefParameter", "FilterRef", "Interface",
    "Devices", "OsType", "Os", "DomainDefinition", "DomainDescriptor",
]


def _compact(**values) -> Dict[str, Any]:
    """값이 없는(None 또는 빈 문자열) 선택 필드를 제외한 딕셔너리를 만듭니다."""
    return {key: value for key, value in values.items() if value not in (None, "")}


@dataclass(frozen=True)
class DiskDriver:
    name: str = ""
    type: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "type": self.type}


@dataclass(frozen=True)
class DiskSource:
    file: Optional[str] = None
    device: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(file=self.file, device=self.device)


@dataclass(frozen=True)
class DiskTarget:
    dev: str = ""
    bus: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {"dev": self.dev, "bus": self.bus}


@dataclass(frozen=True)
class Disk:
    type: str = ""
    device: str = ""
    driver: DiskDriver = field(default_factory=DiskDriver)
    source: DiskSource = field(default_factory=DiskSource)
    target: DiskTarget = field(default_factory=DiskTarget)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "device": self.device,
            "driver": self.driver.to_dict(),
            "source": self.source.to_dict(),
            "target": self.target.to_dict(),
        }


@dataclass(frozen=True)
class InterfaceSource:
    network: Optional[str] = None
    bridge: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return _compact(network=self.network, bridge=self.bridge)


@dataclass(frozen=True)
class FilterRefParameter:
    name: str
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class FilterRef:
    filter: str = ""
    parameters: Tuple[FilterRefParameter, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filter": self.filter,
            "parameters": [parameter.to_dict() for parameter in self.parameters],
        }


@dataclass(frozen=True)
class Interface:
    type: str = ""
    source: InterfaceSource = field(default_factory=InterfaceSource)
    mac_address: str = ""
    model_type: Optional[str] = None
    filterref: FilterRef = field(default_factory=FilterRef)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "source": self.source.to_dict(),
            "mac": {"address": self.mac_address},
            "model": _compact(type=self.model_type),
            "filterref": self.filterref.to_dict(),
        }


@dataclass(frozen=True)
class Devices:
    disks: Tuple[Disk, ...] = ()
    interfaces: Tuple[Interface, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "disks": [disk.to_dict() for disk in self.disks],
            "interfaces": [interface.to_dict() for interface in self.interfaces],
        }


@dataclass(frozen=True)
class OsType:
    type: str = ""
    arch: Optional[str] = None
    machine: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, **_compact(arch=self.arch, machine=self.machine)}


@dataclass(frozen=True)
class Os:
    type: OsType = field(default_factory=OsType)
    boot_dev: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type.to_dict(), "boot": _compact(dev=self.boot_dev)}


@dataclass(frozen=True)
class DomainDefinition:
    """디스크립터 XML에서 읽은 도메인 구성. run-state는 포함하지 않습니다."""
    type: str
    uuid: str
    name: str
    memory: int
    vcpu: int
    devices: Devices
    os: Os

    def to_dict(self) -> Dict[str, Any]:
        # "vpcu" 키는 기존 API 클라이언트와의 호환을 위해 그대로 유지
        return {
            "type": self.type,
            "uuid": self.uuid,
            "name": self.name,
            "memory": self.memory,
            "vpcu": self.vcpu,
            "devices": self.devices.to_dict(),
            "os": self.os.to_dict(),
        }


@dataclass(frozen=True)
class DomainDescriptor(DomainDefinition):
    """
    특정 시점의 도메인 스냅샷.

    조회한 순간의 하이퍼바이저 상태를 반영하며, 이후 상태가 바뀌어도 갱신되지 않습니다.
    state는 DomainState의 라벨 문자열이며 생략할 수 없습니다.
    """
    state: str

    @classmethod
    def from_definition(cls, definition: DomainDefinition, state: str) -> "DomainDescriptor":
        values = {f.name: getattr(definition, f.name) for f in fields(DomainDefinition)}
        return cls(state=state, **values)

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "state": self.state}
