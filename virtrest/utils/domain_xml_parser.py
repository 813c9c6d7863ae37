# virtrest/utils/domain_xml_parser.py
import xml.etree.ElementTree as ET
from typing import Optional

from virtrest.models import (
    Devices, Disk, DiskDriver, DiskSource, DiskTarget, DomainDefinition,
    FilterRef, FilterRefParameter, Interface, InterfaceSource, Os, OsType,
)
from virtrest.exceptions import DescriptorError


def _attr(element: Optional[ET.Element], name: str, default: Optional[str] = "") -> Optional[str]:
    if element is None:
        return default
    return element.get(name, default)


def _text(root: ET.Element, path: str) -> str:
    return (root.findtext(path) or "").strip()


def _int(root: ET.Element, path: str) -> int:
    raw = _text(root, path)
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError:
        raise DescriptorError(f"Invalid integer value for <{path}>: {raw!r}")


def _parse_disk(element: ET.Element) -> Disk:
    driver = element.find("driver")
    source = element.find("source")
    target = element.find("target")
    return Disk(
        type=element.get("type", ""),
        device=element.get("device", ""),
        driver=DiskDriver(name=_attr(driver, "name"), type=_attr(driver, "type")),
        source=DiskSource(file=_attr(source, "file", None), device=_attr(source, "dev", None)),
        target=DiskTarget(dev=_attr(target, "dev"), bus=_attr(target, "bus")),
    )


def _parse_interface(element: ET.Element) -> Interface:
    source = element.find("source")
    filterref = element.find("filterref")
    parameters = ()
    if filterref is not None:
        parameters = tuple(
            FilterRefParameter(name=parameter.get("name", ""), value=parameter.get("value", ""))
            for parameter in filterref.findall("parameter")
        )
    return Interface(
        type=element.get("type", ""),
        source=InterfaceSource(network=_attr(source, "network", None), bridge=_attr(source, "bridge", None)),
        mac_address=_attr(element.find("mac"), "address"),
        model_type=_attr(element.find("model"), "type", None),
        filterref=FilterRef(filter=_attr(filterref, "filter"), parameters=parameters),
    )


def _parse_os(root: ET.Element) -> Os:
    os_type = root.find("os/type")
    os_type_text = ""
    if os_type is not None:
        os_type_text = (os_type.text or "").strip()
    return Os(
        type=OsType(
            type=os_type_text,
            arch=_attr(os_type, "arch", None),
            machine=_attr(os_type, "machine", None),
        ),
        boot_dev=_attr(root.find("os/boot"), "dev", None),
    )


def parse_domain_xml(xml_desc: str) -> DomainDefinition:
    """
    libvirt 도메인 XML을 DomainDefinition으로 변환합니다.

    run-state는 XML에 포함되지 않으므로 구성 정보만 반환하며,
    DescriptorBuilder가 run-state를 조회해 DomainDescriptor를 완성합니다. 같은 XML을 넣으면 항상 같은 결과를 돌려줍니다.

    Args:
        xml_desc: virDomain.XMLDesc()가 반환한 XML 문자열.

    Returns:
        run-state가 없는 DomainDefinition.

    Raises:
        DescriptorError: XML 문법 오류, 루트가 <domain>이 아닌 경우, 숫자 필드가 잘못된 경우.
    """
    try:
        root = ET.fromstring(xml_desc)
    except ET.ParseError as e:
        raise DescriptorError(f"Failed to parse domain XML: {e}") from e

    if root.tag != "domain":
        raise DescriptorError(f"Unexpected root element <{root.tag}>, expected <domain>.")

    return DomainDefinition(
        type=root.get("type", ""),
        uuid=_text(root, "uuid"),
        name=_text(root, "name"),
        memory=_int(root, "memory"),
        vcpu=_int(root, "vcpu"),
        devices=Devices(
            disks=tuple(_parse_disk(disk) for disk in root.findall("devices/disk")),
            interfaces=tuple(_parse_interface(iface) for iface in root.findall("devices/interface")),
        ),
        os=_parse_os(root),
    )
