# virtrest/hypervisor/connection.py
import logging

import libvirt

from virtrest.exceptions import HypervisorConnectionError

logger = logging.getLogger(__name__)


class ConnectionScope:
    """하이퍼바이저 세션을 요청 단위로 관리하는 Context Manager"""

    def __init__(self, uri: str = "qemu:///system"):
        self.uri = uri
        self.conn = None
        self._released = False

    def acquire(self) -> libvirt.virConnect:
        """
        고정된 URI로 하이퍼바이저 세션을 엽니다.

        Raises:
            HypervisorConnectionError: 엔드포인트에 연결할 수 없거나 세션이 거부되었을 때.
        """
        try:
            conn = libvirt.open(self.uri)
        except libvirt.libvirtError as e:
            logger.error("Failed to open connection to %s: %s", self.uri, e)
            raise HypervisorConnectionError(f"Failed to open connection to the hypervisor: {e}") from e
        if conn is None:
            raise HypervisorConnectionError("Failed to open connection to the hypervisor.")
        self.conn = conn
        return conn

    def release(self):
        # 여러 번 호출되어도 세션은 한 번만 닫는다
        if self._released:
            return
        self._released = True
        conn, self.conn = self.conn, None
        if conn is None:
            return
        try:
            conn.close()
        except libvirt.libvirtError as e:
            logger.warning("Failed to close connection to %s: %s", self.uri, e)

    def __enter__(self):
        return self.acquire()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.release()
