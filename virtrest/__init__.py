"""libvirt 도메인 라이프사이클을 HTTP로 노출하는 경량 API 서버."""

__version__ = "0.1.0"
