# tests/conftest.py
import libvirt
import pytest

from tests.fakes import FakeConnection, FakeDomain

# ===================================================================
#  Fixture 설정
# ===================================================================

@pytest.fixture
def fake_conn() -> FakeConnection:
    """running 상태의 vm1, shutoff 상태의 vm2를 가진 가짜 연결."""
    return FakeConnection([
        FakeDomain("vm1", "11111111-1111-1111-1111-111111111111", libvirt.VIR_DOMAIN_RUNNING),
        FakeDomain("vm2", "22222222-2222-2222-2222-222222222222", libvirt.VIR_DOMAIN_SHUTOFF),
    ])
