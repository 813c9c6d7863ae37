# virtrest/exceptions.py

# --- Base ---
class DomainError(Exception):
    """도메인 처리 중 발생하는 모든 오류의 기반 클래스"""
    code = "domain_error"

# --- Connection / Lookup Exceptions ---
class HypervisorConnectionError(DomainError, ConnectionError):
    """하이퍼바이저 세션을 열 수 없을 때"""
    code = "connection_failed"

class DomainNotFoundError(DomainError):
    """해당 이름의 도메인이 하이퍼바이저에 없을 때"""
    code = "domain_not_found"

class DomainLookupError(DomainError):
    """도메인 조회/열거가 not-found 이외의 이유로 실패했을 때"""
    code = "lookup_failed"

# --- Descriptor Exceptions ---
class DescriptorError(DomainError):
    """디스크립터 XML 조회 또는 파싱 실패 시"""
    code = "descriptor_failed"

class StateMappingError(DomainError):
    """알 수 없는 run-state 코드를 받았을 때"""
    code = "state_unmapped"

# --- Action Exceptions ---
class ActionError(DomainError):
    """하이퍼바이저가 상태 전이를 거부했을 때"""
    code = "action_failed"

# --- Programming Errors ---
class HandleReleasedError(RuntimeError):
    """이미 해제된 핸들을 사용하려고 할 때"""
    pass

class TrackerDrainedError(RuntimeError):
    """drain이 끝난 트래커에 핸들을 등록하려고 할 때"""
    pass
