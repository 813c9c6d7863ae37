# virtrest/app.py
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIServer, make_server
import json
import logging
import re
import sys
import time

from virtrest.config import AppConfig, load_config
from virtrest.hypervisor import ConnectionScope, ResourceTracker
from virtrest.log_setup import setup_logger
from virtrest.services.action_dispatcher import DomainAction
from virtrest.services.domain_service import DomainService
from virtrest.exceptions import *

logger = logging.getLogger(__name__)

# --------------------------------------------------------------------------
## 요청 처리 유틸리티 함수
# --------------------------------------------------------------------------

def handle_exception(e):
    error_map = {
        DomainNotFoundError: "404 Not Found",
        ValueError: "400 Bad Request",
    }
    if isinstance(e, DomainError):
        logger.warning("Request failed [%s]: %s", e.code, e)
        status = error_map.get(type(e), "500 Internal Server Error")
        return status, json.dumps({"error": str(e)})
    if type(e) in error_map:
        return error_map[type(e)], json.dumps({"error": str(e)})

    # 예상하지 못한 오류는 내부 정보를 노출하지 않는다
    logger.exception("Unhandled error while processing request")
    return "500 Internal Server Error", json.dumps({"error": "Internal Server Error"})

def get_request_path(environ):
    """PEP 3333에 따라 latin-1 문자열로 전달된 PATH_INFO를 UTF-8로 다시 디코딩합니다."""
    raw_path = environ.get("PATH_INFO", "")
    try:
        return raw_path.encode("latin-1").decode("utf-8")
    except UnicodeEncodeError:
        # latin-1 범위를 벗어난 문자가 있으면 서버가 이미 디코딩해서 넘긴 경로
        return raw_path
    except UnicodeDecodeError:
        raise ValueError("Request path is not valid UTF-8.") from None

def _match_route(method, path):
    """요청에 맞는 핸들러와 경로 인자를 찾습니다. 경로만 일치하면 405를 알리기 위해 False를 반환합니다."""
    path_matched = False
    for route_method, pattern, route_handler in ROUTES:
        if match := re.match(pattern, path):
            if method == route_method:
                return route_handler, match.groups()
            path_matched = True
    return (False if path_matched else None), ()

# --------------------------------------------------------------------------
## WSGI 애플리케이션 (의존성 주입 및 라우팅)
# --------------------------------------------------------------------------

def create_application(config: AppConfig):
    def application(environ, start_response):
        started = time.monotonic()
        method = environ.get("REQUEST_METHOD", "")
        try:
            path = get_request_path(environ)
        except ValueError as e:
            status, response_body = handle_exception(e)
            start_response(status, [("Content-Type", "application/json")])
            return [response_body.encode("utf-8")]

        if method == "GET" and path == "/ping":
            start_response("200 OK", [("Content-Type", "text/plain; charset=utf-8")])
            return [b"pong"]

        handler, path_args = _match_route(method, path)

        if handler is None:
            status, response_body = "404 Not Found", json.dumps({"error": "Not Found"})
        elif handler is False:
            status, response_body = "405 Method Not Allowed", json.dumps({"error": "Method Not Allowed"})
        else:
            tracker = ResourceTracker()
            try:
                # 1. 요청 단위 하이퍼바이저 세션 (종료 시 무조건 close)
                with ConnectionScope(config.hypervisor_uri) as conn:
                    try:
                        # 2. 서비스 생성 후 environ을 통해 핸들러에 전달
                        environ["services"] = {"domain": DomainService(conn, tracker)}

                        # 3. 핸들러 실행 (응답 본문까지 완성)
                        status, response_body = handler(environ, *path_args)
                    finally:
                        # 4. 세션을 닫기 전에 획득한 핸들을 모두 해제
                        tracker.drain()
            except Exception as e:
                status, response_body = handle_exception(e)

        elapsed_ms = (time.monotonic() - started) * 1000
        logger.info("%s %s -> %s (%.1f ms)", method, path, status.split(" ", 1)[0], elapsed_ms)

        start_response(status, [("Content-Type", "application/json")])
        return [response_body.encode("utf-8")]

    return application

# --------------------------------------------------------------------------
## 핸들러 함수
# --------------------------------------------------------------------------

def list_domains_handler(environ, *args):
    domains = environ["services"]["domain"].list_domains()
    return "200 OK", json.dumps([domain.to_dict() for domain in domains])

def get_domain_handler(environ, domain_name):
    domain = environ["services"]["domain"].get_domain(domain_name)
    return "200 OK", json.dumps(domain.to_dict())

def domain_action_handler(environ, domain_name, action):
    domain = environ["services"]["domain"].perform_action(domain_name, DomainAction(action))
    return "200 OK", json.dumps(domain.to_dict())

_DOMAIN_NAME = r"([^/]+)"
_ACTIONS = "|".join(action.value for action in DomainAction)

ROUTES = [
    ("GET", r"^/domains/?$", list_domains_handler),
    ("GET", rf"^/domains/{_DOMAIN_NAME}$", get_domain_handler),
    ("POST", rf"^/domains/{_DOMAIN_NAME}/({_ACTIONS})$", domain_action_handler),
]

# --------------------------------------------------------------------------
## 서버 실행
# --------------------------------------------------------------------------

class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """요청마다 독립된 스레드에서 처리하는 WSGI 서버"""
    daemon_threads = True

def main():
    try:
        config = load_config()
    except ValueError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    setup_logger("virtrest", config.log_file, config.log_level_value)

    try:
        with make_server(config.host, config.port, create_application(config),
                         server_class=ThreadingWSGIServer) as httpd:
            logger.info("Serving virtrest on port %d (hypervisor: %s)...", config.port, config.hypervisor_uri)
            httpd.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    except Exception as e:
        logger.error("Error starting server: %s", e)
        sys.exit(1)

if __name__ == "__main__":
    main()
