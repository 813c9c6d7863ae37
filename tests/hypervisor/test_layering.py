# tests/hypervisor/test_layering.py
import ast
from pathlib import Path

import pytest

import virtrest.hypervisor

HYPERVISOR_DIR = Path(virtrest.hypervisor.__file__).resolve().parent


def imported_modules(path):
    tree = ast.parse(path.read_text(encoding="utf-8"))
    for node in ast.walk(tree):
        if isinstance(node, ast.ImportFrom) and node.module:
            yield node.module
        elif isinstance(node, ast.Import):
            yield from (alias.name for alias in node.names)


@pytest.mark.parametrize("path", sorted(HYPERVISOR_DIR.glob("*.py")), ids=lambda p: p.name)
def test_hypervisor_layer_does_not_import_services(path):
    """하이퍼바이저 계층은 상위 services 패키지에 의존하지 않아야 합니다."""
    assert not [module for module in imported_modules(path) if module.startswith("virtrest.services")]
