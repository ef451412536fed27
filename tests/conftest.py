# tests/conftest.py
import os
import sys

import pytest

# path to the repo root (one level up from tests/)
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# ensure repo root is importable so `import deployhook.*` works
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from deployhook.app import create_app
from deployhook.config import DeployConfig
from deployhook.signature import compute_signature

SECRET = "s3cr3t"
MAIN_PUSH = b'{"ref":"refs/heads/main"}'


def py_cmd(code):
    """argv that runs a tiny python snippet, so tests don't depend on a shell."""
    return [sys.executable, "-c", code]


@pytest.fixture
def make_app():
    def _make(command=None, secret=SECRET, **kw):
        cfg = DeployConfig(secret=secret, command=command or py_cmd("print('deployed')"), **kw)
        return create_app(cfg)
    return _make


@pytest.fixture
def post_webhook():
    def _post(app, body=MAIN_PUSH, sig=None, secret=SECRET):
        headers = {}
        if sig is None:
            sig = compute_signature(secret, body)
        if sig:
            headers["X-Hub-Signature-256"] = sig
        return app.test_client().post(
            "/webhook", data=body, headers=headers, content_type="application/json"
        )
    return _post
