import os, sys
import pytest
from fastapi.testclient import TestClient

# Ensure the package is importable without an editable install
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

from flexsecure.config import LogConfig, SecureConfig, Settings  # noqa: E402
from flexsecure.main import create_app  # noqa: E402
from flexsecure.services.secure_codec import SecureCodec  # noqa: E402

ZERO_KEY = bytes(32)
RAW_KEY = "0123456789abcdef0123456789abcdef"


@pytest.fixture
def zero_key():
    return ZERO_KEY


@pytest.fixture
def codec():
    return SecureCodec(ZERO_KEY)


@pytest.fixture
def settings():
    return Settings(secure=SecureConfig(key=RAW_KEY), log=LogConfig(level="warn", format="console"))


@pytest.fixture(scope="function")
def app(settings):
    return create_app(settings)


@pytest.fixture(scope="function")
def client(app):
    # context manager runs the lifespan (container wiring)
    with TestClient(app) as c:
        yield c
