import pytest

from .helpers import PEM_KEY, StubConfig, mocks


@pytest.fixture(autouse=True)
def clear_recorded_resources():
    mocks.resources.clear()
    mocks.calls.clear()
    yield


@pytest.fixture()
def pem_key():
    return PEM_KEY


@pytest.fixture()
def aws_config():
    return StubConfig({"region": "ap-south-1"})
