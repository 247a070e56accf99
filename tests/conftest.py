import pytest

from neuralnetlib.logs import configure_logging


@pytest.fixture(autouse=True)
def _quiet_logging():
    configure_logging("WARNING")
