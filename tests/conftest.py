import pytest
from rich.console import Console

from exgen_py.utils.terminal import Notifier


@pytest.fixture
def notifier():
    return Notifier(Console(quiet=True))
