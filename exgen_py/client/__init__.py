"""Client module for platform and Judge0 interaction."""

from .client import PlatformClient
from .judge import Judge0Client, LANGUAGE_ID_MAP, language_id_for
from .models import (
    CommitResult,
    Difficulty,
    Draft,
    GenerationRequest,
    RunResult,
    TestCase,
    Topic,
    Visibility,
)

__all__ = [
    "PlatformClient",
    "Judge0Client",
    "LANGUAGE_ID_MAP",
    "language_id_for",
    "CommitResult",
    "Difficulty",
    "Draft",
    "GenerationRequest",
    "RunResult",
    "TestCase",
    "Topic",
    "Visibility",
]
