"""Data models for generated exercises and judge runs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


ACCEPTED_STATUS_ID = 3
# Judge0 status ids 1 (In Queue) and 2 (Processing)
PENDING_STATUS_MAX = 2


class Difficulty(str, Enum):
    EASY = "EASY"
    MEDIUM = "MEDIUM"
    HARD = "HARD"


class Visibility(str, Enum):
    DRAFT = "DRAFT"
    PRIVATE = "PRIVATE"
    PUBLIC = "PUBLIC"


@dataclass
class Topic:
    """Represents a topic from the topic directory."""

    id: str
    name: str


@dataclass
class TestCase:
    """Represents one input/expected-output pair of a draft."""

    input: str = ""
    output: str = ""
    note: Optional[str] = ""
    is_public: bool = True

    @classmethod
    def from_payload(cls, data: dict) -> "TestCase":
        """Build from wire JSON. Any server-assigned `id` is dropped."""
        return cls(
            input=data.get("input") or "",
            output=data.get("output") or "",
            note=data.get("note"),
            is_public=bool(data.get("isPublic", True)),
        )

    def to_payload(self) -> dict:
        payload = {
            "input": self.input,
            "output": self.output,
            "isPublic": self.is_public,
        }
        if self.note is not None:
            payload["note"] = self.note
        return payload


@dataclass
class Draft:
    """
    An AI-generated exercise that has not been persisted yet.
    Fields are left permissive; the platform validates on commit.
    """

    code: str = ""
    title: str = ""
    description: str = ""
    difficulty: str = Difficulty.EASY.value
    visibility: str = ""
    time_limit: float = 1
    memory: int = 256000
    prompt: Optional[str] = None
    solution: Optional[str] = None
    solution_language: Optional[str] = None
    topic_ids: List[str] = field(default_factory=list)
    test_cases: List[TestCase] = field(default_factory=list)

    @classmethod
    def from_payload(cls, data: dict) -> "Draft":
        return cls(
            code=data.get("code") or "",
            title=data.get("title") or "",
            description=data.get("description") or "",
            difficulty=data.get("difficulty") or Difficulty.EASY.value,
            visibility=data.get("visibility") or "",
            time_limit=data.get("timeLimit") or 1,
            memory=data.get("memory") or 256000,
            prompt=data.get("prompt"),
            solution=data.get("solution"),
            solution_language=data.get("solutionLanguage"),
            topic_ids=list(data.get("topicIds") or []),
            test_cases=[TestCase.from_payload(tc) for tc in data.get("testCases") or []],
        )

    def to_payload(self) -> dict:
        """Serialize to wire JSON as stored in the local session file."""
        return {
            "code": self.code,
            "title": self.title,
            "description": self.description,
            "difficulty": self.difficulty,
            "visibility": self.visibility,
            "timeLimit": self.time_limit,
            "memory": self.memory,
            "prompt": self.prompt,
            "solution": self.solution,
            "solutionLanguage": self.solution_language,
            "topicIds": list(self.topic_ids),
            "testCases": [tc.to_payload() for tc in self.test_cases],
        }


@dataclass
class GenerationRequest:
    """Parameters for one call to the exercise-generation endpoint."""

    topic: str = ""
    levels: List[str] = field(default_factory=list)
    number_of_exercise: int = 2
    number_of_public_test_cases: int = 2
    number_of_private_test_cases: int = 2
    solution_language: str = "Java"
    visibility: str = Visibility.DRAFT.value
    prompt: Optional[str] = None

    @property
    def total_test_cases_per_exercise(self) -> int:
        return self.number_of_public_test_cases + self.number_of_private_test_cases

    @classmethod
    def from_payload(cls, data: dict) -> "GenerationRequest":
        return cls(
            topic=data.get("topic") or "",
            levels=list(data.get("level") or []),
            number_of_exercise=data.get("numberOfExercise", 2),
            number_of_public_test_cases=data.get("numberOfPublicTestCases", 2),
            number_of_private_test_cases=data.get("numberOfPrivateTestCases", 2),
            solution_language=data.get("solutionLanguage") or "Java",
            visibility=data.get("visibility") or Visibility.DRAFT.value,
            prompt=data.get("prompt"),
        )

    def to_payload(self) -> dict:
        payload = {
            "topic": self.topic,
            "level": list(self.levels),
            "numberOfExercise": self.number_of_exercise,
            "numberOfPublicTestCases": self.number_of_public_test_cases,
            "numberOfPrivateTestCases": self.number_of_private_test_cases,
            "totalTestCasesPerExercise": self.total_test_cases_per_exercise,
            "solutionLanguage": self.solution_language,
            "visibility": self.visibility,
        }
        # Blank prompts are not sent at all
        if self.prompt and self.prompt.strip():
            payload["prompt"] = self.prompt.strip()
        return payload


@dataclass
class RunResult:
    """Outcome of running a draft's solution against one test case."""

    index: int
    input: str
    expected: str
    actual_output: str = ""
    stderr: str = ""
    status_id: int = 0
    status_description: str = ""
    elapsed_time: Optional[str] = None
    token: Optional[str] = None

    @property
    def is_passed(self) -> bool:
        return (
            self.status_id == ACCEPTED_STATUS_ID
            and self.actual_output.strip() == self.expected.strip()
        )

    @property
    def is_pending(self) -> bool:
        return self.status_id <= PENDING_STATUS_MAX


@dataclass
class CommitResult:
    """Outcome of committing one or more drafts."""

    success_count: int = 0
    error: Optional[str] = None
    failed_index: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.error is None
