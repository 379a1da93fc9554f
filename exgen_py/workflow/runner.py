"""Trial runs of a draft's solution on the Judge0 sandbox."""

import time
from typing import Callable, List, Optional

import requests

from ..client.judge import Judge0Client, language_id_for
from ..client.models import PENDING_STATUS_MAX, Draft, RunResult
from ..errors import RunError, RunInProgressError, ValidationError


POLL_INTERVAL = 0.8
MAX_POLL_ATTEMPTS = 10
DEFAULT_MEMORY_LIMIT = 256000


def build_submissions(draft: Draft, language_id: int) -> List[dict]:
    """One Judge0 submission per test case of the draft."""
    return [
        {
            "language_id": language_id,
            "source_code": draft.solution or "",
            "stdin": test_case.input or "",
            "expected_output": test_case.output or "",
            "cpu_time_limit": max(draft.time_limit or 1, 1),
            "memory_limit": draft.memory or DEFAULT_MEMORY_LIMIT,
        }
        for test_case in draft.test_cases
    ]


def is_pending(item: dict) -> bool:
    status = item.get("status") or {}
    return (status.get("id") or 0) <= PENDING_STATUS_MAX


def classify(draft: Draft, judge_results: List[dict]) -> List[RunResult]:
    """Pair each judge result with the test case at the same position."""
    results = []
    for index, item in enumerate(judge_results):
        test_case = draft.test_cases[index] if index < len(draft.test_cases) else None
        status = item.get("status") or {}
        results.append(
            RunResult(
                index=index,
                input=test_case.input if test_case else "",
                expected=test_case.output if test_case else "",
                actual_output=item.get("stdout") or "",
                stderr=item.get("stderr") or "",
                status_id=status.get("id") or 0,
                status_description=status.get("description") or "",
                elapsed_time=item.get("time"),
                token=item.get("token"),
            )
        )
    return results


class JudgeRunner:
    """
    Runs a draft's solution against all of its test cases.

    Submissions go out as a single batch. The batch status is then polled
    with all tokens together until nothing is pending or the attempt budget
    runs out, in which case the last snapshot is used as is.
    """

    def __init__(
        self,
        judge: Judge0Client,
        sleep: Callable[[float], None] = time.sleep,
        interval: float = POLL_INTERVAL,
        max_attempts: int = MAX_POLL_ATTEMPTS,
        on_debug: Optional[Callable[[str], None]] = None,
    ):
        self.judge = judge
        self.sleep = sleep
        self.interval = interval
        self.max_attempts = max_attempts
        self.busy = False
        self._debug = on_debug or (lambda text: None)

    def check(self, draft: Optional[Draft], fallback_language: Optional[str] = None) -> int:
        """
        Validate a draft before running it and return its language id.
        `fallback_language` applies when the draft names no language.
        """
        if draft is None:
            raise ValidationError("Select an exercise before running it")
        if not draft.solution or not draft.solution.strip():
            raise ValidationError("This exercise has no solution to run")
        if not draft.test_cases:
            raise ValidationError("This exercise has no test cases")

        language = draft.solution_language or fallback_language
        language_id = language_id_for(language)
        if language_id is None:
            raise ValidationError(
                f"Solution language '{language}' is not supported by Judge0"
            )
        return language_id

    def run(
        self, draft: Optional[Draft], fallback_language: Optional[str] = None
    ) -> List[RunResult]:
        if self.busy:
            raise RunInProgressError("A run is already in progress")

        language_id = self.check(draft, fallback_language)

        self.busy = True
        try:
            tokens = self._submit(build_submissions(draft, language_id))
            return classify(draft, self._poll(tokens))
        finally:
            self.busy = False

    def _submit(self, submissions: List[dict]) -> List[str]:
        try:
            tokens = self.judge.submit_batch(submissions)
        except (requests.RequestException, ValueError) as e:
            raise RunError("Could not submit to Judge0") from e

        if not tokens:
            raise RunError("No token received from Judge0")

        self._debug(f"Submitted {len(submissions)} test cases, tokens: {tokens}")
        return tokens

    def _poll(self, tokens: List[str]) -> List[dict]:
        latest: List[dict] = []
        for attempt in range(1, self.max_attempts + 1):
            try:
                latest = self.judge.get_batch_status(tokens)
            except (requests.RequestException, ValueError) as e:
                raise RunError("Could not fetch results from Judge0") from e

            pending = sum(1 for item in latest if is_pending(item))
            self._debug(f"Poll #{attempt}: {pending} pending")
            if not pending:
                break
            if attempt < self.max_attempts:
                self.sleep(self.interval)

        return latest
