"""The configure -> preview -> commit workflow for AI-generated exercises."""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional

from ..client.client import PlatformClient
from ..client.models import CommitResult, Draft, GenerationRequest, RunResult, Visibility
from ..config.local_config import LocalConfig
from ..errors import BusyError, RunError, TransportError, ValidationError
from ..utils.terminal import Notifier
from .editor import DraftEditor
from .runner import JudgeRunner


MAX_EXERCISES = 10


class Step(IntEnum):
    CONFIGURE = 0
    PREVIEW = 1


@dataclass
class DeletedDraft:
    """A removed draft kept around so the deletion can be undone."""

    draft: Draft
    original_index: int


@dataclass
class RunState:
    """Run results of the active draft. Not cached per draft."""

    loading: bool = False
    has_run: bool = False
    results: List[RunResult] = field(default_factory=list)
    error: str = ""
    epoch: int = 0


def validate_request(request: GenerationRequest) -> None:
    """Raise ValidationError for the first invalid generation parameter."""
    if not request.topic or not request.topic.strip():
        raise ValidationError("Please choose a topic!")
    if not request.levels:
        raise ValidationError("Please choose at least one difficulty!")
    if not 1 <= request.number_of_exercise <= MAX_EXERCISES:
        raise ValidationError(f"Number of exercises must be between 1 and {MAX_EXERCISES}!")
    if request.number_of_public_test_cases < 1:
        raise ValidationError("Number of public test cases must be greater than 0!")
    if request.number_of_private_test_cases < 1:
        raise ValidationError("Number of private test cases must be greater than 0!")
    if not request.solution_language:
        raise ValidationError("Please choose a solution language!")
    if not request.visibility:
        raise ValidationError("Please choose a visibility!")


class GenerationWorkflow:
    """
    Owns the generated drafts, the active-draft cursor and the run state.

    All state lives on the instance; one workflow per generation session.
    """

    def __init__(
        self,
        client: PlatformClient,
        notifier: Optional[Notifier] = None,
        request: Optional[GenerationRequest] = None,
    ):
        self.client = client
        self.notifier = notifier or Notifier()
        self.request = request or GenerationRequest()
        self.step = Step.CONFIGURE
        self.drafts: List[Draft] = []
        self.active_index = 0
        self.editing_index: Optional[int] = None
        self.deleted: List[DeletedDraft] = []
        self.run_state = RunState()
        self.generating = False
        self.committing = False

    @classmethod
    def restore(
        cls,
        session: LocalConfig,
        client: PlatformClient,
        notifier: Optional[Notifier] = None,
    ) -> "GenerationWorkflow":
        """Rebuild a workflow from a saved session."""
        workflow = cls(client, notifier, request=session.request)
        workflow.drafts = list(session.drafts)
        workflow.step = Step.PREVIEW if session.step and workflow.drafts else Step.CONFIGURE
        workflow._clamp_active(session.active_index)
        return workflow

    def snapshot(self) -> LocalConfig:
        """Capture the state worth keeping between CLI invocations."""
        return LocalConfig(
            step=int(self.step),
            active_index=self.active_index,
            request=self.request,
            drafts=list(self.drafts),
        )

    @property
    def active_draft(self) -> Optional[Draft]:
        if not self.drafts:
            return None
        return self.drafts[self.active_index]

    def generate(self, request: Optional[GenerationRequest] = None) -> List[Draft]:
        """
        Ask the platform for drafts and move to the preview step.
        Invalid parameters raise ValidationError before any request is made.
        Empty results and transport errors are reported and keep the
        workflow in the configure step.
        """
        if self.generating:
            raise BusyError("Generation is already in progress")
        if self.step != Step.CONFIGURE:
            raise ValidationError("Go back to the configure step before generating again")

        request = request or self.request
        validate_request(request)
        self.request = request

        self.generating = True
        try:
            drafts = self.client.generate_exercises(request)
        except TransportError as e:
            self.notifier.error(e.message)
            return []
        finally:
            self.generating = False

        if not drafts:
            self.notifier.warning("No exercises were generated!")
            return []

        self.drafts = drafts
        self.deleted = []
        self.editing_index = None
        self.active_index = 0
        self.reset_run_state()
        self.step = Step.PREVIEW
        self.notifier.debug(f"Generated {len(drafts)} drafts")
        return drafts

    def build_payload(self, draft: Draft) -> dict:
        """Flatten a draft into the exercise-creation payload."""
        if draft.topic_ids:
            topic_ids = list(draft.topic_ids)
        elif self.request.topic:
            topic_ids = [self.request.topic]
        else:
            topic_ids = []

        return {
            "code": draft.code,
            "title": draft.title,
            "description": draft.description,
            "maxSubmissions": 0,
            "topicIds": topic_ids,
            "visibility": draft.visibility or self.request.visibility or Visibility.DRAFT.value,
            "timeLimit": draft.time_limit,
            "memory": draft.memory,
            "difficulty": draft.difficulty,
            "solution": draft.solution or "",
            "solutionLanguage": draft.solution_language or self.request.solution_language,
            "prompt": draft.prompt,
            "testCases": [tc.to_payload() for tc in draft.test_cases],
        }

    def commit_one(self, index: Optional[int] = None) -> CommitResult:
        """Persist one draft; the rest of the batch is untouched."""
        if index is None:
            index = self.active_index
        if not 0 <= index < len(self.drafts):
            message = "Please select an exercise to create"
            self.notifier.warning(message)
            return CommitResult(error=message)
        if self.committing:
            raise BusyError("A commit is already in progress")

        draft = self.drafts[index]
        self.committing = True
        try:
            self.client.create_exercise(self.build_payload(draft))
        except TransportError as e:
            self.notifier.error(e.message)
            return CommitResult(error=e.message, failed_index=index)
        finally:
            self.committing = False

        self.notifier.success(f'Created exercise "{draft.title}"')
        return CommitResult(success_count=1)

    def commit_all(self) -> CommitResult:
        """
        Persist every draft in order, stopping at the first failure.
        Drafts committed before the failure stay committed.
        """
        if not self.drafts:
            return CommitResult()
        if self.committing:
            raise BusyError("A commit is already in progress")

        result = CommitResult()
        self.committing = True
        try:
            for index, draft in enumerate(self.drafts):
                try:
                    self.client.create_exercise(self.build_payload(draft))
                except TransportError as e:
                    result.error = e.message
                    result.failed_index = index
                    break
                result.success_count += 1
        finally:
            self.committing = False

        if not result.ok:
            self.notifier.error(
                f"{result.error} ({result.success_count} of {len(self.drafts)} created before the failure)"
            )
            return result

        self.notifier.success(f"Created {result.success_count} exercises!")
        self.reset()
        return result

    def select_active(self, index: int) -> int:
        """Move the cursor, clamped to the draft list. Drops run results."""
        previous = self.active_index
        self._clamp_active(index)
        if self.active_index != previous or self.run_state.loading:
            self.reset_run_state()
        return self.active_index

    def delete_draft(self, index: int) -> DeletedDraft:
        if not 0 <= index < len(self.drafts):
            raise IndexError(f"Draft index {index} out of range")

        entry = DeletedDraft(draft=self.drafts.pop(index), original_index=index)
        self.deleted.append(entry)

        if self.editing_index == index:
            self.editing_index = None
        elif self.editing_index is not None and self.editing_index > index:
            self.editing_index -= 1

        was_active = index == self.active_index
        if index < self.active_index:
            self.active_index -= 1
        self._clamp_active(self.active_index)
        if was_active:
            self.reset_run_state()

        self.notifier.success("Exercise deleted")
        return entry

    def undo_delete(self, entry: DeletedDraft) -> int:
        """Reinsert a deleted draft at min(original index, current length)."""
        position = min(entry.original_index, len(self.drafts))
        self.drafts.insert(position, entry.draft)
        self.deleted = [item for item in self.deleted if item is not entry]

        if self.editing_index is not None and self.editing_index >= position:
            self.editing_index += 1
        if len(self.drafts) > 1 and self.active_index >= position:
            self.active_index += 1

        self.notifier.success("Exercise restored")
        return position

    def editor(self, index: int) -> DraftEditor:
        draft = self.drafts[self._check_index(index)]

        def structure_changed():
            if self.active_draft is draft:
                self.reset_run_state()

        return DraftEditor(draft, on_structure_change=structure_changed)

    def begin_edit(self, index: int) -> DraftEditor:
        editor = self.editor(index)
        editor.begin_edit()
        self.editing_index = index
        return editor

    def end_edit(self) -> None:
        self.editing_index = None

    def run_active(self, runner: JudgeRunner) -> Optional[List[RunResult]]:
        """
        Run the active draft on the judge.
        Returns None when the run was refused, failed, or finished after the
        active draft changed (such results are discarded).
        """
        draft = self.active_draft
        try:
            runner.check(draft, self.request.solution_language)
        except ValidationError as e:
            self.notifier.warning(str(e))
            return None
        if runner.busy or self.run_state.loading:
            self.notifier.warning("A run is already in progress")
            return None

        self.reset_run_state()
        epoch = self.run_state.epoch
        self.run_state.loading = True
        self.run_state.has_run = True

        try:
            results = runner.run(draft, self.request.solution_language)
        except RunError as e:
            if epoch != self.run_state.epoch:
                return None
            self.run_state.loading = False
            self.run_state.results = []
            self.run_state.error = str(e)
            self.notifier.error(str(e))
            return None

        if epoch != self.run_state.epoch:
            self.notifier.debug("Active exercise changed during the run; results discarded")
            return None

        self.run_state.loading = False
        self.run_state.results = results
        return results

    def reset_run_state(self) -> None:
        self.run_state = RunState(epoch=self.run_state.epoch + 1)

    def back(self) -> None:
        """Leave the preview, discarding the drafts."""
        self.step = Step.CONFIGURE
        self.drafts = []
        self.deleted = []
        self.editing_index = None
        self.active_index = 0
        self.reset_run_state()

    def reset(self) -> None:
        """Return to a fresh configure step with default parameters."""
        self.back()
        self.request = GenerationRequest()

    def _check_index(self, index: int) -> int:
        if not 0 <= index < len(self.drafts):
            raise IndexError(f"Draft index {index} out of range")
        return index

    def _clamp_active(self, index: int) -> None:
        if not self.drafts:
            self.active_index = 0
            return
        self.active_index = max(0, min(index, len(self.drafts) - 1))
