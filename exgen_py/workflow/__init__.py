"""Generate, preview, edit, run and commit AI-generated exercises."""

from .editor import DraftEditor
from .orchestrator import DeletedDraft, GenerationWorkflow, RunState, Step, validate_request
from .runner import JudgeRunner, build_submissions, classify

__all__ = [
    "DraftEditor",
    "DeletedDraft",
    "GenerationWorkflow",
    "RunState",
    "Step",
    "validate_request",
    "JudgeRunner",
    "build_submissions",
    "classify",
]
