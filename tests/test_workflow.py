import pytest

from exgen_py.client.models import GenerationRequest
from exgen_py.errors import BusyError, TransportError, ValidationError
from exgen_py.workflow import GenerationWorkflow, JudgeRunner, Step

from .fakes import FakeJudge, FakePlatform, judge_item, make_draft


def valid_request(**overrides):
    values = dict(
        topic="topic-1",
        levels=["EASY", "HARD"],
        number_of_exercise=3,
        number_of_public_test_cases=1,
        number_of_private_test_cases=1,
        solution_language="Python",
    )
    values.update(overrides)
    return GenerationRequest(**values)


def previewing(notifier, drafts):
    workflow = GenerationWorkflow(FakePlatform(drafts=drafts), notifier)
    workflow.generate(valid_request())
    return workflow


def test_generate_moves_to_preview_with_returned_drafts(notifier):
    drafts = [make_draft("A"), make_draft("B")]
    workflow = GenerationWorkflow(FakePlatform(drafts=drafts), notifier)

    result = workflow.generate(valid_request(number_of_exercise=5))

    assert workflow.step == Step.PREVIEW
    assert len(result) == 2
    assert workflow.drafts == drafts
    assert workflow.active_index == 0


def test_generate_empty_result_stays_in_configure(notifier):
    workflow = GenerationWorkflow(FakePlatform(drafts=[]), notifier)

    assert workflow.generate(valid_request()) == []
    assert workflow.step == Step.CONFIGURE
    assert notifier.last("warning") == "No exercises were generated!"


def test_generate_transport_error_surfaces_server_message(notifier):
    platform = FakePlatform(generate_error=TransportError("Quota exceeded", 429))
    workflow = GenerationWorkflow(platform, notifier)

    workflow.generate(valid_request())

    assert workflow.step == Step.CONFIGURE
    assert notifier.last("error") == "Quota exceeded"
    assert not workflow.generating


@pytest.mark.parametrize(
    "overrides",
    [
        {"topic": ""},
        {"levels": []},
        {"number_of_exercise": 0},
        {"number_of_exercise": 11},
        {"number_of_public_test_cases": 0},
        {"number_of_private_test_cases": 0},
    ],
)
def test_generate_validates_before_calling_the_platform(notifier, overrides):
    platform = FakePlatform(drafts=[make_draft()])
    workflow = GenerationWorkflow(platform, notifier)

    with pytest.raises(ValidationError):
        workflow.generate(valid_request(**overrides))
    assert platform.generate_calls == []
    assert workflow.step == Step.CONFIGURE


def test_back_discards_drafts(notifier):
    workflow = previewing(notifier, [make_draft("A")])
    workflow.back()
    assert workflow.step == Step.CONFIGURE
    assert workflow.drafts == []


def test_delete_then_undo_restores_list(notifier):
    drafts = [make_draft("A"), make_draft("B"), make_draft("C")]
    workflow = previewing(notifier, list(drafts))

    entry = workflow.delete_draft(1)
    assert [d.code for d in workflow.drafts] == ["A", "C"]
    assert workflow.deleted == [entry]

    position = workflow.undo_delete(entry)
    assert position == 1
    assert workflow.drafts == drafts
    assert workflow.deleted == []


def test_undo_after_list_shrank_appends_at_end(notifier):
    workflow = previewing(notifier, [make_draft("A"), make_draft("B"), make_draft("C")])

    last = workflow.delete_draft(2)
    workflow.delete_draft(1)
    workflow.delete_draft(0)

    assert workflow.undo_delete(last) == 0
    assert [d.code for d in workflow.drafts] == ["C"]
    assert len(workflow.deleted) == 2


def test_delete_out_of_range_raises(notifier):
    workflow = previewing(notifier, [make_draft("A")])
    with pytest.raises(IndexError):
        workflow.delete_draft(5)


def test_delete_keeps_cursor_on_same_draft(notifier):
    workflow = previewing(notifier, [make_draft("A"), make_draft("B"), make_draft("C")])
    workflow.select_active(2)

    workflow.delete_draft(0)

    assert workflow.active_draft.code == "C"


def test_select_active_is_clamped(notifier):
    workflow = previewing(notifier, [make_draft("A"), make_draft("B")])
    assert workflow.select_active(7) == 1
    assert workflow.select_active(-3) == 0


def test_commit_payload_applies_defaults(notifier):
    platform = FakePlatform(drafts=[make_draft("A")])
    workflow = GenerationWorkflow(platform, notifier)
    workflow.generate(valid_request(visibility="PRIVATE"))
    workflow.drafts[0].solution = None

    result = workflow.commit_one(0)

    assert result.ok and result.success_count == 1
    payload = platform.created[0]
    assert payload["maxSubmissions"] == 0
    assert payload["topicIds"] == ["topic-1"]
    assert payload["visibility"] == "PRIVATE"
    assert payload["solution"] == ""
    assert workflow.step == Step.PREVIEW


def test_commit_one_failure_reports_error(notifier):
    platform = FakePlatform(drafts=[make_draft("A")], fail_on={"A": "Code already exists"})
    workflow = previewing_with(platform, notifier)

    result = workflow.commit_one()

    assert result.error == "Code already exists"
    assert result.failed_index == 0
    assert notifier.last("error") == "Code already exists"


def test_commit_all_stops_at_first_failure(notifier):
    platform = FakePlatform(
        drafts=[make_draft("A"), make_draft("B"), make_draft("C")],
        fail_on={"B": "Duplicate code"},
    )
    workflow = previewing_with(platform, notifier)

    result = workflow.commit_all()

    assert result.success_count == 1
    assert result.error == "Duplicate code"
    assert result.failed_index == 1
    assert [p["code"] for p in platform.created] == ["A"]
    assert platform.create_attempts == 2
    assert workflow.step == Step.PREVIEW
    assert len(workflow.drafts) == 3


def test_commit_all_success_resets_workflow(notifier):
    platform = FakePlatform(drafts=[make_draft("A"), make_draft("B")])
    workflow = previewing_with(platform, notifier)

    result = workflow.commit_all()

    assert result.ok and result.success_count == 2
    assert workflow.step == Step.CONFIGURE
    assert workflow.drafts == []
    assert notifier.last("success") == "Created 2 exercises!"


def test_run_active_stores_results(notifier):
    workflow = previewing(notifier, [make_draft("A")])
    judge = FakeJudge(snapshots=[[judge_item("t1", 3, "0"), judge_item("t2", 3, "1")]])

    results = workflow.run_active(JudgeRunner(judge, sleep=lambda s: None))

    assert [r.is_passed for r in results] == [True, True]
    assert workflow.run_state.results == results
    assert not workflow.run_state.loading


def test_run_active_with_empty_solution_warns_without_network(notifier):
    workflow = previewing(notifier, [make_draft("A", solution="")])
    judge = FakeJudge()

    assert workflow.run_active(JudgeRunner(judge)) is None
    assert judge.submitted == []
    assert notifier.last("warning") == "This exercise has no solution to run"
    assert not workflow.run_state.has_run


def test_run_failure_sets_error(notifier):
    workflow = previewing(notifier, [make_draft("A")])
    judge = FakeJudge(tokens=[])

    assert workflow.run_active(JudgeRunner(judge)) is None
    assert workflow.run_state.error == "No token received from Judge0"
    assert workflow.run_state.results == []


def test_results_arriving_after_switch_are_discarded(notifier):
    workflow = previewing(notifier, [make_draft("A"), make_draft("B")])
    pending = [judge_item("t1", 1), judge_item("t2", 1)]
    done = [judge_item("t1", 3, "0"), judge_item("t2", 3, "1")]
    judge = FakeJudge(snapshots=[pending, done])

    def switch_while_waiting(seconds):
        workflow.select_active(1)

    results = workflow.run_active(JudgeRunner(judge, sleep=switch_while_waiting))

    assert results is None
    assert workflow.active_index == 1
    assert workflow.run_state.results == []
    assert not workflow.run_state.has_run


def test_test_case_structure_change_resets_run_state(notifier):
    workflow = previewing(notifier, [make_draft("A")])
    judge = FakeJudge(snapshots=[[judge_item("t1", 3, "0"), judge_item("t2", 3, "1")]])
    workflow.run_active(JudgeRunner(judge))

    workflow.editor(0).delete_test_case(0)

    assert workflow.run_state.results == []
    assert not workflow.run_state.has_run


def test_snapshot_restore_round_trip(notifier):
    workflow = previewing(notifier, [make_draft("A"), make_draft("B")])
    workflow.select_active(1)

    restored = GenerationWorkflow.restore(workflow.snapshot(), FakePlatform(), notifier)

    assert restored.step == Step.PREVIEW
    assert restored.active_index == 1
    assert [d.code for d in restored.drafts] == ["A", "B"]


def previewing_with(platform, notifier):
    workflow = GenerationWorkflow(platform, notifier)
    workflow.generate(valid_request())
    return workflow


def test_run_uses_request_language_when_draft_has_none(notifier):
    draft = make_draft("A", language=None)
    workflow = GenerationWorkflow(FakePlatform(drafts=[draft]), notifier)
    workflow.generate(valid_request(solution_language="Python"))
    judge = FakeJudge(snapshots=[[judge_item("t1", 3, "0"), judge_item("t2", 3, "1")]])

    results = workflow.run_active(JudgeRunner(judge))

    assert [r.is_passed for r in results] == [True, True]
    assert judge.submitted[0][0]["language_id"] == 71


def test_generate_while_generating_is_refused(notifier):
    platform = FakePlatform(drafts=[make_draft("A")])
    workflow = GenerationWorkflow(platform, notifier)
    workflow.generating = True

    with pytest.raises(BusyError):
        workflow.generate(valid_request())
    assert platform.generate_calls == []


def test_commit_while_committing_is_refused(notifier):
    platform = FakePlatform(drafts=[make_draft("A"), make_draft("B")])
    workflow = previewing_with(platform, notifier)
    workflow.committing = True

    with pytest.raises(BusyError):
        workflow.commit_one(0)
    with pytest.raises(BusyError):
        workflow.commit_all()
    assert platform.create_attempts == 0


def test_failed_commits_clear_the_committing_flag(notifier):
    platform = FakePlatform(drafts=[make_draft("A")], fail_on={"A": "Server down"})
    workflow = previewing_with(platform, notifier)

    assert not workflow.commit_one(0).ok
    assert not workflow.committing
    assert not workflow.commit_all().ok
    assert not workflow.committing
    assert platform.create_attempts == 2
