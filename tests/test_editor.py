import pytest

from exgen_py.workflow import DraftEditor

from .fakes import make_draft


def test_add_test_case_defaults():
    draft = make_draft(cases=0)
    editor = DraftEditor(draft)

    editor.add_test_case()

    assert len(draft.test_cases) == 1
    test_case = draft.test_cases[0]
    assert (test_case.input, test_case.output, test_case.note) == ("", "", "")
    assert test_case.is_public is True


def test_update_field_is_idempotent():
    once = make_draft()
    twice = make_draft()

    DraftEditor(once).update_field("title", "New title")
    editor = DraftEditor(twice)
    editor.update_field("title", "New title")
    editor.update_field("title", "New title")

    assert once == twice


def test_update_field_replaces_lists_wholesale():
    draft = make_draft()
    topics = ["a", "b"]
    DraftEditor(draft).update_field("topic_ids", topics)
    topics.append("c")

    assert draft.topic_ids == ["a", "b"]


def test_update_unknown_field_raises():
    with pytest.raises(AttributeError):
        DraftEditor(make_draft()).update_field("nope", 1)


def test_edit_mode_does_not_validate():
    draft = make_draft()
    editor = DraftEditor(draft)

    editor.begin_edit()
    editor.update_field("title", "")
    editor.end_edit()

    assert not editor.editing
    assert draft.title == ""


def test_delete_test_case_shifts_indices_and_notifies():
    changes = []
    draft = make_draft(cases=3)
    editor = DraftEditor(draft, on_structure_change=lambda: changes.append(1))

    editor.delete_test_case(0)

    assert [tc.input for tc in draft.test_cases] == ["1", "2"]
    assert changes == [1]


def test_update_test_case_field():
    draft = make_draft()
    DraftEditor(draft).update_test_case(1, "output", "42")
    assert draft.test_cases[1].output == "42"


@pytest.mark.parametrize("index", [-1, 2, 10])
def test_out_of_range_test_case_index_fails_loudly(index):
    editor = DraftEditor(make_draft(cases=2))
    with pytest.raises(IndexError):
        editor.update_test_case(index, "input", "x")
    with pytest.raises(IndexError):
        editor.delete_test_case(index)
