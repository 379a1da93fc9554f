"""Field-level editing of a single generated draft."""

from dataclasses import fields
from typing import Callable, Optional

from ..client.models import Draft, TestCase


DRAFT_FIELDS = frozenset(f.name for f in fields(Draft))
TEST_CASE_FIELDS = frozenset(f.name for f in fields(TestCase))


class DraftEditor:
    """
    Mutates exactly one draft in place.
    Nothing is validated here; the platform validates on commit.
    `on_structure_change` fires after a test case is added or removed.
    """

    def __init__(
        self,
        draft: Draft,
        on_structure_change: Optional[Callable[[], None]] = None,
    ):
        self.draft = draft
        self.editing = False
        self._on_structure_change = on_structure_change

    def begin_edit(self) -> None:
        self.editing = True

    def end_edit(self) -> None:
        self.editing = False

    def update_field(self, name: str, value) -> None:
        """Replace one attribute of the draft wholesale."""
        if name not in DRAFT_FIELDS:
            raise AttributeError(f"Draft has no field '{name}'")
        if name == "test_cases":
            raise AttributeError("Use the test case operations to change test_cases")

        if isinstance(value, (list, tuple, set)):
            value = list(value)
        setattr(self.draft, name, value)

    def add_test_case(self) -> TestCase:
        test_case = TestCase(input="", output="", note="", is_public=True)
        self.draft.test_cases.append(test_case)
        self._structure_changed()
        return test_case

    def update_test_case(self, index: int, name: str, value) -> None:
        test_case = self.draft.test_cases[self._check_index(index)]
        if name not in TEST_CASE_FIELDS:
            raise AttributeError(f"TestCase has no field '{name}'")
        setattr(test_case, name, value)

    def delete_test_case(self, index: int) -> TestCase:
        removed = self.draft.test_cases.pop(self._check_index(index))
        self._structure_changed()
        return removed

    def _check_index(self, index: int) -> int:
        # Negative indices would silently address from the end
        count = len(self.draft.test_cases)
        if not 0 <= index < count:
            raise IndexError(f"Test case index {index} out of range (0-{count - 1})")
        return index

    def _structure_changed(self) -> None:
        if self._on_structure_change is not None:
            self._on_structure_change()
