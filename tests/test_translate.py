import json
import math

import pytest

from subcontext.errors import ApiError
from subcontext.models import BatchOutput
from subcontext.translate import (
    BATCH_SIZE,
    failure_marker,
    is_failure_marker,
    plan_batches,
    reconcile,
    translate_entries,
)

from conftest import make_context, make_entries


class FakeTranslator:
    """Translates every entry to upper case, optionally failing on one call."""

    def __init__(self, fail_on_call=None, drop_ids=()):
        self.fail_on_call = fail_on_call
        self.drop_ids = set(drop_ids)
        self.calls = []

    def translate_batch(self, prompt, model):
        self.calls.append((prompt, model))
        if len(self.calls) == self.fail_on_call:
            raise ApiError("Internal error", status_code=500)
        payload = json.loads(prompt.task_prompt.split("\n\n", 1)[1])
        return [
            BatchOutput(id=item["id"], translation=item["original_text"].upper())
            for item in payload
            if item["id"] not in self.drop_ids
        ]


@pytest.mark.parametrize("count", [0, 1, 24, 25, 26, 60, 101])
def test_plan_batches_covers_input_in_order(count):
    entries = make_entries(count)
    batches = plan_batches(entries)

    assert len(batches) == math.ceil(count / BATCH_SIZE)
    assert all(0 < len(batch) <= BATCH_SIZE for batch in batches)
    assert [e for batch in batches for e in batch] == entries


def test_plan_batches_custom_size():
    assert [len(b) for b in plan_batches(make_entries(7), batch_size=3)] == [3, 3, 1]


@pytest.mark.parametrize("size", [0, -1])
def test_plan_batches_rejects_non_positive_size(size):
    with pytest.raises(ValueError):
        plan_batches(make_entries(3), batch_size=size)


def test_reconcile_marks_missing_ids():
    batch = make_entries(3)
    outputs = [BatchOutput(id=3, translation="three"), BatchOutput(id=1, translation="one")]

    result = reconcile(batch, outputs)

    assert [e.id for e in result] == [1, 2, 3]
    assert [e.translated_text for e in result] == ["one", failure_marker(2), "three"]
    assert "2" in result[1].translated_text
    assert [e.text for e in result] == ["Line 1", "Line 2", "Line 3"]
    assert result[0].start_time == batch[0].start_time


def test_reconcile_keeps_batch_order_not_response_order():
    batch = make_entries([5, 2, 8])
    outputs = [BatchOutput(id=i, translation=f"t{i}") for i in (8, 5, 2)]

    assert [e.id for e in reconcile(batch, outputs)] == [5, 2, 8]


def test_reconcile_ignores_duplicates_and_unknown_ids():
    batch = make_entries(1)
    outputs = [
        BatchOutput(id=1, translation="first"),
        BatchOutput(id=1, translation="second"),
        BatchOutput(id=99, translation="stray"),
    ]

    result = reconcile(batch, outputs)

    assert len(result) == 1
    assert result[0].translated_text == "first"


def test_reconcile_empty_response():
    result = reconcile(make_entries(2), [])
    assert all(is_failure_marker(e.translated_text) for e in result)


def test_failure_marker_detection():
    assert is_failure_marker(failure_marker(42))
    assert not is_failure_marker("A perfectly normal line")


def test_translate_entries_reports_cumulative_progress():
    translator = FakeTranslator()
    progress = []

    result = translate_entries(
        make_entries(60), make_context(), translator, on_progress=lambda p, t: progress.append((p, t))
    )

    assert len(translator.calls) == 3
    sizes = [
        len(json.loads(prompt.task_prompt.split("\n\n", 1)[1])) for prompt, _ in translator.calls
    ]
    assert sizes == [25, 25, 10]
    assert progress == [(25, 60), (50, 60), (60, 60)]
    assert [e.id for e in result] == list(range(1, 61))
    assert result[0].translated_text == "LINE 1"


def test_translate_entries_passes_model():
    translator = FakeTranslator()
    translate_entries(make_entries(1), make_context(model="gemini-2.5-flash-fastest"), translator)

    assert translator.calls[0][1] == "gemini-2.5-flash-fastest"


def test_translate_entries_sorts_by_id():
    result = translate_entries(make_entries([30, 10, 20]), make_context(), FakeTranslator(), batch_size=2)

    assert [e.id for e in result] == [10, 20, 30]


def test_translate_entries_empty_document():
    translator = FakeTranslator()
    progress = []

    assert translate_entries([], make_context(), translator, on_progress=lambda *a: progress.append(a)) == []
    assert translator.calls == []
    assert progress == []


def test_translate_entries_stops_at_first_failed_batch():
    translator = FakeTranslator(fail_on_call=2)
    progress = []

    with pytest.raises(ApiError, match="Internal error"):
        translate_entries(
            make_entries(60), make_context(), translator, on_progress=lambda p, t: progress.append((p, t))
        )

    assert len(translator.calls) == 2
    assert progress == [(25, 60)]


def test_translate_entries_tolerates_dropped_ids():
    result = translate_entries(make_entries(3), make_context(), FakeTranslator(drop_ids={2}))

    assert [e.translated_text for e in result] == ["LINE 1", failure_marker(2), "LINE 3"]
