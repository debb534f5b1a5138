import json

import pytest

from signspider.workflows.dataset import EntryRecord, merge_record, tagify, union_tags, write_dataset


def _record(entry_id="42", tags=("spread-the-sign", "noun", "animals"), title="Cat"):
    return EntryRecord(
        id=entry_id,
        title=title,
        link=f"https://sts.example/sign/{entry_id}",
        nav=[("SpreadTheSign", "https://sts.example")],
        tags=list(tags),
        body="A cat sign",
        media=[{"method": "fetch", "url": f"https://sts.example/v/{entry_id}.mp4"}],
        provider={"id": "spread-the-sign", "link": "https://sts.example", "verb": "documented"},
    )


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("spread-the-sign", "spread-the-sign"),
        ("Noun", "noun"),
        ("Food & Drink", "food.drink"),
        ("Verb (transitive)", "verb.transitive."),
        ("snake__case--thing", "snake_case-thing"),
        ("Åland 2024", ".land."),
        ("", ""),
    ],
)
def test_tagify_examples(raw, expected):
    assert tagify(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ["Food & Drink", "a..b__c--d", "..", "123", "Ölstuga -- _ Café", "x.y", "-_-_.", "Time/Calendar"],
)
def test_tagify_is_idempotent(raw):
    once = tagify(raw)
    assert tagify(once) == once


def test_union_tags_keeps_first_occurrence_order():
    assert union_tags(["a", "b"], ["b", "c", "a"]) == ["a", "b", "c"]


def test_merge_into_empty_dataset():
    dataset = {}
    merged = merge_record(dataset, _record())
    assert dataset == {"42": merged}
    assert merged.tags == ["spread-the-sign", "noun", "animals"]


def test_merge_unions_with_existing_tags():
    dataset = {"42": _record(tags=["x"])}

    merged = merge_record(dataset, _record())

    assert merged.tags == ["spread-the-sign", "noun", "animals", "x"]
    assert len(set(merged.tags)) == len(merged.tags)


def test_merge_is_monotonic_and_last_write_wins_for_other_fields():
    dataset = {}
    batches = [["a", "b"], ["c"], ["b", "d"], ["a"]]
    previous = set()
    for index, tags in enumerate(batches):
        merged = merge_record(dataset, _record(tags=tags, title=f"Cat {index}"))
        assert previous <= set(merged.tags)
        previous = set(merged.tags)
    assert dataset["42"].title == "Cat 3"
    assert set(dataset["42"].tags) == {"a", "b", "c", "d"}


def test_write_dataset_outputs_json_object(tmp_path):
    dataset = {}
    merge_record(dataset, _record())
    merge_record(dataset, _record(entry_id="7", title="Hund"))
    out = tmp_path / "out" / "data.json"

    write_dataset(dataset, out)

    payload = json.loads(out.read_text(encoding="utf-8"))
    assert set(payload) == {"42", "7"}
    assert payload["7"]["title"] == "Hund"
    assert payload["42"]["nav"] == [["SpreadTheSign", "https://sts.example"]]
    assert "id" not in payload["42"]
