from __future__ import annotations

import pytest

from iterbatch.template import get_nested, interpolate


def test_nested_value_replaces_token() -> None:
    assert interpolate("{a.b:z}", {"a": {"b": 5}}) == "5"


def test_missing_nested_value_uses_default() -> None:
    assert interpolate("{a.b:z}", {"a": {}}) == "z"


def test_missing_value_without_default_is_left_verbatim() -> None:
    assert interpolate("{missing}", {}) == "{missing}"


def test_deeply_nested_missing_path_is_left_verbatim() -> None:
    template = "Value: {a.b.c.d.e}"
    assert interpolate(template, {"a": {"b": {}}}) == template


def test_traversal_stops_at_scalars() -> None:
    assert interpolate("{a.b}", {"a": 5}) == "{a.b}"
    assert interpolate("{name.length:n/a}", {"name": "abc"}) == "n/a"


def test_multiple_tokens_and_plain_text() -> None:
    variables = {"file": "src/app.py", "index": 0, "meta": {"owner": "ops"}}
    result = interpolate("Review {file} (#{index}) for {meta.owner} in {team:core}", variables)
    assert result == "Review src/app.py (#0) for ops in core"


def test_falsy_values_are_defined() -> None:
    assert interpolate("{count}|{label}", {"count": 0, "label": ""}) == "0|"


def test_none_counts_as_undefined() -> None:
    assert interpolate("{owner:nobody}", {"owner": None}) == "nobody"
    assert interpolate("{owner}", {"owner": None}) == "{owner}"


def test_empty_default_behaves_like_no_default() -> None:
    assert interpolate("{missing:}", {}) == "{missing:}"


def test_default_may_contain_colons_and_dots() -> None:
    assert interpolate("{url:http://localhost:8080/a.b}", {}) == "http://localhost:8080/a.b"


def test_value_rendering() -> None:
    variables = {"flag": True, "items": [1, 2], "obj": {"k": "v"}, "ratio": 0.5}
    assert interpolate("{flag}", variables) == "true"
    assert interpolate("{items}", variables) == "[1, 2]"
    assert interpolate("{obj}", variables) == '{"k": "v"}'
    assert interpolate("{ratio}", variables) == "0.5"


def test_list_indices_are_traversable() -> None:
    variables = {"rows": [{"id": 7}, {"id": 9}]}
    assert interpolate("{rows.1.id}", variables) == "9"
    assert interpolate("{rows.5.id:none}", variables) == "none"
    assert interpolate("{rows.x:bad}", variables) == "bad"


@pytest.mark.parametrize("segment", ["-1", " 1", "+1", "0_1", "01x", "\u0661"])
def test_only_plain_indices_address_lists(segment: str) -> None:
    variables = {"rows": list(range(20))}

    assert interpolate(f"{{rows.{segment}}}", variables) == f"{{rows.{segment}}}"
    assert interpolate(f"{{rows.{segment}:none}}", variables) == "none"


def test_index_past_the_end_is_missing() -> None:
    assert interpolate("{rows.3:none}", {"rows": ["a", "b", "c"]}) == "none"
    assert interpolate("{rows.2}", {"rows": ["a", "b", "c"]}) == "c"


@pytest.mark.parametrize(
    "template",
    ["no tokens here", "{}", "{unclosed", "closed}"],
)
def test_non_tokens_are_untouched(template: str) -> None:
    assert interpolate(template, {"unclosed": 1}) == template


def test_get_nested_returns_value() -> None:
    assert get_nested({"a": {"b": [10, 20]}}, "a.b.0") == 10
