import pytest

from teamplay_manifest.core.filenames import MISSING, sanitize


def test_missing_value_returns_fallback():
    assert sanitize(None, fallback="X") == "X"


def test_default_fallback_is_never_empty():
    assert sanitize(None) == MISSING
    assert MISSING


@pytest.mark.parametrize("value", [42, 1.5, ["a"], b"bytes"])
def test_non_string_counts_as_missing(value):
    assert sanitize(value, fallback="X") == "X"


def test_separators_are_replaced():
    assert sanitize("a/b:c", "X") == "a_b_c"


def test_allowed_characters_are_kept():
    assert sanitize("OUS-0001_(v2)", "X") == "OUS-0001_(v2)"


def test_dots_and_spaces_are_replaced():
    assert sanitize("Start of treatment.v1", "X") == "Start_of_treatment_v1"


def test_non_ascii_is_replaced_not_folded():
    result = sanitize("café", "X")
    assert result == "caf_"
    assert len(result.encode("utf-8")) == len(result)


@pytest.mark.parametrize("value", ["", "///", "___", "ééé"])
def test_empty_results_fall_back(value):
    assert sanitize(value, fallback="X") == "X"
