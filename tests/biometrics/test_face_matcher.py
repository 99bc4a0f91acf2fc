import pytest

from school_attendance.biometrics.matcher import FaceMatcher, cosine_similarity


def test_identical_vectors_match():
    assert cosine_similarity([0.2, 0.4, 0.4], [0.2, 0.4, 0.4]) == pytest.approx(1.0)
    assert FaceMatcher().matches([0.2, 0.4, 0.4], [0.2, 0.4, 0.4])


def test_orthogonal_vectors_do_not_match():
    assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)
    assert not FaceMatcher().matches([1.0, 0.0], [0.0, 1.0])


@pytest.mark.parametrize("a, b", [([1.0, 2.0], [1.0, 2.0, 3.0]), ([], []), ([0.0, 0.0], [1.0, 1.0])])
def test_incomparable_vectors_score_zero(a, b):
    assert cosine_similarity(a, b) == 0.0


def test_threshold_is_configurable():
    live, stored = [1.0, 0.0], [0.8, 0.6]

    assert FaceMatcher(threshold=0.75).matches(live, stored)
    assert not FaceMatcher(threshold=0.9).matches(live, stored)
