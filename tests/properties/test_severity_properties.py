"""Property-based tests for CVSS severity classification.

- Totality: every score in [0, 10] maps to exactly one severity.
- Monotonicity: a higher score never yields a lower severity.
- Band agreement: the severity band contains the score.
"""
from __future__ import annotations

from hypothesis import given
from hypothesis import strategies as st

from chainguardian.core.alerts import Severity, severity_from_cvss
from chainguardian.core.inventory import Vulnerability

scores = st.floats(min_value=0.0, max_value=10.0, allow_nan=False)

_BANDS = {
    Severity.LOW: (0.0, 4.0),
    Severity.MEDIUM: (4.0, 7.0),
    Severity.HIGH: (7.0, 9.0),
    Severity.CRITICAL: (9.0, 10.0001),
}


class TestSeverityProperties:
    @given(a=scores, b=scores)
    def test_monotone(self, a: float, b: float) -> None:
        low, high = sorted((a, b))
        assert severity_from_cvss(low) <= severity_from_cvss(high)

    @given(score=scores)
    def test_score_within_band(self, score: float) -> None:
        lower, upper = _BANDS[severity_from_cvss(score)]
        assert lower <= score < upper

    @given(score=st.floats(allow_nan=False, allow_infinity=False).filter(
        lambda s: s < 0.0 or s > 10.0
    ))
    def test_out_of_range_scores_never_build_a_vulnerability(self, score: float) -> None:
        try:
            Vulnerability(id="X", cvss=score)
        except ValueError:
            return
        raise AssertionError(f"cvss {score} accepted")
