"""Unit tests for the Kaplan-Meier estimator."""

import dataclasses

import numpy as np
import pytest
from lifelines import KaplanMeierFitter

from dealsurv.data.cohort import Sample
from dealsurv.data.types import ConfidenceType
from dealsurv.errors import EmptySample, InvalidParameter
from dealsurv.metrics.kaplan_meier import (
    CurveRecord,
    KaplanMeierEstimator,
    SurvivalCurve,
    estimate,
    z_value,
)


class TestKnownCurves:
    """Tests against hand-computed curves."""

    def test_two_events_one_censored(self, small_sample):
        """Test [(5, event), (5, event), (10, censored)]."""
        curve = estimate(small_sample)

        assert len(curve.steps) == 1
        step = curve.steps[0]
        assert step.time == 5.0
        assert step.n_at_risk == 3
        assert step.n_events == 2
        assert step.survival == pytest.approx(1.0 / 3.0)

        # The censored deal at t=10 does not move the curve
        assert curve.survival_at(10) == pytest.approx(1.0 / 3.0)
        assert curve.survival_at(1000) == pytest.approx(1.0 / 3.0)
        assert curve.survival_at(4.99) == 1.0

    def test_greenwood_standard_error(self, small_sample):
        """Test Greenwood variance and clamped plain bounds."""
        curve = estimate(small_sample, confidence_level=0.95)
        step = curve.steps[0]

        expected_se = (1.0 / 3.0) * np.sqrt(2.0 / (3.0 * 1.0))
        assert step.std_error == pytest.approx(expected_se)

        z = z_value(0.95)
        assert step.ci_lower == 0.0
        assert step.ci_upper == pytest.approx(1.0 / 3.0 + z * expected_se)

    def test_origin_record(self, small_sample):
        """Test the implicit origin point."""
        curve = estimate(small_sample)

        assert curve.records[0] == CurveRecord(0.0, 3, 0, 1.0, 0.0, 1.0, 1.0)
        assert curve.n == 3
        assert curve.n_censored == 1
        assert curve.as_tuples()[0] == (0.0, 1.0, 1.0, 1.0)

    def test_uncensored_matches_empirical_survival(self):
        """Test that without censoring KM equals 1 - empirical CDF."""
        durations = np.array([1, 2, 2, 3, 5, 8, 8, 8, 13])
        sample = Sample(durations=durations, censored=np.zeros(len(durations), dtype=bool))
        curve = estimate(sample)

        for record in curve.steps:
            expected = np.mean(durations > record.time)
            assert record.survival == pytest.approx(expected)

    def test_all_events_at_once_drop_to_zero(self):
        """Test the curve drops to 0 when the whole risk set fails."""
        curve = estimate([(3, False), (3, False)])
        step = curve.steps[-1]

        assert step.survival == 0.0
        assert step.std_error == 0.0
        assert (step.ci_lower, step.ci_upper) == (0.0, 0.0)

    def test_last_deal_event_after_censoring(self):
        """Test a zero-survival tail after earlier censoring."""
        curve = estimate([(2, True), (4, False), (6, False)])

        np.testing.assert_allclose(curve.survival, [1.0, 0.5, 0.0])
        assert [r.n_at_risk for r in curve.records] == [3, 2, 1]

    def test_all_censored(self):
        """Test a fully censored sample keeps S = 1."""
        curve = estimate([(4, True), (7, True)])

        assert len(curve) == 1
        assert curve.survival_at(100) == 1.0
        assert curve.median_survival_time() is None

    def test_median_survival_time(self, small_sample):
        """Test the median is the first time S <= 0.5."""
        assert estimate(small_sample).median_survival_time() == 5.0

    def test_empty_sample_rejected(self):
        """Test that an empty sample raises EmptySample."""
        with pytest.raises(EmptySample):
            estimate(Sample.from_pairs([]))


class TestCurveProperties:
    """Tests for structural guarantees on arbitrary samples."""

    @pytest.mark.parametrize("conf_type", list(ConfidenceType))
    def test_bounds_bracket_estimate(self, random_sample, conf_type):
        """Test ci_lower <= S <= ci_upper and all values in [0, 1]."""
        curve = estimate(random_sample, conf_type=conf_type)

        assert np.all(curve.ci_lower <= curve.survival)
        assert np.all(curve.survival <= curve.ci_upper)
        for values in (curve.survival, curve.ci_lower, curve.ci_upper):
            assert np.all((values >= 0.0) & (values <= 1.0))

    def test_survival_non_increasing(self, random_sample):
        """Test S is non-increasing and starts at 1."""
        curve = estimate(random_sample)

        assert curve.survival[0] == 1.0
        assert np.all(np.diff(curve.survival) <= 0)
        assert np.all(np.diff(curve.times) > 0)

    def test_risk_set_counts(self, random_sample):
        """Test n_j counts durations >= t_j and d_j counts events at t_j."""
        curve = estimate(random_sample)
        durations = random_sample.durations
        events = ~random_sample.censored

        for record in curve.steps:
            assert record.n_at_risk == np.sum(durations >= record.time)
            assert record.n_events == np.sum((durations == record.time) & events)

        at_risk = [r.n_at_risk for r in curve.records]
        assert all(a >= b for a, b in zip(at_risk, at_risk[1:]))

    def test_risk_set_shrinks_by_exits(self, random_sample):
        """Test the risk set drops by exactly the deals leaving between steps."""
        curve = estimate(random_sample)
        durations = random_sample.durations
        steps = curve.steps

        for previous, current in zip(steps, steps[1:]):
            left = np.sum((durations >= previous.time) & (durations < current.time))
            assert previous.n_at_risk - current.n_at_risk == left

    def test_matches_lifelines(self, random_sample):
        """Test survival and log-log bounds against lifelines."""
        curve = estimate(random_sample, conf_type=ConfidenceType.LOG_LOG)

        kmf = KaplanMeierFitter()
        kmf.fit(random_sample.durations, event_observed=random_sample.events, alpha=0.05)

        times = np.array([r.time for r in curve.steps if 0.0 < r.survival < 1.0])
        np.testing.assert_allclose(
            curve.survival_at(times), kmf.survival_function_at_times(times).to_numpy()
        )

        ci = kmf.confidence_interval_
        lower_col = [c for c in ci.columns if "lower" in c][0]
        upper_col = [c for c in ci.columns if "upper" in c][0]
        by_time = {r.time: r for r in curve.steps}
        np.testing.assert_allclose(
            [by_time[t].ci_lower for t in times], ci.loc[times, lower_col].to_numpy(), atol=1e-8
        )
        np.testing.assert_allclose(
            [by_time[t].ci_upper for t in times], ci.loc[times, upper_col].to_numpy(), atol=1e-8
        )

    def test_curve_is_immutable(self, small_sample):
        """Test the curve cannot be modified after estimation."""
        curve = estimate(small_sample)

        with pytest.raises(dataclasses.FrozenInstanceError):
            curve.n_censored = 0

    def test_to_frame(self, random_sample):
        """Test tabular export."""
        curve = estimate(random_sample)
        frame = curve.to_frame()

        assert list(frame.columns) == list(CurveRecord._fields)
        assert len(frame) == len(curve)

    def test_evaluate_on_grid(self, small_sample):
        """Test step evaluation with bounds on a grid."""
        table = estimate(small_sample).evaluate([0, 4, 5, 9])

        np.testing.assert_allclose(table["survival"], [1.0, 1.0, 1.0 / 3.0, 1.0 / 3.0])
        assert list(table.columns) == ["time", "survival", "ci_lower", "ci_upper"]


class TestEstimatorConfiguration:
    """Tests for estimator settings."""

    def test_default_z(self):
        """Test the default 95% level gives z ~ 1.96."""
        assert KaplanMeierEstimator().z == pytest.approx(1.959964, abs=1e-6)

    def test_wider_level_gives_wider_bounds(self, random_sample):
        """Test a 99% interval contains the 90% interval."""
        narrow = estimate(random_sample, confidence_level=0.90)
        wide = estimate(random_sample, confidence_level=0.99)

        assert np.all(wide.ci_lower <= narrow.ci_lower)
        assert np.all(wide.ci_upper >= narrow.ci_upper)

    @pytest.mark.parametrize("level", [0.0, 1.0, 1.5, -0.1])
    def test_invalid_confidence_level(self, level):
        """Test confidence levels outside (0, 1) are rejected."""
        with pytest.raises(InvalidParameter, match="confidence_level"):
            KaplanMeierEstimator(confidence_level=level)

    def test_invalid_conf_type(self):
        """Test conf_type must be a ConfidenceType."""
        with pytest.raises(InvalidParameter, match="conf_type"):
            KaplanMeierEstimator(conf_type="plain")

    def test_accepts_pairs(self):
        """Test the estimator accepts raw (duration, censored) pairs."""
        curve = KaplanMeierEstimator().estimate([(1, False), (2, True)])
        assert isinstance(curve, SurvivalCurve)
        assert curve.survival_at(1) == 0.5
