from __future__ import annotations

import pytest

from uptime_monitor.services.failure_tracking import ALERT_AFTER_FAILURES, FailureDecision, evaluate


def _run(outcomes: list[bool], failures: int = 0, active: bool = False) -> tuple[list[FailureDecision], int]:
    decisions = []
    alerts = 0
    for is_up in outcomes:
        decision = evaluate(failures, active, is_up)
        failures, active = decision.consecutive_failures, decision.active_alert
        alerts += decision.should_alert
        decisions.append(decision)
    return decisions, alerts


class TestEvaluate:
    def test_first_failure_does_not_alert(self) -> None:
        assert evaluate(0, False, is_up=False) == FailureDecision(1, False, False)

    def test_second_failure_alerts_and_sets_flag(self) -> None:
        assert evaluate(1, False, is_up=False) == FailureDecision(2, True, True)

    def test_failure_with_active_alert_does_not_redispatch(self) -> None:
        assert evaluate(5, True, is_up=False) == FailureDecision(6, True, False)

    def test_success_resets_failures_and_keeps_alert(self) -> None:
        assert evaluate(7, True, is_up=True) == FailureDecision(0, True, False)

    def test_success_without_failures_is_unchanged(self) -> None:
        assert evaluate(0, False, is_up=True) == FailureDecision(0, False, False)

    def test_threshold_is_two(self) -> None:
        assert ALERT_AFTER_FAILURES == 2


class TestEpisodes:
    @pytest.mark.parametrize("length", [2, 3, 10])
    def test_exactly_one_alert_per_episode(self, length: int) -> None:
        _, alerts = _run([False] * length)
        assert alerts == 1

    def test_flag_stays_sticky_after_recovery(self) -> None:
        # the flag is only cleared by an explicit edit, so a second episode stays quiet
        decisions, alerts = _run([False, False, True, False, False, False])
        assert alerts == 1
        assert decisions[2].consecutive_failures == 0
        assert decisions[2].active_alert is True
        assert decisions[-1].consecutive_failures == 3

    def test_new_episode_alerts_after_manual_clear(self) -> None:
        decisions, _ = _run([False, False, True])
        assert decisions[-1].active_alert is True

        _, alerts = _run([False, False], failures=0, active=False)
        assert alerts == 1
