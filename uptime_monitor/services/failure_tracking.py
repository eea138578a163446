from __future__ import annotations

from dataclasses import dataclass

ALERT_AFTER_FAILURES = 2


@dataclass(frozen=True)
class FailureDecision:
    consecutive_failures: int
    active_alert: bool
    should_alert: bool


def evaluate(consecutive_failures: int, active_alert: bool, is_up: bool) -> FailureDecision:
    """Derive the next failure/alert state of a target from one probe outcome.

    A success resets the failure streak but leaves ``active_alert`` untouched;
    the flag is only cleared by an explicit edit of the target. A failure that
    brings the streak to ``ALERT_AFTER_FAILURES`` or more alerts once per
    episode.
    """
    if is_up:
        return FailureDecision(consecutive_failures=0, active_alert=active_alert, should_alert=False)

    failures = consecutive_failures + 1
    if failures >= ALERT_AFTER_FAILURES and not active_alert:
        return FailureDecision(consecutive_failures=failures, active_alert=True, should_alert=True)
    return FailureDecision(consecutive_failures=failures, active_alert=active_alert, should_alert=False)
