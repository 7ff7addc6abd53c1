"""Daily trigger for the recurring-rule automation.

The automation runs at most once per local calendar day. The last run day is
kept in an injected KeyValueStore under LAST_AUTOMATION_DAY_KEY; a new day
produces a new key, so the guard resets itself at midnight.
"""
from datetime import date, datetime
from typing import Callable
from database.settings_store import KeyValueStore
from services.recurring_engine import AutomationResult
from utils.constants import AUTOMATION_PREVIEW_NAMES, LAST_AUTOMATION_DAY_KEY
from utils.date_helpers import as_date, local_date_key
from utils.logging_setup import get_logger

log = get_logger("automation")


def summarize(result: AutomationResult) -> str | None:
    """One-line message for the UI, or None when nothing was applied."""
    if result.applied_count == 0:
        return None
    preview = ", ".join(result.applied_names[:AUTOMATION_PREVIEW_NAMES])
    suffix = "…" if len(result.applied_names) > AUTOMATION_PREVIEW_NAMES else ""
    return (
        f"Today's recurring check applied {result.applied_count} transactions "
        f"({preview}{suffix})."
    )


class RecurringAutomation:
    def __init__(
        self,
        store: KeyValueStore,
        check_and_apply: Callable[[date], AutomationResult],
        clock: Callable[[], datetime] = datetime.now,
        key: str = LAST_AUTOMATION_DAY_KEY,
    ):
        self._store = store
        self._check_and_apply = check_and_apply
        self._clock = clock
        self._key = key
        self.message: str | None = None

    def has_run_today(self, now: datetime | None = None) -> bool:
        now = now if now is not None else self._clock()
        return self._store.get(self._key) == local_date_key(now)

    def run(self, now: datetime | None = None) -> AutomationResult | None:
        """Run the recurring check unless it already ran today.

        Returns the result, or None when skipped. If the check raises or some
        rules fail to apply, the day is released again so the next start
        retries; rules that did apply are not repeated because they are no
        longer due.
        """
        now = now if now is not None else self._clock()
        day_key = local_date_key(now)
        previous = self._store.get(self._key)
        if previous == day_key:
            log.debug("Recurring check already ran on %s", day_key)
            return None
        if not self._claim(previous, day_key):
            log.info("Recurring check for %s claimed by another session", day_key)
            return None

        try:
            result = self._check_and_apply(as_date(now))
        except Exception:
            self._release(previous)
            raise
        if result.failed_names:
            log.warning(
                "Recurring check on %s failed for %s; will retry on next start",
                day_key, ", ".join(result.failed_names),
            )
            self._release(previous)

        log.info("Recurring check on %s applied %d rule(s)", day_key, result.applied_count)
        self.message = summarize(result)
        return result

    def clear_message(self):
        self.message = None

    def _release(self, previous: str | None):
        self._store.set(self._key, previous or "")

    def _claim(self, previous: str | None, day_key: str) -> bool:
        # Only one session can win a compare_and_set; plain stores just overwrite.
        compare_and_set = getattr(self._store, "compare_and_set", None)
        if compare_and_set is None:
            self._store.set(self._key, day_key)
            return True
        return compare_and_set(self._key, previous, day_key)
