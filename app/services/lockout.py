"""Failed-login tracking and temporary account lockout."""

from datetime import timedelta

from app.core.security import Clock, utcnow
from app.services.admin_store import AdminStore

MAX_FAILED_ATTEMPTS = 5
LOCK_DURATION = timedelta(hours=2)


class LockoutPolicy:
    """Lock an account for a while after too many failed logins.

    The counters live on the admin row. An expired ``locked_until`` is treated
    as unlocked and only cleared by the next attempt.
    """

    def __init__(
        self,
        store: AdminStore,
        max_attempts: int = MAX_FAILED_ATTEMPTS,
        lock_duration: timedelta = LOCK_DURATION,
        clock: Clock = utcnow,
    ):
        self.store = store
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration
        self.clock = clock

    def is_locked(self, admin: dict) -> bool:
        """Check whether the account is locked right now."""
        locked_until = admin.get("locked_until")
        return locked_until is not None and locked_until > self.clock()

    async def record_failure(self, admin: dict) -> None:
        """Count a failed login, locking the account at the threshold."""
        now = self.clock()
        locked_until = admin.get("locked_until")

        # Previous lock has expired, restart the count at 1
        if locked_until is not None and locked_until <= now:
            await self.store.restart_failed_attempts(admin["id"])
            return

        attempts = (admin.get("failed_login_attempts") or 0) + 1
        new_lock = None
        if attempts >= self.max_attempts and not self.is_locked(admin):
            new_lock = now + self.lock_duration

        await self.store.increment_failed_attempts(admin["id"], locked_until=new_lock)

    async def record_success(self, admin: dict) -> None:
        """Clear failure state and stamp the login time."""
        await self.store.reset_failed_attempts(admin["id"], last_login_at=self.clock())
