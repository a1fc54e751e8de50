import hmac
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional

from helpers.time_window import DueWindow, compute_due_window


logger = logging.getLogger(__name__)


class ReconciliationError(Exception):
    pass


class AuthorizationError(ReconciliationError):
    pass


class ListError(ReconciliationError):
    pass


class LedgerReadError(ReconciliationError):
    pass


class DirectoryError(ReconciliationError):
    pass


class DeliveryError(ReconciliationError):
    pass


class LedgerWriteError(ReconciliationError):
    pass


class LedgerConflict(LedgerWriteError):
    """Another pass already recorded this (block, owner) pair."""


class FlagUpdateError(ReconciliationError):
    pass


class OutcomeStatus(Enum):
    SENT = "sent"
    SKIPPED = "skipped"


class SkipReason(Enum):
    ALREADY_NOTIFIED = "already_notified"
    LEDGER_READ_FAILED = "ledger_read_failed"
    NO_EMAIL = "no_email"
    DIRECTORY_FAILED = "directory_failed"
    DELIVERY_FAILED = "delivery_failed"


@dataclass
class BlockOutcome:
    block_id: int
    status: OutcomeStatus
    reason: Optional[SkipReason] = None
    ledger_recorded: bool = False
    flag_updated: bool = False
    error: Optional[str] = None

    @classmethod
    def skipped(cls, block_id, reason: SkipReason, error: Optional[Exception] = None):
        return cls(block_id=block_id, status=OutcomeStatus.SKIPPED, reason=reason,
                   error=str(error) if error else None)


@dataclass
class ReconciliationSummary:
    window: DueWindow
    count: int
    outcomes: List[BlockOutcome] = field(default_factory=list)
    success: bool = True

    @property
    def sent(self) -> int:
        return sum(1 for o in self.outcomes if o.status is OutcomeStatus.SENT)

    @property
    def skipped(self) -> int:
        return sum(1 for o in self.outcomes if o.status is OutcomeStatus.SKIPPED)

    def to_response(self) -> dict:
        return {
            "message": "Processing complete",
            "count": self.count,
            "sent": self.sent,
            "skipped": self.skipped,
            "success": self.success,
        }


def secret_matches(expected: Optional[str], presented: Optional[str]) -> bool:
    if not expected or not presented:
        return False
    return hmac.compare_digest(expected.encode(), presented.encode())


class ReconciliationJob:
    """One pass that turns due, unsent quiet hour blocks into reminder emails.

    Collaborators are passed in by the caller:

    * ``blocks``  - ``list_due(window)`` / ``mark_notified(block_id)``
    * ``ledger``  - ``enabled`` / ``find(...)`` / ``record(...)``
    * ``users``   - ``get_email(user_id)``
    * ``mailer``  - ``send_reminder(to, start_time, end_time)``

    Blocks are handled one at a time. Anything that goes wrong for a single
    block ends that block's pipeline and is captured in its ``BlockOutcome``;
    only authorization and listing failures abort the pass.
    """

    def __init__(self, blocks, ledger, users, mailer, cron_secret: Optional[str],
                 buffer: Optional[timedelta] = None, horizon: Optional[timedelta] = None,
                 display_tz=None):
        self.blocks = blocks
        self.ledger = ledger
        self.users = users
        self.mailer = mailer
        self.cron_secret = cron_secret
        self.buffer = buffer
        self.horizon = horizon
        self.display_tz = display_tz

    async def run(self, secret: Optional[str], now: Optional[datetime] = None) -> ReconciliationSummary:
        if not self.cron_secret:
            logger.error("CRON_SECRET is not configured; refusing reconciliation request")
            raise AuthorizationError("Unauthorized")
        if not secret_matches(self.cron_secret, secret):
            logger.warning("Reconciliation request with invalid secret")
            raise AuthorizationError("Unauthorized")

        now = now or datetime.now(timezone.utc)
        window = compute_due_window(now, self.buffer, self.horizon, self.display_tz)
        logger.info("Reconciliation window: %s", window.describe())

        try:
            due = list(await self.blocks.list_due(window))
        except ListError:
            raise
        except Exception as e:
            raise ListError(str(e)) from e

        logger.info("%d eligible quiet hour block(s)", len(due))

        use_ledger = self.ledger is not None and self.ledger.enabled
        if due and not use_ledger:
            logger.warning("No notification ledger available, skipping ledger checks and inserts")

        summary = ReconciliationSummary(window=window, count=len(due))
        for block in due:
            outcome = await self.process_block(block, now, use_ledger)
            summary.outcomes.append(outcome)

        logger.info("Reconciliation complete: %d sent, %d skipped", summary.sent, summary.skipped)
        return summary

    async def process_block(self, block, now: datetime, use_ledger: bool) -> BlockOutcome:
        block_id, owner_id = block.id, block.user_id
        logger.info("Processing block %s", block_id)

        if use_ledger:
            try:
                existing = await self.ledger.find(block_id, owner_id)
            except Exception as e:
                logger.error("Ledger lookup failed for block %s: %s", block_id, e)
                return BlockOutcome.skipped(block_id, SkipReason.LEDGER_READ_FAILED, e)
            if existing:
                logger.info("Notification already exists for block %s, skipping", block_id)
                return BlockOutcome.skipped(block_id, SkipReason.ALREADY_NOTIFIED)

        try:
            email = await self.users.get_email(owner_id)
        except Exception as e:
            logger.error("User lookup failed for block %s (user %s): %s", block_id, owner_id, e)
            return BlockOutcome.skipped(block_id, SkipReason.DIRECTORY_FAILED, e)
        if not email:
            logger.warning("No email found for user %s", owner_id)
            return BlockOutcome.skipped(block_id, SkipReason.NO_EMAIL)

        try:
            await self.mailer.send_reminder(email, block.start_time, block.end_time)
        except Exception as e:
            logger.error("Email send failed for block %s: %s", block_id, e)
            return BlockOutcome.skipped(block_id, SkipReason.DELIVERY_FAILED, e)
        logger.info("Reminder sent to %s for block %s", email, block_id)

        outcome = BlockOutcome(block_id=block_id, status=OutcomeStatus.SENT)

        if use_ledger:
            try:
                await self.ledger.record(block_id, owner_id, block.start_time, block.end_time, now)
                outcome.ledger_recorded = True
            except LedgerConflict as e:
                logger.warning("Block %s was already recorded by another pass; duplicate email sent", block_id)
                outcome.error = str(e)
            except Exception as e:
                logger.error("Ledger insert failed for block %s: %s", block_id, e)
                outcome.error = str(e)

        try:
            await self.blocks.mark_notified(block_id)
            outcome.flag_updated = True
        except Exception as e:
            logger.error("Could not mark block %s as notified: %s", block_id, e)
            outcome.error = str(e)

        return outcome
