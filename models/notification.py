from tortoise.models import Model
from tortoise import fields


class Notification(Model):
    """Proof that a reminder went out for a quiet hour block.

    Lives in the ``ledger`` app, which may sit on a different database than
    the blocks, so the block and owner are stored as plain ids.
    """

    id = fields.IntField(primary_key=True)
    quiet_hour_id = fields.IntField()
    user_id = fields.IntField()
    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField()
    sent_at = fields.DatetimeField()

    class Meta:
        table = "notifications"
        unique_together = (("quiet_hour_id", "user_id"),)
