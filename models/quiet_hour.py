from tortoise.models import Model
from tortoise import fields


class QuietHour(Model):
    id = fields.IntField(primary_key=True)
    user = fields.ForeignKeyField("models.User", related_name="quiet_hours")
    start_time = fields.DatetimeField()
    end_time = fields.DatetimeField()
    notified = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "quiet_hours"
        indexes = (("notified", "start_time"),)
