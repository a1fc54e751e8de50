from tortoise import fields
from tortoise.models import Model


class User(Model):
    id = fields.IntField(primary_key=True)
    name = fields.CharField(max_length=255, null=True)
    email = fields.CharField(max_length=255, null=True)

    quiet_hours: fields.ReverseRelation["QuietHour"]

    created_at = fields.DatetimeField(auto_now_add=True)
