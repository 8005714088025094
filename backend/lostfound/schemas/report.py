from marshmallow import EXCLUDE, Schema, fields, validate

from ..matching.types import ReportStatus


class _ReportSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    item_name = fields.Str(required=True, data_key="itemName", validate=validate.Length(min=1, max=200))
    category = fields.Str(required=True, validate=validate.Length(min=1, max=80))
    description = fields.Str(load_default="", validate=validate.Length(max=5000))
    image_url = fields.Str(data_key="imageUrl", allow_none=True, load_default=None, validate=validate.Length(max=512))


class LostReportSchema(_ReportSchema):
    location_lost = fields.Str(required=True, data_key="locationLost", validate=validate.Length(min=1, max=200))
    date_lost = fields.Date(required=True, data_key="dateLost")


class FoundReportSchema(_ReportSchema):
    location_found = fields.Str(required=True, data_key="locationFound", validate=validate.Length(min=1, max=200))
    date_found = fields.Date(required=True, data_key="dateFound")


class StatusUpdateSchema(Schema):
    status = fields.Str(required=True, validate=validate.OneOf([s.value for s in ReportStatus]))
