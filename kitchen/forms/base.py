"""Shared pieces for request-body forms."""

from flask import request
from flask_wtf import FlaskForm
from wtforms import Field
from werkzeug.datastructures import ImmutableMultiDict
from wtforms.validators import Optional, StopValidation, ValidationError

from kitchen.errors import Validation


class ApiForm(FlaskForm):
    """Form bound to a JSON body (or multipart form data).

    CSRF is checked by the CSRFProtect extension on the request header, so
    the per-form token is switched off.
    """

    class Meta:
        csrf = False

        def wrap_formdata(self, form, formdata):
            # JSON nulls reach the fields as "not sent"; provided() still sees them.
            formdata = super().wrap_formdata(form, formdata)
            if formdata is not None and request.is_json:
                return ImmutableMultiDict(
                    [(key, value) for key, value in formdata.items(multi=True) if value is not None]
                )
            return formdata

    def _raw_payload(self):
        if request.is_json:
            return request.get_json(silent=True) or {}
        return request.form

    def provided(self, name):
        """Whether the client sent ``name`` at all, even as null or []."""
        return name in self._raw_payload()

    def payload(self):
        """Validated data for the fields the client sent."""
        return {name: field.data for name, field in self._fields.items() if self.provided(name)}

    def validate_or_raise(self):
        if not self.validate():
            raise Validation('Validation failed', details=self.errors)
        return self


class ListField(Field):
    """Multi-valued field: a JSON array or a repeated form key."""

    def process_formdata(self, valuelist):
        self.data = list(valuelist)

    def _value(self):
        return ','.join(self.data or [])


class EachIn:
    """Every value of a ListField must be one of ``values``."""

    def __init__(self, values, message=None):
        self.values = list(values)
        self.message = message

    def __call__(self, form, field):
        invalid = [value for value in field.data or [] if value not in self.values]
        if invalid:
            message = self.message or f'Invalid value(s): {", ".join(map(str, invalid))}'
            raise ValidationError(message)


class Nullable(Optional):
    """Optional that also treats a JSON null as empty."""

    def __call__(self, form, field):
        if field.raw_data and field.raw_data[0] is None:
            field.errors[:] = []
            raise StopValidation()
        super().__call__(form, field)
