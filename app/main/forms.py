# ==============================================================================
# app/main/forms.py
# ------------------------------------------------------------------------------
# Defines web forms using Flask-WTF for user input and validation.
# ==============================================================================

from flask_wtf import FlaskForm
from wtforms import StringField, SubmitField, PasswordField, HiddenField
from wtforms.validators import InputRequired, ValidationError

from app.analytics.normalize import is_number, parse_number


class AdminLoginForm(FlaskForm):
    """Form for admin login."""
    password = PasswordField('Senha', validators=[InputRequired(message="A senha é obrigatória.")])
    submit = SubmitField('Entrar')


class ParameterSectionForm(FlaskForm):
    """
    CSRF-protected post of one section of the parameters page. The edited
    values come as extra request fields named '<kind>::<key>[::<column>]'.
    """
    section = HiddenField(validators=[InputRequired()])
    submit = SubmitField('Salvar alterações')


class WeightRange:
    """Accepts numbers written with a comma or a dot within [minimum, maximum]."""

    def __init__(self, minimum, maximum, message=None):
        self.minimum = minimum
        self.maximum = maximum
        self.message = message

    def __call__(self, form, field):
        text = str(field.data or '').strip().replace(',', '.')
        if not is_number(text):
            raise ValidationError(f"{field.label.text}: valor inválido.")
        value = parse_number(text)
        if not self.minimum <= value <= self.maximum:
            raise ValidationError(self.message or
                                  f"{field.label.text}: o peso deve estar entre {self.minimum} e {self.maximum}.")


def weights_form_class(weights, quarters, max_weight):
    """
    Builds a form with one field per indicator and quarter.

    Returns (form_class, field_map) where field_map maps each field name to
    its (indicator, quarter) pair.
    """
    class WeightsForm(FlaskForm):
        section = HiddenField(default='pesos')
        submit = SubmitField('Salvar pesos')

    field_map = {}
    for index, indicator in enumerate(weights):
        for quarter in quarters:
            name = f'peso_{index}_{quarter}'
            setattr(WeightsForm, name, StringField(
                f'{indicator} (Q{quarter})',
                validators=[InputRequired(message="O peso é obrigatório."), WeightRange(0, max_weight)],
                default=weights[indicator].get(quarter, ''),
            ))
            field_map[name] = (indicator, quarter)
    return WeightsForm, field_map
