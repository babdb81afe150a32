"""
Request forms.

FlaskForm reads either form data or a JSON body, so the same forms back
HTML posts and the JSON API.
"""
from flask_wtf import FlaskForm
from wtforms import PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, Length, Optional


class LoginForm(FlaskForm):
    """Admin login."""

    username = StringField(
        'Usuário',
        validators=[DataRequired(message='Informe o usuário'), Length(max=100)]
    )

    password = PasswordField(
        'Senha',
        validators=[DataRequired(message='Informe a senha'), Length(max=200)]
    )


class CustomerForm(FlaskForm):
    """New customer."""

    name = StringField(
        'Nome',
        validators=[DataRequired(message='O nome do cliente é obrigatório'), Length(max=200)]
    )

    phone = StringField(
        'Telefone',
        validators=[Optional(), Length(max=50)],
        render_kw={'placeholder': '(11) 99999-9999'}
    )

    email = StringField(
        'Email',
        validators=[Optional(), Length(max=255)]
    )


class AdjustmentForm(FlaskForm):
    """Single stock adjustment. Quantity is parsed by the adjustment service."""

    size = StringField('Tamanho', validators=[DataRequired(message='Informe o tamanho')])

    type = SelectField(
        'Tipo',
        choices=[('IN', 'Entrada'), ('OUT', 'Saída')],
        validators=[DataRequired(message='Informe o tipo de movimentação')]
    )

    quantity = StringField('Quantidade', validators=[Optional()])

    product_id = StringField('Referência', validators=[Optional(), Length(max=36)])

    customer_id = StringField('Cliente', validators=[Optional(), Length(max=36)])


class ProductEditForm(FlaskForm):
    """Edit one reference."""

    reference = StringField(
        'Referência',
        validators=[DataRequired(message='Informe a referência'), Length(max=100)]
    )

    name = StringField(
        'Nome',
        validators=[DataRequired(message='Informe o nome'), Length(max=200)]
    )

    price = StringField('Preço', validators=[Optional()], render_kw={'placeholder': '0,00'})


class ColorEditForm(FlaskForm):
    """Rename a color group."""

    color = StringField(
        'Cor',
        validators=[DataRequired(message='Preencha o nome da cor.'), Length(max=100)]
    )

    color_hex = StringField('Hex', validators=[Optional(), Length(max=16)])


def first_error(form: FlaskForm) -> str:
    """First validation message of a form."""
    for errors in form.errors.values():
        if errors:
            return errors[0]
    return 'Dados inválidos'
