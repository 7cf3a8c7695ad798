"""Forms for the auth blueprint."""

from wtforms import PasswordField, StringField
from wtforms.validators import DataRequired, Email, Length, Optional, Regexp

from ecommunity.forms import JSONForm


class LoginForm(JSONForm):
    """Login form. The email field accepts either a username or an email."""

    email = StringField("Email or username", validators=[DataRequired()])
    password = PasswordField("Password", validators=[DataRequired()])


class RegisterForm(JSONForm):
    """Registration form."""

    username = StringField(
        "Username",
        validators=[
            DataRequired(),
            Length(min=3, max=25),
            Regexp(
                r"^[A-Za-z0-9_.]*$",
                message="Username must have only letters, numbers, dots or underscores",
            ),
        ],
    )
    email = StringField("Email", validators=[Optional(), Email()])
    password = PasswordField("Password", validators=[DataRequired(), Length(min=6)])
    firstname = StringField("First name", validators=[DataRequired(), Length(max=50)])
    lastname = StringField("Last name", validators=[DataRequired(), Length(max=50)])
