"""Forms for the user blueprint."""

from wtforms import StringField
from wtforms.validators import Length, Optional, Regexp

from ecommunity.forms import JSONForm


class UpdateProfileForm(JSONForm):
    """Form for updating the editable parts of a profile.

    Every field is optional; only the keys present in the request are applied.
    """

    username = StringField(
        "Username",
        validators=[
            Optional(),
            Length(min=3, max=25),
            Regexp(
                r"^[A-Za-z0-9_.]*$",
                message="Username must have only letters, numbers, dots or underscores",
            ),
        ],
    )
    firstname = StringField("First name", validators=[Optional(), Length(max=50)])
    lastname = StringField("Last name", validators=[Optional(), Length(max=50)])
    about = StringField("About", validators=[Optional(), Length(max=500)])
    livesin = StringField("Lives in", validators=[Optional(), Length(max=100)])
