"""Forms for the community blueprint."""

from wtforms import StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, Optional

from ecommunity.core.constants import PRIVACY_MODES
from ecommunity.forms import JSONForm


class CommunityForm(JSONForm):
    """Form for creating a new community."""

    name = StringField("Community name", validators=[DataRequired(), Length(max=100)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=1000)])
    privacy = StringField(
        "Privacy",
        validators=[
            Optional(),
            AnyOf(PRIVACY_MODES, message="Privacy must be public, private or read-only"),
        ],
    )


class MemberForm(JSONForm):
    """Names the member an admin action applies to."""

    member = StringField("Member", validators=[DataRequired()])
