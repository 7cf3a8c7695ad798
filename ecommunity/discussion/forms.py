"""Forms for the discussion blueprint."""

from wtforms import IntegerField, StringField, TextAreaField
from wtforms.validators import AnyOf, DataRequired, Length, NumberRange, Optional

from ecommunity.core.constants import DISCUSSION_CATEGORIES
from ecommunity.forms import JSONForm


class DiscussionForm(JSONForm):
    """Form for opening a discussion."""

    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    description = TextAreaField("Description", validators=[Optional(), Length(max=1000)])
    category = StringField(
        "Category",
        validators=[
            Optional(),
            AnyOf(DISCUSSION_CATEGORIES, message="Invalid discussion category"),
        ],
    )
    maxParticipants = IntegerField(
        "Max participants", validators=[Optional(), NumberRange(min=2, max=500)]
    )


class MessageForm(JSONForm):
    """Form for sending or editing a chat message."""

    content = TextAreaField("Message", validators=[DataRequired(), Length(max=2000)])
