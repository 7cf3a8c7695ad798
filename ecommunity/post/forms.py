"""Forms for the post blueprint."""

from wtforms import StringField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional

from ecommunity.forms import JSONForm


class PostForm(JSONForm):
    """Form for creating a post."""

    title = StringField("Title", validators=[DataRequired(), Length(max=200)])
    content = TextAreaField("Content", validators=[DataRequired()])
    community = StringField("Community", validators=[DataRequired()])


class EditPostForm(JSONForm):
    """Form for editing a post; omitted fields stay unchanged."""

    title = StringField("Title", validators=[Optional(), Length(max=200)])
    content = TextAreaField("Content", validators=[Optional()])


class CommentForm(JSONForm):
    """Form for commenting on a post or replying to a comment."""

    content = TextAreaField("Content", validators=[DataRequired()])
    parentComment = StringField("Parent comment", validators=[Optional()])
