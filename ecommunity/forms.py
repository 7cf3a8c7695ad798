"""Base form for JSON request bodies."""

from flask_wtf import FlaskForm  # type: ignore


class JSONForm(FlaskForm):
    """A FlaskForm fed from the JSON body of a bearer-token API request.

    CSRF protection is off: the API authenticates with the Authorization
    header, not a cookie.
    """

    class Meta:
        csrf = False
