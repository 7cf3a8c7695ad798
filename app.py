"""Main entry point for the application."""

import os

from ecommunity import create_app
from ecommunity.extensions import socketio

app = create_app()


if __name__ == "__main__":
    port = int(os.environ.get("PORT") or 5000)
    socketio.run(app, debug=True, host="0.0.0.0", port=port)  # nosec
