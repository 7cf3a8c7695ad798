"""Initialize the Flask app and its extensions."""

import json
import os

import firebase_admin
from firebase_admin import credentials, firestore
from flask import Flask, current_app, g, request

from .extensions import socketio
from .realtime import PUBLISHER_EXTENSION, SocketIOPublisher

DEFAULT_CORS_ORIGINS = "http://localhost:3000,http://127.0.0.1:3000"


def _init_firebase(app):
    """Initialize the Firebase Admin SDK from env, file, or default credentials."""
    cred = None
    project_id = None

    # First, try to load from environment variable (for production)
    cred_json = os.environ.get("FIREBASE_CREDENTIALS_JSON")
    if cred_json:
        try:
            cred_info = json.loads(cred_json)
            project_id = cred_info.get("project_id")
            cred = credentials.Certificate(cred_info)
        except (json.JSONDecodeError, ValueError) as e:
            app.logger.error(f"Error parsing FIREBASE_CREDENTIALS_JSON: {e}")

    # If env var fails or is not present, try loading from file (for local dev)
    if not cred:
        cred_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)), "firebase_credentials.json"
        )
        if os.path.exists(cred_path):
            try:
                with open(cred_path, "r") as f:
                    cred_info = json.load(f)
                project_id = cred_info.get("project_id")
                cred = credentials.Certificate(cred_path)
            except (json.JSONDecodeError, ValueError) as e:
                app.logger.error(f"Error loading credentials from file: {e}")

    # If both methods fail, fallback to default credentials
    if not cred:
        try:
            cred = credentials.ApplicationDefault()
            project_id = os.environ.get("FIREBASE_PROJECT_ID")
        except Exception as e:
            app.logger.error(
                f"Could not find any valid credentials (env, file, or default): {e}"
            )

    if cred and not firebase_admin._apps:
        try:
            options = {"projectId": project_id} if project_id else None
            firebase_admin.initialize_app(cred, options)
        except ValueError:
            # This can happen if the app is already initialized, which is fine.
            app.logger.info("Firebase app already initialized.")


def create_app(test_config=None, publisher=None):
    """Create and configure an instance of the Flask application.

    `publisher` is the live-push interface handed to the services; it defaults
    to the Socket.IO server.
    """
    app = Flask(__name__, instance_relative_config=True)

    app_env = os.environ.get("APP_ENV", "development")
    app.config.from_mapping(
        SECRET_KEY=os.environ.get("SECRET_KEY") or "dev",
        TOKEN_MAX_AGE=int(os.environ.get("TOKEN_MAX_AGE") or 24 * 60 * 60),
        CORS_ORIGINS=[
            origin.strip()
            for origin in (os.environ.get("CORS_ORIGINS") or DEFAULT_CORS_ORIGINS).split(",")
            if origin.strip()
        ],
        SHOW_STACK_TRACES=(
            os.environ.get("SHOW_STACK_TRACES")
            or ("false" if app_env == "production" else "true")
        ).lower()
        in ["true", "1", "t"],
    )

    if test_config:
        app.config.update(test_config)

    # Initialize Firebase Admin SDK only if not in testing mode
    if not app.config.get("TESTING"):
        _init_firebase(app)

    socketio.init_app(app, cors_allowed_origins=app.config["CORS_ORIGINS"])
    app.extensions[PUBLISHER_EXTENSION] = publisher or SocketIOPublisher(socketio)

    # Register blueprints
    from . import auth as auth_bp

    app.register_blueprint(auth_bp.bp)

    from . import user as user_bp

    app.register_blueprint(user_bp.bp)

    from . import friendship as friendship_bp

    app.register_blueprint(friendship_bp.bp)

    from . import notification as notification_bp

    app.register_blueprint(notification_bp.bp)

    from . import community as community_bp

    app.register_blueprint(community_bp.bp)

    from . import post as post_bp

    app.register_blueprint(post_bp.bp)

    from . import discussion as discussion_bp

    app.register_blueprint(discussion_bp.bp)

    from . import tag as tag_bp

    app.register_blueprint(tag_bp.bp)

    from . import error_handlers

    app.register_blueprint(error_handlers.error_handlers_bp)

    @app.before_request
    def load_authenticated_user():
        """If a bearer token is present, load the user it names into g."""
        from .auth.utils import bearer_token, decode_token
        from .errors import AuthenticationError

        g.user = None
        g.auth_error = None
        token = bearer_token(request.headers.get("Authorization"))
        if token is None:
            return

        try:
            claims = decode_token(token)
        except AuthenticationError as e:
            g.auth_error = e.message
            return

        user_id = claims.get("id")
        try:
            db = firestore.client()
            user_doc = db.collection("users").document(user_id).get()
            if user_doc.exists:
                g.user = user_doc.to_dict()
                g.user["id"] = user_id
            else:
                g.auth_error = "Invalid token."
                current_app.logger.warning(
                    f"Token for user {user_id} but user not found in Firestore."
                )
        except Exception as e:
            current_app.logger.error(f"Error loading user from token: {e}")
            g.auth_error = "Invalid token."

    @app.after_request
    def add_cors_headers(response):
        """Allow the configured front-end origins to call the API."""
        origin = request.headers.get("Origin")
        if origin and origin in app.config["CORS_ORIGINS"]:
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Credentials"] = "true"
            response.headers["Access-Control-Allow-Headers"] = (
                "Content-Type, Authorization, X-Requested-With"
            )
            response.headers["Access-Control-Allow-Methods"] = (
                "GET, POST, PUT, DELETE, OPTIONS, PATCH"
            )
        return response

    @app.route("/")
    def index():
        """Simple liveness message for connection testing."""
        return {"message": "Server is running!"}

    @app.route("/health")
    def health_check():
        """Perform a simple health check."""
        return "OK", 200

    return app
