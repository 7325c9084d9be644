from flask import Flask
from werkzeug.exceptions import HTTPException

from src.relay.bootstrap import bootstrap
from src.relay.config import Config, aws_client
from src.relay.service import Relay

from .extensions import configure_logging
from .webhooks.routes import webhooks_bp


def create_app(config=None, sqs=None, kms=None):
    """Build the webhook relay app.

    The secret is decrypted before any route exists; a BootstrapError
    propagates and no app is returned.
    """
    config = config or Config()

    app = Flask(__name__)
    app.config.from_object(config)
    configure_logging(app)

    settings = bootstrap(
        config.QUEUE_URL,
        config.GITHUB_SECRET,
        kms if kms is not None else aws_client("kms", config),
    )
    app.extensions["relay"] = Relay(
        settings, sqs if sqs is not None else aws_client("sqs", config)
    )
    app.logger.info("bootstrapped")

    # blueprints
    app.register_blueprint(webhooks_bp, url_prefix="/webhooks")

    @app.get("/healthz")
    def healthz():
        return {"ok": True}, 200

    # status only, never details
    @app.errorhandler(500)
    def internal_error(e):
        return "", 500

    # router-level errors (unrouted verbs, unknown paths) too
    @app.errorhandler(HTTPException)
    def http_error(e):
        return "", e.code

    return app
