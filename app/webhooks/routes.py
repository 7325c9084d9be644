# app/webhooks/routes.py
from flask import Blueprint, current_app, request

from src.relay.dispatch import Deadline

webhooks_bp = Blueprint("webhooks", __name__)

# Every verb reaches the view so the relay answers 405 itself.
_ALL_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]


@webhooks_bp.route("/github", methods=_ALL_METHODS, provide_automatic_options=False)
def github_webhook():
    relay = current_app.extensions["relay"]
    deadline = Deadline.after(current_app.config["DISPATCH_TIMEOUT"])

    outcome = relay.handle(
        request.method,
        dict(request.headers),
        request.get_data(),
        deadline,
    )

    if outcome.status >= 500:
        current_app.logger.error(f"webhook dispatch failed ({int(outcome.status)}): {outcome.reason}")
    elif outcome.status >= 400:
        current_app.logger.warning(f"webhook rejected ({int(outcome.status)}): {outcome.reason}")
    else:
        current_app.logger.info(f"webhook enqueued: {outcome.message_id}")

    return "", int(outcome.status)
