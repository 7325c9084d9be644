# src/handlers/ingest.py
import json
import os
from http import HTTPStatus

from src.relay.bootstrap import bootstrap
from src.relay.config import Config, aws_client
from src.relay.dispatch import Deadline
from src.relay.service import Relay

cfg = Config()

# Single clients (wrapped by Stubber in tests)
sqs = aws_client("sqs", cfg)
kms = aws_client("kms", cfg)

# Published once by init(); read-only afterwards.
relay = None


def _log(lvl, msg, **fields):
    print(json.dumps({"lvl": lvl, "msg": msg, **fields}), flush=True)


def init():
    """Decrypt the secret and publish the relay. Raises BootstrapError on bad config."""
    global relay
    if relay is not None:
        raise RuntimeError("relay already initialized")
    settings = bootstrap(cfg.QUEUE_URL, cfg.GITHUB_SECRET, kms)
    relay = Relay(settings, sqs)
    _log("info", "bootstrapped")
    return relay


def _method(event):
    # REST API proxy events carry httpMethod; HTTP API 2.0 events nest it.
    return event.get("httpMethod") or (
        ((event.get("requestContext") or {}).get("http") or {}).get("method", "")
    )


def handler(event, context):
    if relay is None:
        raise RuntimeError("relay is not initialized")

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    try:
        outcome = relay.handle(
            _method(event),
            event.get("headers"),
            event.get("body"),
            Deadline.from_lambda_context(context, cfg.DISPATCH_TIMEOUT, cfg.DEADLINE_MARGIN_MS),
            base64_encoded=bool(event.get("isBase64Encoded")),
        )
        status = outcome.status
        if status == HTTPStatus.OK:
            _log("info", "enqueued", message_id=outcome.message_id)
        elif status >= 500:
            _log("error", "dispatch_failed", status=int(status), reason=outcome.reason)
        else:
            _log("warn", "rejected", status=int(status), reason=outcome.reason)
    except Exception as e:
        _log("error", "unhandled", error=repr(e))

    return {"statusCode": int(status), "body": ""}


# Lambda runs module import as its init phase; bad config fails it there.
if "AWS_LAMBDA_RUNTIME_API" in os.environ:
    init()
