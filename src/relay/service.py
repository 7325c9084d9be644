from collections import namedtuple
from http import HTTPStatus

from .bootstrap import Settings
from .dispatch import Deadline, DispatchError, DispatchTimeout, dispatch
from .validation import Rejected, validate

Outcome = namedtuple("Outcome", ["status", "reason", "message_id"])


class Relay:
    """Validate a webhook, then hand its body to the queue."""

    def __init__(self, settings: Settings, sqs):
        self.settings = settings
        self.sqs = sqs

    def handle(self, method, headers, body, deadline: Deadline, base64_encoded=False) -> Outcome:
        try:
            raw = validate(method, headers, body, self.settings.secret, base64_encoded)
        except Rejected as e:
            return Outcome(e.status, e.reason, None)

        try:
            message_id = dispatch(self.sqs, self.settings.queue_url, raw.decode("utf-8"), deadline)
        except DispatchTimeout as e:
            return Outcome(HTTPStatus.GATEWAY_TIMEOUT, str(e), None)
        except DispatchError as e:
            return Outcome(HTTPStatus.BAD_GATEWAY, str(e), None)

        return Outcome(HTTPStatus.OK, "enqueued", message_id)
