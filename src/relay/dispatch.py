import threading
import time
from concurrent import futures
from dataclasses import dataclass

from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    ConnectTimeoutError,
    ReadTimeoutError,
)


class DispatchError(Exception):
    """The queue refused or failed the message."""


class DispatchTimeout(DispatchError):
    """The deadline passed before the queue confirmed the message."""


@dataclass(frozen=True)
class Deadline:
    expires_at: float  # time.monotonic() value

    @classmethod
    def after(cls, seconds: float) -> "Deadline":
        return cls(time.monotonic() + seconds)

    @classmethod
    def from_lambda_context(cls, context, default: float, margin_ms: int = 0) -> "Deadline":
        """Deadline ending `margin_ms` before the invocation is killed."""
        remaining = getattr(context, "get_remaining_time_in_millis", None)
        if remaining is None:
            return cls.after(default)
        return cls.after(max(0, remaining() - margin_ms) / 1000.0)

    def remaining(self) -> float:
        return max(0.0, self.expires_at - time.monotonic())

    @property
    def expired(self) -> bool:
        return self.remaining() <= 0


def _send_in_background(sqs, queue_url: str, body: str) -> futures.Future:
    # One daemon thread per send: a stuck send never delays another request.
    # The thread itself is bounded by the client's connect/read timeouts.
    future = futures.Future()

    def run():
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(sqs.send_message(QueueUrl=queue_url, MessageBody=body))
        except Exception as e:
            future.set_exception(e)

    threading.Thread(target=run, name="relay-dispatch", daemon=True).start()
    return future


def dispatch(sqs, queue_url: str, body: str, deadline: Deadline) -> str:
    """Send `body` to the queue unchanged and return the SQS message id."""
    if deadline.expired:
        raise DispatchTimeout("deadline exceeded before send")

    future = _send_in_background(sqs, queue_url, body)
    try:
        resp = future.result(timeout=deadline.remaining())
    except futures.TimeoutError:
        raise DispatchTimeout("deadline exceeded during send") from None
    except (ConnectTimeoutError, ReadTimeoutError) as e:
        raise DispatchTimeout(str(e)) from e
    except (BotoCoreError, ClientError) as e:
        raise DispatchError(str(e)) from e

    return resp["MessageId"]
