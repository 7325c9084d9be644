import threading
import time

import boto3
import pytest
from botocore.exceptions import ClientError, ConnectTimeoutError, ReadTimeoutError
from botocore.stub import Stubber

from src.relay.dispatch import Deadline, DispatchError, DispatchTimeout, dispatch
from tests.fakes import QUEUE_URL, FakeLambdaContext, FakeSQS


def test_deadline_from_lambda_context_subtracts_margin():
    d = Deadline.from_lambda_context(FakeLambdaContext(3000), default=99, margin_ms=1000)
    assert 1.5 < d.remaining() <= 2.0
    assert not d.expired


def test_deadline_without_context_uses_default():
    d = Deadline.from_lambda_context(None, default=5)
    assert 4.5 < d.remaining() <= 5.0


def test_deadline_margin_larger_than_remaining_is_expired():
    d = Deadline.from_lambda_context(FakeLambdaContext(100), default=99, margin_ms=200)
    assert d.expired
    assert d.remaining() == 0.0


def test_dispatch_sends_body_unchanged():
    sqs = boto3.client("sqs", region_name="us-east-1")
    stubber = Stubber(sqs)
    stubber.add_response(
        "send_message",
        expected_params={"QueueUrl": QUEUE_URL, "MessageBody": '{"a":1}'},
        service_response={"MessageId": "m-1"},
    )
    with stubber:
        assert dispatch(sqs, QUEUE_URL, '{"a":1}', Deadline.after(5)) == "m-1"
        stubber.assert_no_pending_responses()


def test_queue_error_is_dispatch_error():
    sqs = boto3.client("sqs", region_name="us-east-1")
    stubber = Stubber(sqs)
    stubber.add_client_error(
        "send_message",
        service_error_code="AWS.SimpleQueueService.NonExistentQueue",
        service_message="The specified queue does not exist",
        http_status_code=400,
    )
    with stubber, pytest.raises(DispatchError) as exc:
        dispatch(sqs, QUEUE_URL, "{}", Deadline.after(5))
    assert not isinstance(exc.value, DispatchTimeout)


@pytest.mark.parametrize(
    "error",
    [
        ReadTimeoutError(endpoint_url=QUEUE_URL),
        ConnectTimeoutError(endpoint_url=QUEUE_URL),
    ],
)
def test_transport_timeout_is_dispatch_timeout(error):
    with pytest.raises(DispatchTimeout):
        dispatch(FakeSQS(error=error), QUEUE_URL, "{}", Deadline.after(5))


def test_expired_deadline_never_sends():
    sqs = FakeSQS()
    with pytest.raises(DispatchTimeout):
        dispatch(sqs, QUEUE_URL, "{}", Deadline.after(0))
    assert sqs.sent == []


def test_slow_queue_fails_promptly_at_deadline():
    sqs = FakeSQS(delay=0.5)
    started = time.monotonic()
    with pytest.raises(DispatchTimeout):
        dispatch(sqs, QUEUE_URL, "{}", Deadline.after(0.05))
    assert time.monotonic() - started < 0.4


def test_unexpected_errors_propagate():
    with pytest.raises(RuntimeError):
        dispatch(FakeSQS(error=RuntimeError("boom")), QUEUE_URL, "{}", Deadline.after(5))


def test_client_error_is_not_swallowed_as_timeout():
    err = ClientError({"Error": {"Code": "ThrottlingException", "Message": "slow down"}}, "SendMessage")
    with pytest.raises(DispatchError, match="slow down"):
        dispatch(FakeSQS(error=err), QUEUE_URL, "{}", Deadline.after(5))


def test_stuck_sends_do_not_block_a_healthy_queue():
    outcomes = []

    def send_to_stuck_queue():
        try:
            dispatch(FakeSQS(delay=1.0), QUEUE_URL, "{}", Deadline.after(0.1))
            outcomes.append("ok")
        except DispatchTimeout:
            outcomes.append("timeout")

    stuck = [threading.Thread(target=send_to_stuck_queue) for _ in range(16)]
    for t in stuck:
        t.start()
    for t in stuck:
        t.join()
    assert outcomes == ["timeout"] * 16

    # the stuck sends are still running; a healthy queue must not wait on them
    healthy = FakeSQS()
    assert dispatch(healthy, QUEUE_URL, '{"a":1}', Deadline.after(0.5)) == "m-1"
    assert healthy.sent == [{"QueueUrl": QUEUE_URL, "MessageBody": '{"a":1}'}]
