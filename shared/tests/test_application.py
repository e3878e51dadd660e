from __future__ import annotations

from dataclasses import dataclass
from uuid import uuid4

import pytest
from django.test import TestCase  # type: ignore

from shared.api import result_response
from shared.application.exceptions import BusinessRuleError, NotFoundError, ValidationError
from shared.application.handlers import CommandHandler
from shared.application.message_bus import MessageBus
from shared.application.result import ErrorCode, ResultDto
from shared.application.uow import DjangoUnitOfWork
from shared.domain.base import DomainEvent, EventRecorderMixin


@dataclass(kw_only=True)
class SomethingHappened(DomainEvent):
    name: str


class Aggregate(EventRecorderMixin):
    def __init__(self):
        self.pk = uuid4()

    def touch(self, name):
        self.add_event(SomethingHappened(name=name))


def test_bus_isolates_failing_handlers():
    bus = MessageBus()
    seen = []

    def broken(event):
        raise RuntimeError("boom")

    bus.register_event_handler(SomethingHappened, broken)
    bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.name))

    bus.publish_events([SomethingHappened(name="first")])

    assert seen == ["first"]


def test_bus_subscribe_decorator():
    bus = MessageBus()

    @bus.subscribe(SomethingHappened)
    def handler(event):
        pass

    assert bus.handlers_for(SomethingHappened) == [handler]


def test_recorded_event_gets_aggregate_id():
    aggregate = Aggregate()

    aggregate.touch("x")

    assert aggregate.events[0].aggregate_id == aggregate.pk
    assert aggregate.events[0].to_dict()["event_type"] == "SomethingHappened"


def test_result_to_dict_stringifies_data():
    key = uuid4()

    payload = ResultDto.ok(key).to_dict()

    assert payload["success"] is True
    assert payload["data"] == str(key)


@pytest.mark.parametrize(
    "result, expected",
    [
        (ResultDto.failed(["bad"]), 400),
        (ResultDto.failure("missing", ErrorCode.NOT_FOUND), 404),
        (ResultDto.failure("no", ErrorCode.FORBIDDEN), 403),
        (ResultDto.failure("state", ErrorCode.INVALID_STATE), 409),
        (ResultDto.failure("taken", ErrorCode.UNAVAILABLE), 409),
        (ResultDto.failure("oops", ErrorCode.INTERNAL), 500),
    ],
)
def test_error_codes_map_to_http_status(result, expected):
    assert result_response(result).status_code == expected


class RaisingHandler(CommandHandler):
    def __init__(self, exc):
        self.exc = exc

    def _handle(self, command, current_user):
        raise self.exc


@dataclass
class Caller:
    user_id: str = "u-1"


@pytest.mark.parametrize(
    "exc, code",
    [
        (NotFoundError("Booking", 1), ErrorCode.NOT_FOUND),
        (BusinessRuleError("Rule", "broken"), ErrorCode.BUSINESS_RULE),
        (ValidationError(["a", "b"]), ErrorCode.VALIDATION),
        (KeyError("unexpected"), ErrorCode.INTERNAL),
    ],
)
def test_handler_converts_exceptions(exc, code):
    result = RaisingHandler(exc).handle(object(), Caller())

    assert not result.success
    assert result.error_code == code


def test_validation_error_keeps_all_messages():
    result = RaisingHandler(ValidationError(["a", "b"])).handle(object(), Caller())

    assert result.errors == ["a", "b"]


class UnitOfWorkTests(TestCase):
    def test_events_are_published_after_commit(self):
        bus = MessageBus()
        seen = []
        bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.name))
        aggregate = Aggregate()

        with self.captureOnCommitCallbacks(execute=True):
            with DjangoUnitOfWork(bus=bus) as uow:
                aggregate.touch("saved")
                uow.collect_events(aggregate)
                self.assertEqual(seen, [])

        self.assertEqual(seen, ["saved"])
        self.assertEqual(aggregate.events, [])

    def test_events_are_dropped_on_rollback(self):
        bus = MessageBus()
        seen = []
        bus.register_event_handler(SomethingHappened, lambda event: seen.append(event.name))
        aggregate = Aggregate()

        with self.captureOnCommitCallbacks(execute=True) as callbacks:
            with self.assertRaises(RuntimeError):
                with DjangoUnitOfWork(bus=bus) as uow:
                    aggregate.touch("lost")
                    uow.collect_events(aggregate)
                    raise RuntimeError("fail")

        self.assertEqual(callbacks, [])
        self.assertEqual(seen, [])
