from datetime import datetime, timezone
from uuid import uuid4

import pytest

from clstr.core.exceptions import BackendUnavailable
from clstr.schemas.notification import (
    Connection,
    ConnectionStatus,
    Notification,
    NotificationType,
)
from clstr.services.reconciliation import annotate_notifications, resolve_actionability

NOW = datetime(2026, 3, 2, tzinfo=timezone.utc)


def _connection(receiver_id, status=ConnectionStatus.PENDING) -> Connection:
    return Connection(id=uuid4(), requester_id=uuid4(), receiver_id=receiver_id, status=status)


def _notification(user_id, related_id=None, type=NotificationType.CONNECTION) -> Notification:
    return Notification(
        id=uuid4(),
        user_id=user_id,
        type=type,
        content="Someone wants to connect",
        related_id=related_id,
        created_at=NOW,
    )


@pytest.mark.parametrize(
    "status, actionable",
    [
        (ConnectionStatus.PENDING, True),
        (ConnectionStatus.ACCEPTED, False),
        (ConnectionStatus.REJECTED, False),
        (ConnectionStatus.BLOCKED, False),
    ],
)
def test_actionable_only_while_pending(status, actionable):
    me = uuid4()
    connection = _connection(me, status)
    notification = _notification(me, connection.id)

    assert resolve_actionability(notification, lambda _: connection, me) is actionable


def test_not_actionable_for_requester():
    me = uuid4()
    connection = _connection(receiver_id=uuid4())

    assert not resolve_actionability(_notification(me, connection.id), lambda _: connection, me)


def test_not_actionable_without_connection():
    me = uuid4()

    assert not resolve_actionability(_notification(me, uuid4()), lambda _: None, me)
    assert not resolve_actionability(_notification(me, None), lambda _: None, me)
    assert not resolve_actionability(
        _notification(me, uuid4(), NotificationType.MENTORSHIP), lambda _: None, me
    )


def test_lookup_failure_hides_actions():
    me = uuid4()

    def failing(_):
        raise BackendUnavailable("down")

    assert not resolve_actionability(_notification(me, uuid4()), failing, me)


def test_annotate_batches_lookup(store):
    me = uuid4()
    pending = store.add_connection(_connection(me))
    accepted = store.add_connection(_connection(me, ConnectionStatus.ACCEPTED))
    notifications = [
        _notification(me, pending.id),
        _notification(me, accepted.id),
        _notification(me, uuid4(), NotificationType.MENTORSHIP),
    ]

    views = annotate_notifications(notifications, store, me)

    assert [v.actionable for v in views] == [True, False, False]
    assert [v.id for v in views] == [n.id for n in notifications]


def test_annotate_survives_store_failure(store, monkeypatch):
    me = uuid4()
    pending = store.add_connection(_connection(me))

    def down(_ids):
        raise BackendUnavailable("down")

    monkeypatch.setattr(store, "get_connections", down)

    views = annotate_notifications([_notification(me, pending.id)], store, me)

    assert [v.actionable for v in views] == [False]
