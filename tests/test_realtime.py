from clstr.core.realtime import CacheKeys, InvalidationRouter
from clstr.schemas.realtime import ChangeEvent, ChangeType


def _event(table, record=None, old_record=None, type=ChangeType.UPDATE) -> ChangeEvent:
    return ChangeEvent(type=type, table=table, record=record, old_record=old_record)


def test_request_change_resolves_both_parties():
    channels, keys = InvalidationRouter().resolve(
        _event("mentorship_requests", {"mentee_id": "m1", "mentor_id": "t1"})
    )

    assert channels == ["mentorship-requests-mentee-m1", "mentorship-requests-mentor-t1"]
    assert keys == [
        CacheKeys.my_requests("m1"),
        CacheKeys.incoming_requests("t1"),
        CacheKeys.active_relationships("t1"),
        CacheKeys.completed_relationships("t1"),
    ]


def test_offer_change_invalidates_directory_and_own_offer():
    channels, keys = InvalidationRouter().resolve(
        _event("mentorship_offers", {"mentor_id": "t1", "college_domain": "uni.edu"})
    )

    assert channels == ["mentorship-offers-uni.edu"]
    assert CacheKeys.mentors("uni.edu") in keys
    assert CacheKeys.my_offer("t1") in keys


def test_delete_uses_old_record():
    channels, keys = InvalidationRouter().resolve(
        _event("notifications", None, {"user_id": "u1"}, ChangeType.DELETE)
    )

    assert channels == ["notifications-realtime-u1"]
    assert keys == [CacheKeys.notifications("u1")]


def test_connection_change_invalidates_whole_namespace():
    _, keys = InvalidationRouter().resolve(
        _event("connections", {"requester_id": "a", "receiver_id": "b"})
    )

    assert keys[0] == CacheKeys.ALL
    assert CacheKeys.connection_status("a") in keys
    assert CacheKeys.connection_status("b") in keys


def test_unknown_table_is_ignored():
    assert InvalidationRouter().resolve(_event("posts", {"id": "x"})) == ([], [])


def test_webhook_payload_shape():
    event = ChangeEvent.model_validate(
        {"type": "INSERT", "table": "profiles", "schema": "public", "record": {"college_domain": "uni.edu"}}
    )

    assert event.schema_name == "public"
    assert event.value("college_domain") == "uni.edu"


def test_publish_reaches_overlapping_subscribers():
    router = InvalidationRouter()
    seen_mentorship, seen_notifications = [], []
    router.subscribe(("mentorship", "mentors"), seen_mentorship.append)
    unsubscribe = router.subscribe(("notifications",), seen_notifications.append)

    router.publish(_event("mentorship_offers", {"college_domain": "uni.edu"}))
    assert seen_mentorship == [CacheKeys.mentors("uni.edu")]
    assert seen_notifications == []

    unsubscribe()
    router.publish(_event("notifications", {"user_id": "u1"}))
    assert seen_notifications == []


def test_namespace_invalidation_reaches_narrow_subscribers():
    router = InvalidationRouter()
    seen = []
    router.subscribe(CacheKeys.my_requests("m1"), seen.append)

    router.publish(_event("connections", {"requester_id": "a", "receiver_id": "b"}))

    assert seen == [CacheKeys.ALL]


def test_failing_subscriber_does_not_block_others():
    router = InvalidationRouter()
    seen = []

    def broken(_key):
        raise RuntimeError("boom")

    router.subscribe(("notifications",), broken)
    router.subscribe(("notifications",), seen.append)

    keys = router.publish(_event("notifications", {"user_id": "u1"}))

    assert keys == [CacheKeys.notifications("u1")]
    assert seen == keys
