from datetime import datetime, timezone

import pytest

from osdtool.servicelog_models import BadReply, ClustersFile, GoodReply, Message


def _message():
    return Message(
        severity="Info",
        service_name="SREManualAction",
        cluster_uuid="uuid-1",
        cluster_id="id-1",
        summary="Summary ${NAME}",
        description="Details ${NAME} and ${OTHER}",
        internal_only=True,
        event_stream_id="stream-1",
        subscription_id="sub-1",
    )


def test_message_round_trip():
    message = _message()
    assert Message.from_dict(message.to_dict()) == message


def test_message_to_dict_omits_empty_identifiers():
    data = Message(severity="Info", summary="s").to_dict()
    assert "cluster_uuid" not in data
    assert "cluster_id" not in data
    assert "subscription_id" not in data
    assert data["internal_only"] is False
    assert data["severity"] == "Info"


def test_message_from_dict_ignores_unknown_and_defaults_missing():
    message = Message.from_dict({"severity": "Warning", "unknown": 1})
    assert message.severity == "Warning"
    assert message.description == ""
    assert message.internal_only is False


@pytest.mark.parametrize(
    "data",
    [{"severity": 5}, {"internal_only": "yes"}, ["severity"]],
)
def test_message_from_dict_rejects_wrong_types(data):
    with pytest.raises(ValueError):
        Message.from_dict(data)


def test_replace_with_flag_replaces_all_fields():
    message = _message()
    message.replace_with_flag("${NAME}", "alpha")
    assert message.summary == "Summary alpha"
    assert message.description == "Details alpha and ${OTHER}"
    assert message.search_flag("${NAME}") is False
    assert message.search_flag("${OTHER}") is True


def test_search_flag_checks_identifier_fields():
    message = Message(subscription_id="${SUB}")
    assert message.search_flag("${SUB}") is True
    assert message.search_flag("${MISSING}") is False


def test_find_leftovers_lists_placeholders_in_order():
    assert _message().find_leftovers() == ["${NAME}", "${NAME}", "${OTHER}"]


def test_find_leftovers_ignores_cluster_and_subscription_ids():
    message = Message(cluster_id="${A}", subscription_id="${B}", summary="plain")
    assert message.find_leftovers() == []


def test_good_reply_parses_timestamps():
    reply = GoodReply.from_dict(
        {
            "id": "abc",
            "severity": "Info",
            "timestamp": "2023-01-02T03:04:05Z",
            "created_at": "2023-01-02T03:04:05.123456789+02:00",
        }
    )
    assert reply.id == "abc"
    assert reply.timestamp == datetime(2023, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    assert reply.created_at.microsecond == 123456
    assert reply.created_at < reply.timestamp


def test_good_reply_missing_timestamp_is_none():
    assert GoodReply.from_dict({"id": "x"}).timestamp is None


def test_good_reply_rejects_bad_timestamp():
    with pytest.raises(ValueError):
        GoodReply.from_dict({"timestamp": "yesterday"})


def test_bad_reply_from_dict():
    reply = BadReply.from_dict({"code": "CLUSTERS-MGMT-404", "reason": "not found"})
    assert reply.code == "CLUSTERS-MGMT-404"
    assert reply.reason == "not found"
    assert reply.operation_id == ""


def test_clusters_file_from_dict():
    assert ClustersFile.from_dict({"clusters": ["a", "b"]}).clusters == ["a", "b"]
    assert ClustersFile.from_dict({}).clusters == []


def test_clusters_file_rejects_non_list():
    with pytest.raises(ValueError):
        ClustersFile.from_dict({"clusters": "a"})