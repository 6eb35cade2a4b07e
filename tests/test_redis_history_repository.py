"""
Tests for the Redis history store, against a mocked Redis client.
"""

import json
from unittest.mock import MagicMock

import redis

from digitization_finder.repositories import RedisHistoryRepository

NOW = 1_700_000_000.0


def make_repository(client: MagicMock) -> RedisHistoryRepository:
    return RedisHistoryRepository(redis_client=client, key_prefix="test", search_limit=2, clock=lambda: NOW)


def test_add_search_trims_to_limit():
    client = MagicMock()
    client.zrange.return_value = ["f-old"]
    pipe = client.pipeline.return_value

    record = make_repository(client).add_search("u1", "f1", "Apogem")

    assert record["client_name"] == "Apogem"
    pipe.hset.assert_any_call("test:search:u1", "f1", json.dumps(record))
    pipe.zadd.assert_called_once_with("test:search:u1:order", {"f1": NOW})
    client.zrange.assert_called_once_with("test:search:u1:order", 0, -3)
    pipe.zrem.assert_called_once_with("test:search:u1:order", "f-old")
    pipe.hdel.assert_called_once_with("test:search:u1", "f-old")


def test_get_searches_newest_first():
    client = MagicMock()
    client.zrevrange.return_value = ["f2", "f1"]
    client.hmget.return_value = [json.dumps({"client_folder_id": "f2"}), None]

    searches = make_repository(client).get_searches("u1")

    assert searches == [{"client_folder_id": "f2"}]
    client.zrevrange.assert_called_once_with("test:search:u1:order", 0, 1)


def test_save_note_keeps_creation_time():
    client = MagicMock()
    client.hget.return_value = json.dumps({"note": "old", "created_at": "2023-01-01T00:00:00+00:00"})

    record = make_repository(client).save_note("u1", "f1", "new")

    assert record["note"] == "new"
    assert record["created_at"] == "2023-01-01T00:00:00+00:00"
    assert record["updated_at"] != record["created_at"]
    client.hset.assert_called_once_with("test:notes:u1", "f1", json.dumps(record))


def test_get_note_missing():
    client = MagicMock()
    client.hget.return_value = None

    assert make_repository(client).get_note("u1", "f1") is None


def test_add_report_caps_history():
    client = MagicMock()
    pipe = client.pipeline.return_value

    record = make_repository(client).add_report("u1", {"client_name": "Apogem", "report_content": "text"})

    assert record["user_id"] == "u1"
    assert record["id"]
    pipe.lpush.assert_called_once_with("test:reports:u1", json.dumps(record))
    pipe.ltrim.assert_called_once_with("test:reports:u1", 0, 99)


def test_health_check():
    client = MagicMock()
    client.ping.return_value = True
    assert make_repository(client).health_check() is True

    client.ping.side_effect = redis.ConnectionError("refused")
    assert make_repository(client).health_check() is False


def test_close_releases_client():
    client = MagicMock()

    make_repository(client).close()

    client.close.assert_called_once_with()
