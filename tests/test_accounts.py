import logging

from insta_scheduler.accounts import upsert_account
from insta_scheduler.meta_oauth import ConnectedAccount
from insta_scheduler.store import JsonStore

CONNECTED = ConnectedAccount(account_id="ig-1", access_token="tok", display_name="brand")


def test_upsert_logs_saved_account(store: JsonStore, caplog) -> None:
    caplog.set_level(logging.INFO, logger="insta-scheduler")
    upsert_account(store, CONNECTED)
    assert store.load_accounts()["ig-1"]["username"] == "brand"
    assert any("account_saved" in record.getMessage() for record in caplog.records)


def test_upsert_does_not_log_saved_when_write_fails(tmp_path, caplog) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("file, not a directory", encoding="utf-8")
    broken = JsonStore(blocker / "accounts.json", blocker / "schedule.json")
    caplog.set_level(logging.INFO, logger="insta-scheduler")
    upsert_account(broken, CONNECTED)
    messages = [record.getMessage() for record in caplog.records]
    assert any("store_write_fail" in message for message in messages)
    assert not any("account_saved" in message for message in messages)
