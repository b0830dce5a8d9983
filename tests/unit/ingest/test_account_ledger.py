"""Unit tests for the dedup ledger."""

from __future__ import annotations

from core.types import ExportedAccount
from ingest.account_ledger import AccountLedger


def _account(username: str, password: str = "pw") -> ExportedAccount:
    return ExportedAccount(username=username, password=password, email=f"{username}@example.com")


def test_load_usernames_is_empty_without_ledger(tmp_path) -> None:
    """A fresh data root should have no recorded usernames."""
    ledger = AccountLedger(tmp_path)

    assert ledger.load_usernames() == set()


def test_append_persists_usernames_across_instances(tmp_path) -> None:
    """Appended usernames should survive a new ledger instance."""
    AccountLedger(tmp_path).append([_account("alpha"), _account("bravo")])

    usernames = AccountLedger(tmp_path).load_usernames()

    assert usernames == {"alpha", "bravo"}


def test_append_quotes_passwords_with_commas(tmp_path) -> None:
    """CSV quoting should keep the username as the first field."""
    ledger = AccountLedger(tmp_path)
    ledger.append([_account("alpha", password="a,b,c")])

    assert ledger.load_usernames() == {"alpha"}


def test_append_after_legacy_ledger_without_trailing_newline(tmp_path) -> None:
    """Rows appended to a snapshot-style ledger should start on a new line."""
    ledger = AccountLedger(tmp_path)
    ledger.path.write_text("alpha,pw,alpha@example.com\nbravo,pw,", encoding="utf-8")

    ledger.append([_account("charlie")])

    assert ledger.load_usernames() == {"alpha", "bravo", "charlie"}


def test_append_with_no_accounts_does_not_create_file(tmp_path) -> None:
    """Empty appends should be no-ops."""
    ledger = AccountLedger(tmp_path)

    appended = ledger.append([])

    assert appended == 0 and not ledger.path.exists()


def test_unbalanced_quote_in_legacy_row_keeps_later_usernames(tmp_path) -> None:
    """A legacy password opening a quote should not hide the rows after it."""
    ledger = AccountLedger(tmp_path)
    ledger.path.write_text(
        'alice,"pw1,a@x\nbob,pw2,b@x\ncarol,pw3,c@x\n',
        encoding="utf-8",
    )

    assert ledger.load_usernames() == {"alice", "bob", "carol"}


def test_empty_username_is_recorded(tmp_path) -> None:
    """An account with an empty username should be seen on the next load."""
    ledger = AccountLedger(tmp_path)
    ledger.append([_account("")])

    assert "" in ledger.load_usernames()
