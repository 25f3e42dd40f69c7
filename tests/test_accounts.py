import pytest

from accounts import AccountDirectory
from errors import Conflict, InvalidInput, NotFound
from forms import FormStore


@pytest.fixture
def accounts(db):
    return AccountDirectory(db)


def test_create_account_starts_with_empty_schema(accounts):
    account = accounts.create_account("a@x.com", "p")
    assert account.id
    assert account.email == "a@x.com"
    assert account.schema_fields == {}
    assert account.created_at is not None


def test_credential_is_stored_hashed(accounts, db):
    accounts.create_account("a@x.com", "p")
    stored = db["accounts"].find_one({"email": "a@x.com"})
    assert stored["credential_hash"] != "p"
    assert "password" not in stored


@pytest.mark.parametrize("email, secret", [(None, "p"), ("", "p"), ("a@x.com", None), ("a@x.com", "")])
def test_create_account_requires_email_and_secret(accounts, email, secret):
    with pytest.raises(InvalidInput):
        accounts.create_account(email, secret)


def test_create_account_keeps_email_as_submitted(accounts, db):
    accounts.create_account("Ana@Farm.COM", "p")
    assert db["accounts"].find_one()["email"] == "Ana@Farm.COM"
    assert accounts.find_by_email("Ana@Farm.COM").email == "Ana@Farm.COM"


@pytest.mark.parametrize("email", ["farmer@finca.local", "not-an-email"])
def test_create_account_only_checks_presence_of_email(accounts, email):
    assert accounts.create_account(email, "p").email == email


def test_duplicate_email_is_rejected_and_original_unchanged(accounts):
    first = accounts.create_account("a@x.com", "p", finca="La Esperanza")
    with pytest.raises(Conflict):
        accounts.create_account("a@x.com", "other", finca="Otra")

    found = accounts.find_by_email("a@x.com")
    assert found.id == first.id
    assert found.finca == "La Esperanza"
    assert len(accounts.list_accounts()) == 1


def test_find_by_email_unknown(accounts):
    with pytest.raises(NotFound):
        accounts.find_by_email("ghost@x.com")


def test_list_accounts_hides_credentials(accounts):
    accounts.create_account("a@x.com", "p")
    accounts.create_account("b@x.com", "q")
    listed = accounts.list_accounts()
    assert sorted(a.email for a in listed) == ["a@x.com", "b@x.com"]
    assert all("credential_hash" not in a.model_dump() for a in listed)


def test_purge_all_returns_count_and_keeps_forms(accounts, db):
    account = accounts.create_account("a@x.com", "p")
    accounts.create_account("b@x.com", "q")
    form = FormStore(db).create_form(account.id, "comite", {"members": 4})

    assert accounts.purge_all() == 2
    assert accounts.list_accounts() == []
    assert FormStore(db).get_form(form.id).values == {"members": 4}


def test_purge_all_on_empty_directory(accounts):
    assert accounts.purge_all() == 0
