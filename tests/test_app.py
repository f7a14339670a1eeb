"""Tests for the command-line entrypoint and the password prompt."""

import pytest

from credplay import app, auth
from credplay.store import CredentialStore


def run(store_path, *argv):
    return app.main(["--store", store_path, *argv])


def seed(store_path, username, password, cost=1):
    CredentialStore(store_path).set(username, auth.hash_password(password, auth.get_salt(), cost))


def test_prompt_password_no_confirm(fake_getpass):
    prompts = fake_getpass("hunter2")
    assert app.prompt_password("Password: ") == "hunter2"
    assert prompts == ["Password: "]


def test_prompt_password_confirm_retries_until_match(fake_getpass, capsys):
    prompts = fake_getpass("a", "b", "c", "d", "e", "e")
    assert app.prompt_password("New: ", confirm=True) == "e"
    assert prompts == ["New: ", "Confirm password: "] * 3
    assert capsys.readouterr().out.count("passwords do not match") == 2


def test_register_and_login(store_path, fake_getpass, low_cost, capsys):
    fake_getpass("pw", "pw")
    assert run(store_path, "register", "alice") == 0
    assert "OK: created account alice" in capsys.readouterr().out

    stored = CredentialStore(store_path).get("alice")
    assert stored.startswith("$sha256iter-1$2$")

    fake_getpass("pw")
    assert run(store_path, "login", "alice") == 0
    fake_getpass("nope")
    assert run(store_path, "login", "alice") == 1
    assert "FAIL: failed to authenticate as alice" in capsys.readouterr().out


def test_register_with_explicit_cost(store_path, fake_getpass):
    fake_getpass("pw", "pw")
    assert run(store_path, "register", "alice", "--cost", "3") == 0
    assert CredentialStore(store_path).get("alice").startswith("$sha256iter-1$3$")


def test_register_existing_user_fails(store_path, fake_getpass, capsys):
    seed(store_path, "alice", "pw")
    fake_getpass()
    assert run(store_path, "register", "alice") == 1
    assert "already exists" in capsys.readouterr().out


@pytest.mark.parametrize("username", ["a:b", "bad\udcff"])
def test_register_rejects_bad_username_before_prompting(store_path, fake_getpass, capsys, username):
    prompts = fake_getpass()
    assert run(store_path, "register", username) == 1
    assert "FAIL:" in capsys.readouterr().out
    assert prompts == []
    assert CredentialStore(store_path).list_users() == set()


def test_rename_rejects_bad_new_name_before_prompting(store_path, fake_getpass, capsys):
    seed(store_path, "alice", "pw")
    prompts = fake_getpass()
    assert run(store_path, "rename", "alice", "#admin") == 1
    assert prompts == []
    assert CredentialStore(store_path).list_users() == {"alice"}


def test_register_reports_write_failure(tmp_path, fake_getpass, low_cost, capsys):
    fake_getpass("pw", "pw")
    path = str(tmp_path / "nope" / "passwd")
    assert run(path, "register", "alice") == 1
    assert "FAIL: could not write" in capsys.readouterr().out


def test_login_unknown_user(store_path, fake_getpass):
    fake_getpass("pw")
    assert run(store_path, "login", "ghost") == 1


def test_users_lists_sorted(store_path, capsys):
    seed(store_path, "bob", "x")
    seed(store_path, "alice", "y")
    assert run(store_path, "users") == 0
    assert capsys.readouterr().out.split() == ["alice", "bob"]


def test_passwd(store_path, fake_getpass, low_cost):
    seed(store_path, "alice", "old")
    fake_getpass("old", "new", "new")
    assert run(store_path, "passwd", "alice") == 0

    store = CredentialStore(store_path)
    assert auth.authenticate(store, "alice", "new")
    assert not auth.authenticate(store, "alice", "old")


def test_passwd_wrong_current_password(store_path, fake_getpass):
    seed(store_path, "alice", "old")
    before = CredentialStore(store_path).get("alice")
    fake_getpass("bad")
    assert run(store_path, "passwd", "alice") == 1
    assert CredentialStore(store_path).get("alice") == before


def test_rename(store_path, fake_getpass):
    seed(store_path, "alice", "pw")
    fake_getpass("pw")
    assert run(store_path, "rename", "alice", "alicia") == 0

    store = CredentialStore(store_path)
    assert store.list_users() == {"alicia"}
    assert auth.authenticate(store, "alicia", "pw")


@pytest.mark.parametrize(
    "old,new,message",
    [("ghost", "x", "not found"), ("alice", "bob", "already exists")],
)
def test_rename_conflicts(store_path, fake_getpass, capsys, old, new, message):
    seed(store_path, "alice", "pw")
    seed(store_path, "bob", "pw")
    fake_getpass()
    assert run(store_path, "rename", old, new) == 1
    assert message in capsys.readouterr().out


def test_remove_requires_password(store_path, fake_getpass):
    seed(store_path, "alice", "pw")
    fake_getpass("bad")
    assert run(store_path, "remove", "alice") == 1
    assert CredentialStore(store_path).contains("alice")

    fake_getpass("pw")
    assert run(store_path, "remove", "alice") == 0
    assert not CredentialStore(store_path).contains("alice")


def test_hash_prints_encoded_hash(store_path, fake_getpass, capsys):
    fake_getpass("pw")
    assert run(store_path, "hash", "--cost", "2", "--salt-bytes", "8") == 0
    encoded = capsys.readouterr().out.strip()
    assert auth.verify_secret(encoded, "pw")


def test_hash_rejects_bad_cost(store_path, fake_getpass, capsys):
    fake_getpass("pw")
    assert run(store_path, "hash", "--cost", "99") == 1
    assert "FAIL:" in capsys.readouterr().out


def test_attack_finds_pin(store_path, capsys):
    seed(store_path, "alice", "07", cost=0)
    assert run(store_path, "attack", "alice", "--digits", "2") == 0
    out = capsys.readouterr().out
    assert "attempts=8" in out
    assert "found=07" in out


def test_bench_runs(store_path, capsys):
    assert run(store_path, "bench", "--costs", "0,1", "--rounds", "1", "--size", "64") == 0
    out = capsys.readouterr().out
    assert "'cost': 1" in out
    assert "'digests_match': True" in out


def test_attack_reports_target_cost(store_path, capsys):
    seed(store_path, "alice", "3", cost=2)
    assert run(store_path, "attack", "alice", "--digits", "1") == 0
    out = capsys.readouterr().out
    assert "scheme=sha256iter-1 cost=2 sha256_per_guess=4" in out
    assert "found=3" in out


@pytest.mark.parametrize("digits", ["0", "-2"])
def test_attack_rejects_non_positive_digits(store_path, capsys, digits):
    seed(store_path, "alice", "pw")
    assert run(store_path, "attack", "alice", "--digits", digits) == 1
    assert "FAIL: digits must be positive" in capsys.readouterr().out


def test_attack_rejects_malformed_stored_hash(store_path, capsys):
    CredentialStore(store_path).set("alice", "not-a-hash")
    assert run(store_path, "attack", "alice") == 1
    assert "FAIL:" in capsys.readouterr().out
