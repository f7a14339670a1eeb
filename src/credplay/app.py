"""
app.py - CLI entrypoint

Commands list:
- users: list registered accounts
- register: create an account (sha256iter-1 or argon2id hash)
- login: verify credentials
- passwd: change an account password
- rename: move an account to a new username
- remove: delete an account
- hash: print an encoded hash without touching the store
- bench: run timing experiments (cost scaling + primitive speed)
- attack: brute-force demo against one stored hash

Every command returns an exit status: 0 on success, 1 on failure.
"""

from __future__ import annotations

import argparse
import getpass
import logging
import os
from typing import Optional

from . import attack
from . import auth
from . import bench
from .store import CredentialStore, check_username, new_store

DEFAULT_STORE = os.environ.get("CREDPLAY_STORE", "passwd")
SCHEMES = ("sha256iter", "argon2")


def prompt_password(prompt: str = "Password: ", confirm: bool = False) -> str:
    """
    Read a password without echo.
    With confirm=True, ask again until both entries match.
    """
    if not confirm:
        return getpass.getpass(prompt)
    while True:
        first = getpass.getpass(prompt)
        second = getpass.getpass("Confirm password: ")
        if first == second:
            return first
        print("passwords do not match")


def _make_hash(secret: str, scheme: str, cost: int) -> str:
    if scheme == "argon2":
        return auth.hash_secret_argon2(secret)
    return auth.hash_password(secret, auth.get_salt(), cost)


def _persisted(store: CredentialStore, ok: bool) -> int:
    if not ok:
        print(f"FAIL: could not write {store.path} (change kept in memory only)")
        return 1
    return 0


def cmd_users(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    for username in sorted(store.list_users()):
        print(username)
    return 0


def cmd_register(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    if store.contains(args.username):
        print(f"FAIL: account {args.username} already exists")
        return 1
    try:
        check_username(args.username)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1

    secret = prompt_password("Password: ", confirm=True)
    try:
        encoded = _make_hash(secret, args.scheme, args.cost)
        ok = store.set(args.username, encoded)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1

    if _persisted(store, ok):
        return 1
    print(f"OK: created account {args.username}")
    return 0


def cmd_login(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    secret = prompt_password("Password: ")
    if auth.authenticate(store, args.username, secret):
        print(f"OK: logged in as {args.username}")
        return 0
    print(f"FAIL: failed to authenticate as {args.username}")
    return 1


def cmd_passwd(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    if not auth.authenticate(store, args.username, prompt_password("Current password: ")):
        print("FAIL: failed to authenticate")
        return 1

    secret = prompt_password("New password: ", confirm=True)
    try:
        ok = store.set(args.username, _make_hash(secret, args.scheme, args.cost))
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1

    if _persisted(store, ok):
        return 1
    print(f"OK: changed password for {args.username}")
    return 0


def cmd_rename(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    old, new = args.old, args.new
    if not store.contains(old):
        print(f"FAIL: account {old} not found")
        return 1
    if store.contains(new):
        print(f"FAIL: account {new} already exists")
        return 1
    try:
        check_username(new)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1
    if not auth.authenticate(store, old, prompt_password("Password: ")):
        print("FAIL: failed to authenticate")
        return 1

    encoded = store.get(old)
    try:
        ok = store.set(new, encoded)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1
    ok = store.remove(old) and ok

    if _persisted(store, ok):
        return 1
    print(f"OK: renamed {old} to {new}")
    return 0


def cmd_remove(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    if not auth.authenticate(store, args.username, prompt_password("Password: ")):
        print(f"FAIL: failed to authenticate as {args.username}")
        return 1

    if _persisted(store, store.remove(args.username)):
        return 1
    print(f"OK: deleted account {args.username}")
    return 0


def cmd_hash(args: argparse.Namespace) -> int:
    secret = prompt_password("Password: ")
    try:
        print(auth.hash_password(secret, auth.get_salt(args.salt_bytes), args.cost))
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1
    return 0


def cmd_bench(args: argparse.Namespace) -> int:
    try:
        costs = [int(x) for x in args.costs.split(",")]
        derive_results = bench.bench_derive(costs, rounds=args.rounds)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1

    print("== DERIVE BENCH ==")
    for r in derive_results:
        print(r)
    print("\n== PRIMITIVE BENCH ==")
    print(bench.bench_primitive(size=args.size, rounds=args.rounds))
    return 0


def cmd_attack(args: argparse.Namespace) -> int:
    store = new_store(args.store)
    stored_hash = store.get(args.username)
    if stored_hash is None:
        print("FAIL: user not found")
        return 1

    try:
        target = attack.describe_target(stored_hash)
        found, seconds, attempts = attack.bruteforce_pin_hash(stored_hash, digits=args.digits)
    except ValueError as e:
        print(f"FAIL: {e}")
        return 1

    print(f"Target scheme={target['scheme']} cost={target['cost']} sha256_per_guess={target['sha256_per_guess']}")
    print(f"Attack=hash digits={args.digits} attempts={attempts} seconds={seconds:.3f} found={found}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="credplay")
    p.add_argument("--store", default=DEFAULT_STORE, help="Credential file path")
    p.add_argument("--verbose", action="store_true", help="Enable debug logging")

    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("users", help="List all accounts")
    s.set_defaults(func=cmd_users)

    s = sub.add_parser("register", help="Create an account")
    s.add_argument("username")
    s.add_argument("--cost", type=int, default=auth.DEF_HASH_COST)
    s.add_argument("--scheme", choices=SCHEMES, default="sha256iter")
    s.set_defaults(func=cmd_register)

    s = sub.add_parser("login", help="Verify login")
    s.add_argument("username")
    s.set_defaults(func=cmd_login)

    s = sub.add_parser("passwd", help="Change an account password")
    s.add_argument("username")
    s.add_argument("--cost", type=int, default=auth.DEF_HASH_COST)
    s.add_argument("--scheme", choices=SCHEMES, default="sha256iter")
    s.set_defaults(func=cmd_passwd)

    s = sub.add_parser("rename", help="Change an account username")
    s.add_argument("old")
    s.add_argument("new")
    s.set_defaults(func=cmd_rename)

    s = sub.add_parser("remove", help="Delete an account")
    s.add_argument("username")
    s.set_defaults(func=cmd_remove)

    s = sub.add_parser("hash", help="Print an encoded hash for a password")
    s.add_argument("--cost", type=int, default=auth.DEF_HASH_COST)
    s.add_argument("--salt-bytes", type=int, default=auth.DEF_SALT_LEN)
    s.set_defaults(func=cmd_hash)

    s = sub.add_parser("bench", help="Run benchmarks")
    s.add_argument("--costs", default="0,4,8,12", help="Comma-separated cost values")
    s.add_argument("--rounds", type=int, default=5)
    s.add_argument("--size", type=int, default=1024, help="Payload size for the primitive bench")
    s.set_defaults(func=cmd_bench)

    s = sub.add_parser("attack", help="Brute-force a numeric PIN against a stored hash")
    s.add_argument("username")
    s.add_argument("--digits", type=int, default=4)
    s.set_defaults(func=cmd_attack)

    return p


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
