"""
store.py - Flat-file persistence layer for credplay

Responsibilities:
- Load the username -> encoded hash map from the backing file
- Skip malformed and duplicate lines with a warning instead of failing
- Rewrite the whole file after every mutation

File format: one ``username:encoded_hash`` line per record. Lines starting
with ``#`` are header/comment lines and are ignored on load.
"""

from __future__ import annotations

import logging
import os
import tempfile
from typing import Dict, Optional, Set


logger = logging.getLogger(__name__)

FIELD_DELIM = ":"
COMMENT_PREFIX = "#"


def _read_disk(path: str) -> Dict[str, str]:
    """
    Parse the backing file into a dict.
    Missing or unreadable files give an empty dict; the first record wins
    for a duplicated username.
    """
    records: Dict[str, str] = {}
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            lines = f.read().split("\n")
    except FileNotFoundError:
        logger.info("No credential file at %s, continuing with no accounts", path)
        return records
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Unable to read credential file %s, continuing with no accounts: %s", path, e)
        return records

    for lineno, line in enumerate(lines, start=1):
        line = line.rstrip("\r")
        if not line.strip() or line.startswith(COMMENT_PREFIX):
            continue
        username, sep, encoded = line.partition(FIELD_DELIM)
        if not sep or not username:
            logger.warning("Invalid entry on line %d of %s, skipping", lineno, path)
            continue
        if username in records:
            logger.warning("Duplicate user %r on line %d of %s, skipping", username, lineno, path)
            continue
        records[username] = encoded

    logger.debug("Loaded %d account(s) from %s", len(records), path)
    return records


def _check_utf8(value: str, what: str) -> None:
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValueError(f"{what} cannot be encoded as UTF-8: {value!r}") from e


def check_username(username: str) -> None:
    """Raise ValueError if ``username`` cannot be stored as a record key."""
    if not username:
        raise ValueError("username must not be empty")
    if FIELD_DELIM in username or "\n" in username or "\r" in username:
        raise ValueError(f"username must not contain {FIELD_DELIM!r} or line breaks: {username!r}")
    if username.startswith(COMMENT_PREFIX):
        raise ValueError(f"username must not start with {COMMENT_PREFIX!r}: {username!r}")
    _check_utf8(username, "username")


class CredentialStore:
    """
    In-memory username -> encoded hash map backed by a flat file.

    Memory is authoritative. Every set/remove rewrites the file; if that
    write fails the change is kept in memory and the method returns False.
    One instance should own a given file at a time.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._records: Dict[str, str] = _read_disk(path)

    def __contains__(self, username: object) -> bool:
        return username in self._records

    def __len__(self) -> int:
        return len(self._records)

    def reload(self) -> None:
        """Discard in-memory state and re-read the backing file."""
        self._records = _read_disk(self.path)

    def list_users(self) -> Set[str]:
        return set(self._records)

    def contains(self, username: str) -> bool:
        return username in self._records

    def get(self, username: str) -> Optional[str]:
        return self._records.get(username)

    def set(self, username: str, encoded_hash: str) -> bool:
        """Create or overwrite a record, then persist. Returns True if written to disk."""
        check_username(username)
        if "\n" in encoded_hash or "\r" in encoded_hash:
            raise ValueError("encoded hash must not contain line breaks")
        _check_utf8(encoded_hash, "encoded hash")
        self._records[username] = encoded_hash
        return self._write_disk()

    def remove(self, username: str) -> bool:
        """Delete a record if present, then persist. Returns True if written to disk."""
        self._records.pop(username, None)
        return self._write_disk()

    def _write_disk(self) -> bool:
        buf = "".join(f"{u}{FIELD_DELIM}{h}\n" for u, h in self._records.items())
        directory = os.path.dirname(os.path.abspath(self.path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".credplay-", dir=directory)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(buf)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            logger.error("Failed to write credential file %s: %s", self.path, e)
            return False
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)
        logger.debug("Wrote %d account(s) to %s", len(self._records), self.path)
        return True


def new_store(path: str) -> CredentialStore:
    """Open the store at ``path`` (an empty store if the file does not exist)."""
    return CredentialStore(path)


load = new_store
