"""
tests/conftest.py -- Shared fixtures for the checkauth test suite.

This module provides:
  - directory_config: a DirectoryConfig pointing at a fictitious DC
  - FakeDirectory / FakeSession: an in-memory stand-in for the LDAP
    directory that understands the two filters the verifier builds and
    records every search, open and close
  - client: TestClient around create_app() with the session factory
    dependency overridden to hand out FakeSessions

Design: FakeDirectory parses filters with strict regexes. A filter whose
structure was altered (e.g. by unescaped parentheses in a group name)
does not match either shape and raises, the same way a real server
answers with a protocol error.
"""

from __future__ import annotations

import re
from collections.abc import Generator
from dataclasses import dataclass, field

import pytest
from fastapi.testclient import TestClient

from app.ad import DirectoryConfig, DirectorySearchError
from app.deps import get_session_factory
from app.env_settings import get_env
from app.main import create_app

BASE_DN = "DC=corp,DC=example,DC=com"

_ID_FILTER = re.compile(r"^\(&\(objectClass=user\)\(([A-Za-z0-9;-]+)=(-?\d+)\)\)$")
_GROUP_FILTER = re.compile(
    r"^\(&\(objectClass=user\)\(sAMAccountName=([^()]*)\)\(memberOf=([^()]*)\)\)$"
)
_ESCAPE = re.compile(r"\\([0-9a-fA-F]{2})")


def unescape_filter_value(value: str) -> str:
    return _ESCAPE.sub(lambda m: chr(int(m.group(1), 16)), value)


@dataclass
class FakeUser:
    sam: str
    uid: int
    member_of: list[str] = field(default_factory=list)

    @property
    def dn(self) -> str:
        return f"CN={self.sam},OU=Users,{BASE_DN}"

    def as_entry(self) -> dict:
        return {"dn": self.dn, "attributes": {"sAMAccountName": [self.sam]}}


class FakeDirectory:
    def __init__(self, users: list[FakeUser] | None = None, id_attr: str = "uidNumber") -> None:
        self.users = list(users or [])
        self.id_attr = id_attr
        self.searches: list[str] = []
        self.sessions: list["FakeSession"] = []

    def search(self, search_filter: str) -> list[dict]:
        self.searches.append(search_filter)

        m = _ID_FILTER.match(search_filter)
        if m:
            attr, value = m.group(1), int(m.group(2))
            if attr != self.id_attr:
                return []
            return [u.as_entry() for u in self.users if u.uid == value]

        m = _GROUP_FILTER.match(search_filter)
        if m:
            sam = unescape_filter_value(m.group(1))
            group_dn = unescape_filter_value(m.group(2))
            return [u.as_entry() for u in self.users if u.sam == sam and group_dn in u.member_of]

        raise DirectorySearchError(f"LDAP search failed: invalid filter {search_filter!r}")

    def session_factory(self, cfg: DirectoryConfig) -> "FakeSession":
        s = FakeSession(self, cfg)
        self.sessions.append(s)
        return s


class FakeSession:
    def __init__(self, directory: FakeDirectory, cfg: DirectoryConfig) -> None:
        self.directory = directory
        self.cfg = cfg
        self.opened = 0
        self.closed = 0

    def __enter__(self) -> "FakeSession":
        self.opened += 1
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.closed += 1

    def search(self, search_filter: str, attributes: list[str]) -> list[dict]:
        assert attributes == ["sAMAccountName"]
        return self.directory.search(search_filter)


EPILOG_GROUP = "EpilogAuthorized,OU=Epilog,OU=CNC,OU=Authorized Groups,OU=Domain Groups"


@pytest.fixture
def directory_config() -> DirectoryConfig:
    return DirectoryConfig(
        server="dc01.corp.example.com",
        port=389,
        search_user=f"CN=svc-checkauth,OU=Service Accounts,{BASE_DN}",
        search_pass="s3cret",
        base_dn=BASE_DN,
        search_attr="uidNumber",
    )


@pytest.fixture
def directory() -> FakeDirectory:
    return FakeDirectory(
        [
            FakeUser("operator", 5039, [f"CN={EPILOG_GROUP},{BASE_DN}"]),
            FakeUser("jsmith", 1234, [f"CN=Drafting,{BASE_DN}"]),
        ]
    )


@pytest.fixture
def client(
    directory_config: DirectoryConfig, directory: FakeDirectory, tmp_path
) -> Generator[TestClient, None, None]:
    """TestClient whose /checkauth talks to the FakeDirectory; static files come from tmp_path."""
    (tmp_path / "index.html").write_text("<html>checkauth</html>", encoding="utf-8")
    app = create_app(directory_config=directory_config, static_dir=str(tmp_path))
    app.dependency_overrides[get_session_factory] = lambda: directory.session_factory

    with TestClient(app, raise_server_exceptions=True) as c:
        yield c


@pytest.fixture
def env(monkeypatch):
    """Process settings from a clean environment; file logging disabled."""
    monkeypatch.setenv("LOG_DIR", "")
    get_env.cache_clear()
    yield monkeypatch
    get_env.cache_clear()
