from __future__ import annotations

import logging
import math
import ssl
from typing import Any, Optional

from ldap3 import (
    Server,
    Connection,
    NONE,
    SUBTREE,
    DEREF_NEVER,
    Tls,
)
from ldap3.core.exceptions import LDAPException

from .errors import DirectoryConnectError, DirectorySearchError
from .models import DirectoryConfig

logger = logging.getLogger(__name__)

# success, sizeLimitExceeded (entries are still usable)
_SEARCH_OK_CODES = (0, 4)


class DirectorySession:
    """One authenticated channel to the directory, owned by a single request.

    Usage:
        with DirectorySession(cfg) as session:
            entries = session.search("(objectClass=user)", ["sAMAccountName"])

    The channel is connected, upgraded with StartTLS and bound in `open()`,
    and released in `close()` on every exit path. Sessions are never pooled.
    """

    def __init__(self, cfg: DirectoryConfig) -> None:
        self.cfg = cfg
        self.conn: Optional[Connection] = None

        tls_kwargs: dict[str, Any] = {
            "validate": ssl.CERT_REQUIRED if cfg.tls_validate else ssl.CERT_NONE,
        }
        # Custom CA only matters when verification is enabled.
        if cfg.tls_validate and cfg.ca_file:
            tls_kwargs["ca_certs_file"] = cfg.ca_file

        self.server = Server(
            host=cfg.server,
            port=cfg.port,
            use_ssl=False,
            get_info=NONE,
            tls=Tls(**tls_kwargs),
            connect_timeout=float(cfg.connect_timeout_s),
        )

    def __enter__(self) -> "DirectorySession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self.conn is not None

    def open(self) -> "DirectorySession":
        if self.conn is not None:
            return self

        conn = Connection(
            self.server,
            user=self.cfg.search_user,
            password=self.cfg.search_pass,
            auto_bind=False,
            receive_timeout=float(self.cfg.search_timeout_s),
        )
        stage = "connect"
        try:
            conn.open()
            if self.cfg.starttls:
                stage = "starttls"
                if not conn.start_tls():
                    raise DirectoryConnectError(
                        f"StartTLS to {self.cfg.address} failed: {_describe(conn.result)}"
                    )
            stage = "bind"
            if not conn.bind():
                raise DirectoryConnectError(
                    f"Bind as {self.cfg.search_user} failed: {_describe(conn.result)}"
                )
        except DirectoryConnectError:
            _safe_unbind(conn)
            raise
        except LDAPException as e:
            _safe_unbind(conn)
            raise DirectoryConnectError(f"LDAP {stage} to {self.cfg.address} failed: {e}") from e

        self.conn = conn
        logger.debug("Directory session opened to %s", self.cfg.address)
        return self

    def close(self) -> None:
        conn, self.conn = self.conn, None
        if conn is None:
            return
        _safe_unbind(conn)
        logger.debug("Directory session to %s closed", self.cfg.address)

    def search(self, search_filter: str, attributes: list[str]) -> list[dict]:
        """Subtree search under the base DN, aliases never dereferenced.

        Returns entries as dicts: {"dn": ..., "attributes": {...}}.
        """
        if self.conn is None:
            raise DirectorySearchError("Directory session is not open")

        conn = self.conn
        try:
            conn.search(
                search_base=self.cfg.base_dn,
                search_filter=search_filter,
                search_scope=SUBTREE,
                dereference_aliases=DEREF_NEVER,
                attributes=attributes,
                time_limit=_time_limit_s(self.cfg.search_timeout_s),
            )
        except LDAPException as e:
            raise DirectorySearchError(f"LDAP search failed: {e}") from e

        res = conn.result or {}
        if res.get("result") not in _SEARCH_OK_CODES:
            raise DirectorySearchError(f"LDAP search failed: {_describe(res)}")

        entries: list[dict] = []
        for item in conn.response or []:
            if item.get("type") != "searchResEntry":
                continue
            entries.append({"dn": item.get("dn", ""), "attributes": dict(item.get("attributes") or {})})
        return entries


def open_session(cfg: DirectoryConfig) -> DirectorySession:
    """Create and open a session; raises DirectoryConnectError on failure."""
    return DirectorySession(cfg).open()


def _describe(result: Optional[dict]) -> str:
    res = result or {}
    desc = str(res.get("description") or "")
    msg = str(res.get("message") or "")
    if desc and msg:
        return f"{desc} ({msg})"
    return desc or msg or "unknown error"


def _safe_unbind(conn: Connection) -> None:
    try:
        conn.unbind()
    except LDAPException as e:
        logger.debug("LDAP unbind failed: %s", e)


def _time_limit_s(timeout_s: float) -> int:
    # Server-side limit is whole seconds; 0 would mean "no limit".
    return max(1, math.ceil(timeout_s))
