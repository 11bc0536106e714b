from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DirectoryConfig:
    server: str
    port: int
    search_user: str
    search_pass: str
    base_dn: str
    search_attr: str
    starttls: bool = True
    tls_validate: bool = True
    ca_file: str = ""
    connect_timeout_s: float = 10.0
    search_timeout_s: float = 30.0
    reject_ambiguous_id: bool = False

    @property
    def address(self) -> str:
        return f"{self.server}:{self.port}"

    def group_dn(self, group_name: str) -> str:
        """Group names are paths relative to the base DN (CN=<group>,<base_dn>)."""
        return f"CN={group_name},{self.base_dn}"
