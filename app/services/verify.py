from __future__ import annotations

import logging
from typing import Protocol

from ..ad.models import DirectoryConfig
from ..ad.utils import entry_attr_str, escape_ldap_filter_value
from ..schema import CheckAuthResponse

logger = logging.getLogger(__name__)

ACCOUNT_NAME_ATTR = "sAMAccountName"


class SearchSession(Protocol):
    def search(self, search_filter: str, attributes: list[str]) -> list[dict]: ...


def user_by_id_filter(search_attr: str, identifier: int) -> str:
    return f"(&(objectClass=user)({search_attr}={int(identifier)}))"


def user_in_group_filter(account_name: str, group_dn: str) -> str:
    name = escape_ldap_filter_value(account_name)
    group = escape_ldap_filter_value(group_dn)
    return f"(&(objectClass=user)({ACCOUNT_NAME_ATTR}={name})(memberOf={group}))"


def verify(
    session: SearchSession,
    identifier: int,
    group_name: str,
    *,
    cfg: DirectoryConfig,
) -> CheckAuthResponse:
    """Проверка членства пользователя (по числовому ID) в группе.

    Два последовательных поиска:
      1. ID -> sAMAccountName;
      2. sAMAccountName + memberOf=CN=<group>,<base_dn>.

    Ошибки каталога (DirectoryError) не перехватываются и уходят вызывающему.
    """
    users = session.search(user_by_id_filter(cfg.search_attr, identifier), [ACCOUNT_NAME_ATTR])
    if not users:
        return CheckAuthResponse.negative(f"{identifier} was not found in the directory")

    for u in users:
        logger.debug("Found %s -> %s", u.get("dn", ""), entry_attr_str(u, ACCOUNT_NAME_ATTR))

    if len(users) > 1:
        logger.warning("ID %s matches %d directory entries, using the first", identifier, len(users))
        if cfg.reject_ambiguous_id:
            return CheckAuthResponse.negative(
                f"{identifier} matches {len(users)} entries in the directory"
            )

    account = entry_attr_str(users[0], ACCOUNT_NAME_ATTR)

    members = session.search(
        user_in_group_filter(account, cfg.group_dn(group_name)), [ACCOUNT_NAME_ATTR]
    )
    if not members:
        return CheckAuthResponse.negative(
            f"User {account} with ID {identifier} not in the {group_name} group"
        )

    logger.debug("Found in the group: %s", members[0].get("dn", ""))
    return CheckAuthResponse.positive()
