from __future__ import annotations

import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from ..domain.models import CredentialRole, DatabaseConnection
from .credentials import CredentialStore

logger = logging.getLogger(__name__)

# Fixed by the embedded install; only credentials and the db endpoint vary.
PG_DATABASE = "awx"
RABBITMQ_PORT = 5672
RABBITMQ_VHOST = "tower"
RABBITMQ_COOKIE = "cookiemonster"

INVENTORY_TEMPLATE = """\
[tower]
localhost ansible_connection=local

[database]

[all:vars]
admin_password='{admin_password}'

pg_host='{pg_host}'
pg_port='{pg_port}'

pg_database='{pg_database}'
pg_username='{pg_username}'
pg_password='{pg_password}'

rabbitmq_port={rabbitmq_port}
rabbitmq_vhost={rabbitmq_vhost}
rabbitmq_username='{rabbitmq_username}'
rabbitmq_password='{rabbitmq_password}'
rabbitmq_cookie={rabbitmq_cookie}
rabbitmq_use_long_name=false
rabbitmq_enable_manager=false
"""


class InventoryComposer:
    def __init__(self, credentials: CredentialStore, database: DatabaseConnection):
        self.credentials = credentials
        self.database = database

    def compose(self) -> str:
        """
        Render the installer inventory, creating any missing credentials.

        The result contains plaintext passwords; hand it over with
        inventory_file() only.
        """
        admin = self.credentials.get_or_create(CredentialRole.ADMIN)
        rabbitmq = self.credentials.get_or_create(CredentialRole.MESSAGE_BROKER)
        database = self.credentials.get_or_create(CredentialRole.DATABASE)

        return INVENTORY_TEMPLATE.format(
            admin_password=admin.password,
            pg_host=self.database.host or "localhost",
            pg_port=self.database.port or 5432,
            pg_database=PG_DATABASE,
            pg_username=database.userid,
            pg_password=database.password,
            rabbitmq_port=RABBITMQ_PORT,
            rabbitmq_vhost=RABBITMQ_VHOST,
            rabbitmq_username=rabbitmq.userid,
            rabbitmq_password=rabbitmq.password,
            rabbitmq_cookie=RABBITMQ_COOKIE,
        )

    @contextmanager
    def inventory_file(self) -> Iterator[Path]:
        contents = self.compose()

        fd, name = tempfile.mkstemp(prefix="miq_inventory")
        path = Path(name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(contents)
            logger.debug("Wrote inventory to %s", path)
            yield path
        finally:
            path.unlink(missing_ok=True)
            logger.debug("Removed inventory %s", path)
