from __future__ import annotations

import logging

from guildledger.common import configure_logging


def test_configure_logging_quietens_httpx() -> None:
    configure_logging(level=logging.DEBUG, force=True)

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.WARNING

    configure_logging(level=logging.ERROR, force=True)

    assert logging.getLogger("httpx").level == logging.ERROR
