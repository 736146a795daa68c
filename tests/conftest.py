import logging

import pytest

from opie.common.logging import reset_handlers


@pytest.fixture(autouse=True)
def restore_engine_logger():
    yield
    engine_logger = logging.getLogger("opie.operation")
    reset_handlers(engine_logger)
    engine_logger.propagate = True
    engine_logger.setLevel(logging.NOTSET)
