# provider_kernel/log.py
"""
Kernel logging setup.

All kernel modules log under the `provider_kernel` namespace
(provider_kernel.autodiscover, provider_kernel.di.introspection, ...).
configure_logging() attaches one stream handler to that namespace; calling it
again only changes the level.
"""
from __future__ import annotations

import logging
from typing import Union

LOGGER_NAME = "provider_kernel"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"

_HANDLER_FLAG = "_pk_handler"


def configure_logging(level: Union[int, str] = "INFO") -> logging.Logger:
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    if not any(getattr(h, _HANDLER_FLAG, False) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        setattr(handler, _HANDLER_FLAG, True)
        logger.addHandler(handler)
    return logger
