"""Centralised logger configuration.

Usage:
    from networth_deck.utils.logger import get_logger
    logger = get_logger(__name__)

Pages and services never call ``basicConfig`` themselves.
"""
import logging

from networth_deck.config import settings

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str | None = None) -> None:
    level = (level or settings()["LOG_LEVEL"]).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=LOG_FORMAT,
    )


def get_logger(name: str) -> logging.Logger:
    if not logging.getLogger().handlers:
        setup_logging()
    return logging.getLogger(name)
