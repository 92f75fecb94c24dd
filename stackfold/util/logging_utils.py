# coding=utf-8

import logging
import logging.handlers
import os
from zipfile import ZIP_DEFLATED, ZipFile

from stackfold.util import logging_config
from stackfold.util.logging_config import MAX_SIZE, MAX_BACKUP_COUNT, LOG_LEVEL, LOG_FILE_ROOT, \
    LOG_FILE_NAME, PRINT_LOG_TO_CONSOLE

__DEFAULT_LOGGERS = dict()

formatter = logging.Formatter(
    logging_config.LOGGER_CONTENT_FORMAT,
    logging_config.LOGGER_TIME_FORMAT)


def get_default_logger(module="default", log_path=None) -> logging.Logger:
    global __DEFAULT_LOGGERS
    if not __DEFAULT_LOGGERS.get(module):
        __DEFAULT_LOGGERS[module] = get_logger(module=module,
                                               log_path=log_path or os.path.join(LOG_FILE_ROOT, LOG_FILE_NAME),
                                               max_file_size=MAX_SIZE,
                                               max_backup_count=MAX_BACKUP_COUNT)

    return __DEFAULT_LOGGERS.get(module)


def get_logger(module, log_path, max_file_size, max_backup_count):
    logger = logging.getLogger(module)
    if len(logger.handlers) == 0:
        logger.propagate = False
        logger.setLevel(LOG_LEVEL)
        if PRINT_LOG_TO_CONSOLE:
            handler = logging.StreamHandler()
            handler.setFormatter(formatter)
        else:
            handler = get_log_handler(log_path, max_file_size, max_backup_count)
        logger.addHandler(handler)
    return logger


def set_log_level(level):
    """Apply a level to every logger handed out so far."""
    for logger in __DEFAULT_LOGGERS.values():
        logger.setLevel(level)


def zip_log_namer(name):
    return name + ".zip"


def zip_log_rotator(source, dest):
    """
    Dump function:
    1. compress the rotated file into dest
    2. remove the source so the handler reopens an empty log
    """
    try:
        with ZipFile(dest, "w", ZIP_DEFLATED) as archived_file:
            archived_file.write(source, os.path.basename(source))
    finally:
        if os.path.exists(source):
            os.remove(source)


def get_log_handler(log_path, max_file_size, max_backup_count):
    try:
        log_dir = os.path.dirname(log_path)
        if log_dir:
            os.makedirs(log_dir, 0o750, exist_ok=True)
        handler = logging.handlers.RotatingFileHandler(log_path,
                                                       maxBytes=max_file_size,
                                                       backupCount=max_backup_count)
        handler.rotator = zip_log_rotator
        handler.namer = zip_log_namer
    except OSError:
        # log directory not writable, fall back to the console
        handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    return handler
