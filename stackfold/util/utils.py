# coding=utf-8
import logging
import time
from functools import wraps

from stackfold.util.logging_utils import get_default_logger

LOGGER = get_default_logger(__name__)


def typed_property(name, expected_type, strict_type_check=True):
    """create property for class and check types."""
    storage_name = '_' + name

    @property
    def prop(self):
        result = getattr(self, storage_name, None)
        if result is None:
            LOGGER.warning("property '%s' of instance '%s' hasn't been set. And returning None.", name, type(self))
        return result

    @prop.setter
    def prop(self, value):
        msg = "property '{}' of instance '{}' must be a {}, but got {} with type {}"
        msg = msg.format(name, type(self).__name__, expected_type.__name__, value, type(value).__name__)
        # bool is a subclass of int, don't let True pass as a number or 1 as a flag
        type_ok = isinstance(value, expected_type) and \
            (expected_type is bool or not isinstance(value, bool))
        if strict_type_check:
            if type_ok:
                setattr(self, storage_name, value)
            else:
                raise ValueError(msg)
        else:
            if not type_ok:
                LOGGER.warning(msg)
            setattr(self, storage_name, value)

    return prop


def cal_time(log_obj: logging.Logger, logger_level="info"):
    def _cal_time(func):
        @wraps(func)
        def _wrap(*args, **kwargs):
            t0 = time.time()
            res = func(*args, **kwargs)
            t1 = time.time()
            msg = f"function named '{func.__name__}' cost {t1 - t0:.3f}s"
            getattr(log_obj, logger_level)(msg)
            return res

        return _wrap

    return _cal_time
