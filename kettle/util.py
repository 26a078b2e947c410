# -*- coding: utf-8 -*-
"""Util functions"""

import logging
from typing import Any, Dict, Iterable

from .exceptions import ConfigurationError

logger = logging.getLogger("kettle")


def is_string(x) -> bool:
    """
    Tell whether the input is a string or some other variable

    :returns: True if x is a string
    """
    return isinstance(x, str)


def check_options(options: Dict[str, Any], recognized: Iterable[str], strict: bool = True) -> None:
    """
    Check that every key of an option dictionary is recognized

    :param options: option dictionary to check
    :param recognized: names of the allowed options
    :param strict: raise on unknown options when True, otherwise only warn

    :raises ConfigurationError: if strict and an option is not recognized
    """
    unknown = sorted(set(options) - set(recognized))
    if not unknown:
        return
    if strict:
        raise ConfigurationError("Unrecognized options: {}".format(", ".join(unknown)))
    logger.warning('ignoring unrecognized options: {}'.format(", ".join(unknown)))
