import datetime
import logging
import numbers
import os
import sys

import numpy as np

from errors import UnsupportedParameterType

TIME_FORMAT = '%H:%M:%S'
DATE_FORMAT = '%Y-%m-%d'


def setup_logging(log_file, clear=False):
    # Create a logger for the experiment database
    logger = logging.getLogger("ExperimentDB")
    logger.setLevel(logging.INFO)

    # Calling this twice with the same file must not duplicate every message
    # or remove a log that is still open.
    log_path = os.path.abspath(log_file)
    for handler in logger.handlers:
        if isinstance(handler, logging.FileHandler) and handler.baseFilename == log_path:
            return logger

    # Start a fresh log file only when asked; a flush usually appends to a session's log.
    if clear and os.path.exists(log_file):
        os.remove(log_file)

    # Configure logging to file
    fh = logging.FileHandler(log_file)
    formatter = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s")
    fh.setFormatter(formatter)
    logger.addHandler(fh)

    # Also log to console for real-time feedback, once.
    if not any(type(handler) is logging.StreamHandler for handler in logger.handlers):
        ch = logging.StreamHandler()
        ch.setFormatter(formatter)
        logger.addHandler(ch)

    return logger


def popupError(text):
    from psychopy import gui

    errorDlg = gui.Dlg(title="Error", pos=(200, 400))
    errorDlg.addText('Error: ' + text, color='Red')
    errorDlg.show()


def time_of_day(value=None):
    """
    Return value as an 'HH:MM:SS' string.

    value can be None (now), a datetime.datetime, a datetime.time, or a string
    holding a time ('15:59:30', '15:59') or an ISO datetime
    ('2024-05-01 15:59:30').
    """
    if value is None:
        return datetime.datetime.now().strftime(TIME_FORMAT)
    if isinstance(value, (datetime.datetime, datetime.time)):
        return value.strftime(TIME_FORMAT)
    if not isinstance(value, str):
        raise ValueError(f"can't read a time of day from {value!r}")

    text = value.strip()
    for fmt in (TIME_FORMAT, '%H:%M'):
        try:
            return datetime.datetime.strptime(text, fmt).strftime(TIME_FORMAT)
        except ValueError:
            pass
    try:
        return datetime.datetime.fromisoformat(text).strftime(TIME_FORMAT)
    except ValueError:
        raise ValueError(f"can't read a time of day from {value!r}") from None


def today():
    return datetime.date.today().strftime(DATE_FORMAT)


def _number_text(x):
    if isinstance(x, (bool, np.bool_)):
        raise UnsupportedParameterType(x)
    if isinstance(x, np.integer):
        return str(int(x))
    if isinstance(x, np.floating):
        return str(float(x))
    return str(x)


def _array_text(value):
    try:
        arr = np.asarray(value)
    except ValueError:
        # ragged nested sequences
        raise UnsupportedParameterType(value) from None
    if arr.dtype.kind not in 'iuf':
        raise UnsupportedParameterType(value)

    text = np.array2string(arr, separator=' ', formatter={'all': _number_text},
                           max_line_width=sys.maxsize, threshold=sys.maxsize)
    # 2-D and higher arrays come back one row per line
    return text.replace('\n', '')


def parameter_to_text(value):
    """
    Text form of a single stimulus parameter.

    Strings are kept as they are, numbers use their str ('5', '0.5', '1/2') and
    numeric arrays are written as bracketed, space separated literals
    ('[1 2 3]', '[[1 2] [3 4]]'). Anything else, booleans included, raises
    UnsupportedParameterType.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, np.bool_)):
        raise UnsupportedParameterType(value)
    if isinstance(value, numbers.Number):
        return _number_text(value)
    if isinstance(value, (list, tuple, np.ndarray)):
        return _array_text(value)
    raise UnsupportedParameterType(value)


def parameters_to_text(parameters):
    """Join the text form of every parameter with ', '."""
    return ', '.join(parameter_to_text(p) for p in parameters)
