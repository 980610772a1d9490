"""
Shared fixtures for the experiment db tests.

FakeConnection stands in for a pymysql connection: it keeps the stimuli and
monitor tables in memory and records every statement it runs.
"""

import logging

import pymysql
import pytest

from data_logger import DataLogger
from monitor import MonitorSettings

TEST_CONFIG = {
    'dbname': 'test',
    'host': 'localhost',
    'port': 3306,
    'reserved_user': 'root',
    'default_password': '',
    'stimuli_table': 'stimuli',
    'experiments_table': 'experiments',
    'monitor_table': 'monitor',
}


class FakeCursor:
    def __init__(self, connection):
        self.connection = connection
        self.result = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False

    def execute(self, sql, args=None):
        conn = self.connection
        conn.executed.append((sql, args))
        if sql.startswith('SELECT id FROM stimuli'):
            stim_id = conn.stimuli.get(args[0])
            self.result = None if stim_id is None else {'id': stim_id}
        elif sql.startswith('SELECT width'):
            self.result = dict(conn.monitor_rows[-1]) if conn.monitor_rows else None
        elif sql.startswith('INSERT INTO experiments'):
            if conn.fail_on_insert is not None and conn.fail_on_insert == len(conn.experiments):
                raise pymysql.err.OperationalError(1205, 'Lock wait timeout exceeded')
            conn.experiments.append(dict(zip(
                ['stimulus_id', 'user', 'date', 'start_time', 'end_time', 'params'], args)))
        elif sql.startswith('INSERT INTO monitor'):
            conn.monitor_rows.append(dict(zip(
                ['width', 'height', 'pixel_size', 'nominal_rate'], args)))
        return 1

    def fetchone(self):
        return self.result


class FakeConnection:
    def __init__(self, user='alice', stimuli=None, monitor_rows=None):
        self.user = user
        self.stimuli = stimuli if stimuli is not None else {'RF': 3, 'checkers': 7}
        self.monitor_rows = monitor_rows if monitor_rows is not None else [
            {'width': 1920, 'height': 1080, 'nominal_rate': 60, 'pixel_size': 32}]
        self.experiments = []
        self.executed = []
        self.fail_on_insert = None
        self.closed = False

    def cursor(self):
        return FakeCursor(self)

    def close(self):
        self.closed = True


class FakeCredentialProvider:
    """Hands out scripted logins and retry answers, counting what was asked."""

    def __init__(self, logins, retries=()):
        self.logins = list(logins)
        self.retries = list(retries)
        self.asked = 0
        self.retry_questions = 0
        self.rejections = []

    def get_credentials(self):
        self.asked += 1
        return self.logins.pop(0) if self.logins else None

    def confirm_retry(self, message):
        self.retry_questions += 1
        return self.retries.pop(0) if self.retries else False

    def rejected(self, user, reason):
        self.rejections.append(user)


SAME_MONITOR = MonitorSettings(width=1920, height=1080, nominal_rate=60, pixel_size=32)


@pytest.fixture
def test_config():
    return dict(TEST_CONFIG)


@pytest.fixture
def connection():
    return FakeConnection()


@pytest.fixture
def provider():
    return FakeCredentialProvider([('alice', 'secret')])


@pytest.fixture
def connect_calls():
    return []


@pytest.fixture
def data_logger(test_config, connection, provider, connect_calls):
    """DataLogger wired to the fake connection and an unchanged monitor"""
    def connect_fn(user, password):
        connect_calls.append((user, password))
        return connection

    return DataLogger(test_config, credential_provider=provider, connect_fn=connect_fn,
                      display_query=lambda: SAME_MONITOR)


@pytest.fixture(autouse=True)
def reset_db_logger():
    """Close handlers added by setup_logging so tests don't share log files"""
    yield
    logger = logging.getLogger("ExperimentDB")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
