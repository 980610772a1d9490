import copy
import enum
import logging
from collections import namedtuple

import numpy as np
import pymysql

from config import DB_CONFIG
from credentials import DialogCredentialProvider, connect_with_retry
from database import ExperimentDB, connect
from errors import ExperimentDBError, InvalidArity, RowInsertFailed, UserAborted
from monitor import get_display_settings, reconcile_monitor
from utils import parameters_to_text, time_of_day, today

ExperimentRecord = namedtuple('ExperimentRecord', ['stimulus_name', 'start_time', 'end_time', 'parameters'])


def freeze_parameter(value):
    """Copy of an array-like parameter, so later changes by the caller don't reach the db."""
    if isinstance(value, np.ndarray):
        frozen = np.array(value, copy=True)
        frozen.flags.writeable = False
        return frozen
    if isinstance(value, (list, tuple)):
        return copy.deepcopy(value)
    return value


class FlushStatus(enum.Enum):
    QUEUED = 'queued'                # record added, nothing sent yet
    NOTHING_TO_DO = 'nothing_to_do'  # flush asked for with an empty queue
    OK = 'ok'
    ABORTED = 'aborted'              # user gave up on the db login
    ERROR = 'error'


FlushResult = namedtuple('FlushResult', ['status', 'rows_written', 'error'])


class DataLogger:
    """
    Collects one ExperimentRecord per stimulus run and writes them all to the
    experiments database when asked to flush.

    A flush asks for a db login, writes every pending record in the order
    they were recorded, updates the monitor history and closes the
    connection. The pending records are dropped afterwards whether or not
    the write worked; nothing is retried.

    Each row is committed as it is inserted. If row i fails, rows before it
    stay in the database and the failure is reported with the number of rows
    that made it.
    """

    def __init__(self, config=None, credential_provider=None, connect_fn=None,
                 display_query=None, logger=None):
        self.config = config if config is not None else DB_CONFIG
        self.logger = logger or logging.getLogger("ExperimentDB")
        self.credential_provider = credential_provider or DialogCredentialProvider(
            self.config.get('default_password', ''), self.logger)
        self.connect_fn = connect_fn or (lambda user, password: connect(user, password, self.config))
        self.display_query = display_query or get_display_settings
        self.pending = []

    def record(self, start_time=None, parameters=None, stimulus_name=None, is_final_call=False):
        """
        Queue a stimulus run and flush if this is the final call.

        Parameters:
        -----------
        start_time : str, datetime.time or datetime.datetime
            When the stimulus started, captured by the caller before it ran
        parameters : sequence
            Stimulus parameters, each a string, a number or a numeric array
        stimulus_name : str
            Name of the stimulus that ran
        is_final_call : bool
            Send everything queued so far to the database

        start_time and parameters go together: pass both to queue a run, or
        neither to only flush.

        Returns:
        --------
        FlushResult
            status QUEUED unless a flush happened
        """
        if (start_time is None) != (parameters is None):
            raise InvalidArity("record needs both start_time and parameters, or neither")

        if start_time is not None:
            if not stimulus_name:
                raise InvalidArity("record needs the name of the stimulus that ran")
            if isinstance(parameters, (str, bytes)):
                raise InvalidArity("parameters must be a sequence of values, not a single string")
            entry = ExperimentRecord(stimulus_name=stimulus_name,
                                     start_time=time_of_day(start_time),
                                     end_time=time_of_day(),
                                     parameters=tuple(freeze_parameter(p) for p in parameters))
            self.pending.append(entry)
            self.logger.info(f"Queued {entry.stimulus_name} ({entry.start_time}-{entry.end_time}), "
                             f"{len(self.pending)} pending")

        if is_final_call:
            return self.flush()
        return FlushResult(FlushStatus.QUEUED, 0, None)

    def flush(self):
        """Write all pending records to the database and clear them."""
        if not self.pending:
            self.logger.info("Nothing to send to the db")
            return FlushResult(FlushStatus.NOTHING_TO_DO, 0, None)

        batch = self.pending
        self.pending = []
        self.logger.info(f"Sending {len(batch)} experiments to the db")

        rows_written = 0
        try:
            connection = connect_with_retry(self.credential_provider, self.connect_fn,
                                            self.config.get('reserved_user', 'root'), self.logger)
            db = ExperimentDB(connection, self.config)
            try:
                for i, entry in enumerate(batch):
                    self.write_experiment(db, entry, i)
                    rows_written += 1
                reconcile_monitor(db, self.display_query, self.logger)
            finally:
                db.close()
        except UserAborted as e:
            self.logger.error(f"Discarded {len(batch)} experiments: {e}")
            return FlushResult(FlushStatus.ABORTED, 0, e)
        except ExperimentDBError as e:
            self.logger.error(f"Flush failed, {rows_written} of {len(batch)} experiments written: {e}")
            return FlushResult(FlushStatus.ERROR, rows_written, e)
        except pymysql.MySQLError as e:
            # stimulus lookup or monitor statements
            self.logger.error(f"Flush failed, {rows_written} of {len(batch)} experiments written: {e}")
            return FlushResult(FlushStatus.ERROR, rows_written, e)

        self.logger.info(f"{rows_written} experiments written to the db")
        return FlushResult(FlushStatus.OK, rows_written, None)

    def update_monitor(self):
        """Log in and only reconcile the monitor settings."""
        try:
            connection = connect_with_retry(self.credential_provider, self.connect_fn,
                                            self.config.get('reserved_user', 'root'), self.logger)
        except UserAborted as e:
            self.logger.error(f"Monitor settings not checked: {e}")
            return FlushResult(FlushStatus.ABORTED, 0, e)

        db = ExperimentDB(connection, self.config)
        try:
            reconcile_monitor(db, self.display_query, self.logger)
        except pymysql.MySQLError as e:
            self.logger.error(f"Monitor settings not checked: {e}")
            return FlushResult(FlushStatus.ERROR, 0, e)
        finally:
            db.close()
        return FlushResult(FlushStatus.OK, 0, None)

    def write_experiment(self, db, entry, index=0):
        """
        Insert one experiment row.

        A stimulus missing from the stimuli table gets stimulus_id -1 and its
        name is put in front of the params so it isn't lost.
        """
        params = parameters_to_text(entry.parameters)
        stimulus_id = db.stimulus_id(entry.stimulus_name)
        if stimulus_id == -1:
            params = f"{entry.stimulus_name}, {params}"

        try:
            db.add_experiment(stimulus_id=stimulus_id, user=db.user, date=today(),
                              start_time=entry.start_time, end_time=entry.end_time,
                              params=params)
        except pymysql.MySQLError as e:
            # rows before this one are already committed
            raise RowInsertFailed(index, index, e) from e
        self.logger.info(f"Added {entry.stimulus_name} (stimulus_id {stimulus_id}) to the db")
