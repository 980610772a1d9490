class ExperimentDBError(Exception):
    """Base class for everything that can go wrong while recording experiments."""


class InvalidArity(ExperimentDBError, TypeError):
    """start_time and parameters were not given together."""


class UserAborted(ExperimentDBError):
    """The user declined to retry the database login."""


class ConnectionFailed(ExperimentDBError):
    """A single connection attempt failed. Handled by asking the user again."""


class UnsupportedParameterType(ExperimentDBError, TypeError):
    def __init__(self, value):
        self.value = value
        super().__init__(
            f"can't convert parameter {value!r} ({type(value).__name__}) to text")


class RowInsertFailed(ExperimentDBError):
    """
    Inserting one experiment row failed.

    Rows inserted earlier in the same flush are already committed and stay in
    the database; rows_written says how many.
    """

    def __init__(self, index, rows_written, cause):
        self.index = index
        self.rows_written = rows_written
        self.cause = cause
        super().__init__(f"inserting experiment {index} failed after "
                         f"{rows_written} rows were written: {cause}")
