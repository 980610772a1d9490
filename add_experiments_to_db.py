"""
Add experiment information to the db automatically.

How to use it from a stimulus script:

    from add_experiments_to_db import record_and_maybe_flush

    def mystim(data_logger, length, checker_size, **kwargs):
        start_t = time.strftime('%H:%M:%S')
        ...
        your stimulus goes in here
        ...
        record_and_maybe_flush(data_logger, start_t, [length, checker_size, *kwargs.values()])

The stimulus name stored in the db is the name of the function that called
record_and_maybe_flush ('mystim' above). Nothing is sent until a call passes
is_final_call=True, or the harness calls flush_only at the end of the session.
"""
import argparse
import getpass
import inspect
import sys

from config import DB_CONFIG
from credentials import DialogCredentialProvider, StaticCredentialProvider
from data_logger import DataLogger, FlushStatus
from utils import setup_logging

EXIT_CODES = {
    FlushStatus.OK: 0,
    FlushStatus.NOTHING_TO_DO: 0,
    FlushStatus.QUEUED: 0,
    FlushStatus.ERROR: 1,
    FlushStatus.ABORTED: 3,
}


def stimulus_name_from_stack(depth=1):
    """
    Name of the function depth frames above whoever called this.

    depth=1 from inside f gives the name of the function that called f.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            frame = frame.f_back
        return frame.f_code.co_name
    finally:
        del frame


def is_top_level_caller(depth=1):
    """
    True if the function depth frames above the caller was itself called
    straight from a script or the interpreter prompt.

    This is how older stimulus scripts decided when to flush: a stimulus run
    by hand flushes right away, the same stimulus run from a session harness
    doesn't. Pass the result as is_final_call to keep that behaviour.
    """
    frame = inspect.currentframe()
    try:
        for _ in range(depth + 1):
            frame = frame.f_back
        outer = frame.f_back
        return outer is None or outer.f_code.co_name == '<module>'
    finally:
        del frame


def record_and_maybe_flush(data_logger, start_time, parameters, is_final_call=False, stimulus_name=None):
    """Queue the caller's stimulus run; flush everything when is_final_call is set."""
    if stimulus_name is None:
        stimulus_name = stimulus_name_from_stack(1)
    return data_logger.record(start_time, parameters, stimulus_name=stimulus_name,
                              is_final_call=is_final_call)


def flush_only(data_logger):
    """Send whatever is queued to the db without adding a new experiment."""
    return data_logger.record(is_final_call=True)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Record a stimulus run in the experiments db, or check the monitor settings.')
    parser.add_argument('stimulus', nargs='?', default=None,
                        help='name of the stimulus that ran')
    parser.add_argument('start_time', nargs='?', default=None,
                        help='when it started, HH:MM:SS')
    parser.add_argument('parameters', nargs='*', default=[],
                        help='stimulus parameters, stored as given')
    parser.add_argument('-u', '--user', type=str, default=None,
                        help='db user; asks for the password on the terminal instead of a dialog')
    parser.add_argument('--check-monitor', action='store_true',
                        help='only update the monitor settings')
    parser.add_argument('--log-file', type=str, default=DB_CONFIG['log_file'])
    args = parser.parse_args(argv)
    if not args.check_monitor and (args.stimulus is None or args.start_time is None):
        parser.error('stimulus and start_time are required unless --check-monitor is given')
    return args


def main(argv=None):
    args = parse_args(argv)
    logger = setup_logging(args.log_file)

    if args.user:
        provider = StaticCredentialProvider(args.user, getpass.getpass(f"Password for {args.user}: "))
    else:
        provider = DialogCredentialProvider(DB_CONFIG.get('default_password', ''), logger)
    data_logger = DataLogger(DB_CONFIG, credential_provider=provider, logger=logger)

    if args.check_monitor:
        result = data_logger.update_monitor()
    else:
        result = data_logger.record(args.start_time, args.parameters, stimulus_name=args.stimulus,
                                    is_final_call=True)
    return EXIT_CODES[result.status]


if __name__ == '__main__':
    sys.exit(main())
