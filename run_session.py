from add_experiments_to_db import flush_only
from config import DB_CONFIG
from data_logger import DataLogger
from stimuli import blank_screen, full_field_flash, open_window
from utils import setup_logging


def main():
    # Initialize logging
    logger = setup_logging(DB_CONFIG['log_file'])

    # One logger for the whole session, every stimulus adds its run to it
    data_logger = DataLogger(DB_CONFIG, logger=logger)
    win = open_window()

    # Run each stimulus of the session
    blank_screen(data_logger, win, duration=60)
    full_field_flash(data_logger, win, [0, 1, 0, 1], frames_per_step=30, contrast=1.0)
    blank_screen(data_logger, win, duration=60)
    win.close()

    # Send everything to the db once the screen is free for the login dialog
    result = flush_only(data_logger)
    logger.info(f"Session finished: {result.status.value}, {result.rows_written} experiments saved")


if __name__ == '__main__':
    main()
