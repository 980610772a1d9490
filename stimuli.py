import time

from psychopy import core, visual

from add_experiments_to_db import record_and_maybe_flush


def blank_screen(data_logger, win, duration, brightness=0.5):
    """Uniform gray screen for collecting spontaneous activity."""
    start_t = time.strftime('%H:%M:%S')

    gray = brightness * 2 - 1   # psychopy rgb runs from -1 to 1
    win.color = (gray, gray, gray)
    win.flip()
    core.wait(duration)

    return record_and_maybe_flush(data_logger, start_t, [duration, brightness])


def full_field_flash(data_logger, win, sequence, frames_per_step=1, **kwargs):
    """
    Step the whole screen through a sequence of brightness levels (0-1),
    holding each one for frames_per_step frames.
    """
    start_t = time.strftime('%H:%M:%S')

    for level in sequence:
        gray = level * 2 - 1
        win.color = (gray, gray, gray)
        for _ in range(frames_per_step):
            win.flip()

    return record_and_maybe_flush(data_logger, start_t,
                                  [list(sequence), frames_per_step, *kwargs.values()])


def open_window(screen=1, fullscr=True):
    return visual.Window(screen=screen, fullscr=fullscr, units='pix', color=(0, 0, 0))
