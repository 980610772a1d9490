import logging
from collections import namedtuple

MonitorSettings = namedtuple('MonitorSettings', ['width', 'height', 'nominal_rate', 'pixel_size'])


def get_display_settings(screen_index=None):
    """
    Current resolution, refresh rate and pixel depth of a display.

    Uses the highest-numbered screen (the stimulus monitor on a two-screen rig)
    unless screen_index picks another one.
    """
    import pyglet

    screens = pyglet.canvas.get_display().get_screens()
    screen = screens[-1] if screen_index is None else screens[screen_index]
    mode = screen.get_mode()
    return MonitorSettings(width=mode.width, height=mode.height,
                           nominal_rate=mode.rate, pixel_size=mode.depth)


def reconcile_monitor(db, display_query=get_display_settings, logger=None):
    """
    Append the live monitor settings to the monitor table if any of them
    differ from the most recent row. Returns True when a row was added.
    """
    logger = logger or logging.getLogger("ExperimentDB")

    current = display_query()
    last = db.last_monitor()

    if last is not None:
        stored = MonitorSettings(width=last['width'], height=last['height'],
                                 nominal_rate=last['nominal_rate'],
                                 pixel_size=last['pixel_size'])
        if stored == current:
            logger.info(f"Monitor settings unchanged: {current}")
            return False
        logger.info(f"Monitor settings changed from {stored} to {current}")
    else:
        logger.info(f"No monitor settings stored yet, adding {current}")

    db.add_monitor(width=current.width, height=current.height,
                   pixel_size=current.pixel_size, nominal_rate=current.nominal_rate)
    return True
