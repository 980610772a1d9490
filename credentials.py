import logging

import pymysql

from errors import ConnectionFailed, UserAborted
from utils import popupError

USER_PROMPT = 'Your db name (do not use root)'
PASSWORD_PROMPT = 'password'
RETRY_MESSAGE = "Couldn't connect to db. Do you want to try again?"


class CredentialProvider:
    """Where the database login comes from."""

    def get_credentials(self):
        """Return (user, password), or None if the user cancelled."""
        raise NotImplementedError

    def confirm_retry(self, message):
        """Ask whether to try logging in again after a failure."""
        raise NotImplementedError

    def rejected(self, user, reason):
        """Called when a username is refused before connecting."""


class DialogCredentialProvider(CredentialProvider):
    """
    Asks for the login with PsychoPy dialogs, the same kind of window the
    experiment scripts already use for subject info.

    default_password is prefilled in the password field. It is empty unless
    the lab sets one in DB_CONFIG; a prefilled password is visible to anyone
    at the rig, so it is logged as a warning every time it is offered.
    """

    def __init__(self, default_password='', logger=None):
        self.default_password = default_password
        self.logger = logger or logging.getLogger("ExperimentDB")

    def get_credentials(self):
        from psychopy import gui

        if self.default_password:
            self.logger.warning("Login dialog prefilled with the configured default password")
        info = {USER_PROMPT: '', PASSWORD_PROMPT: self.default_password}
        dlg = gui.DlgFromDict(info, title='DB info', order=[USER_PROMPT, PASSWORD_PROMPT])
        if not dlg.OK:
            return None
        return info[USER_PROMPT].strip(), info[PASSWORD_PROMPT]

    def confirm_retry(self, message):
        from psychopy import gui

        dlg = gui.Dlg(title='Error connecting to DB')
        dlg.addText(message)
        dlg.show()
        return dlg.OK

    def rejected(self, user, reason):
        popupError(reason)


class StaticCredentialProvider(CredentialProvider):
    """Fixed login for scripted runs: offered once, never retried."""

    def __init__(self, user, password):
        self.user = user
        self.password = password
        self.used = False

    def get_credentials(self):
        if self.used:
            return None
        self.used = True
        return self.user, self.password

    def confirm_retry(self, message):
        return False


def try_connect(connect, user, password):
    """One connection attempt; driver errors become ConnectionFailed."""
    try:
        return connect(user, password)
    except pymysql.MySQLError as e:
        raise ConnectionFailed(f"Couldn't connect to db as {user}: {e}") from e


def connect_with_retry(provider, connect, reserved_user='root', logger=None):
    """
    Keep asking provider for a login until connect(user, password) succeeds.

    Empty and reserved usernames are refused without contacting the server.
    A cancelled dialog counts as a failed attempt. When the user declines to
    try again, raises UserAborted.
    """
    logger = logger or logging.getLogger("ExperimentDB")

    while True:
        credentials = provider.get_credentials()
        if credentials is None:
            logger.info("DB login cancelled")
        else:
            user, password = credentials
            if not user or user == reserved_user:
                reason = f"Refusing to log in as {user!r}, please use your own db name"
                logger.warning(reason)
                provider.rejected(user, reason)
                continue
            try:
                connection = try_connect(connect, user, password)
            except ConnectionFailed as e:
                logger.warning(str(e))
            else:
                logger.info(f"Connected to db as {user}")
                return connection

        if not provider.confirm_retry(RETRY_MESSAGE):
            raise UserAborted("user declined to retry the db login")
