'''
Interaction with the experimental DB
'''
import numbers

import pymysql.cursors


def connect(user, password, config):
    '''
    Open a connection to the experiments database.

    Every statement is committed as soon as it runs; there are no
    transactions to roll back.
    '''
    return pymysql.connect(
            db = config.get('dbname', 'test'),
            user = user,
            passwd = password,
            host = config.get('host', 'localhost'),
            port = config.get('port', 3306),
            autocommit = True,
            cursorclass = pymysql.cursors.DictCursor     # returns searchs as key/value pairs
            )


class ExperimentDB(object):
    '''
    The handful of statements the recorder needs, run over an open connection.
    '''

    def __init__(self, connection, config=None):
        config = config or {}
        self.connection = connection
        self.stimuli_table = config.get('stimuli_table', 'stimuli')
        self.experiments_table = config.get('experiments_table', 'experiments')
        self.monitor_table = config.get('monitor_table', 'monitor')

    @property
    def user(self):
        '''
        Name the connection authenticated as
        '''
        user = self.connection.user
        if isinstance(user, bytes):
            user = user.decode('utf-8')
        return user

    def stimulus_id(self, stimulus):
        '''
        id of 'stimulus' in the stimuli table, using the largest version when
        there is more than one. -1 if the stimulus isn't there.
        '''
        with self.connection.cursor() as cursor:
            sql = 'SELECT id FROM {0} WHERE name=%s ORDER BY version DESC LIMIT 1'.format(
                    self.stimuli_table)
            cursor.execute(sql, (stimulus,))
            row = cursor.fetchone()

        if not row:
            return -1
        stim_id = row['id']
        if isinstance(stim_id, bool) or not isinstance(stim_id, numbers.Integral):
            return -1
        return int(stim_id)

    def add_experiment(self, stimulus_id, user, date, start_time, end_time, params):
        with self.connection.cursor() as cursor:
            sql = ('INSERT INTO {0} (stimulus_id, user, date, start_time, end_time, params) '
                   'VALUES (%s, %s, %s, %s, %s, %s)').format(self.experiments_table)
            cursor.execute(sql, (stimulus_id, user, date, start_time, end_time, params))

    def last_monitor(self):
        '''
        Most recent monitor settings as a dict with width, height,
        nominal_rate and pixel_size, or None for an empty table
        '''
        with self.connection.cursor() as cursor:
            sql = ('SELECT width, height, nominal_rate, pixel_size FROM {0} '
                   'ORDER BY date DESC LIMIT 1').format(self.monitor_table)
            cursor.execute(sql)
            return cursor.fetchone()

    def add_monitor(self, width, height, pixel_size, nominal_rate):
        with self.connection.cursor() as cursor:
            sql = ('INSERT INTO {0} (width, height, pixel_size, nominal_rate) '
                   'VALUES (%s, %s, %s, %s)').format(self.monitor_table)
            cursor.execute(sql, (width, height, pixel_size, nominal_rate))

    def close(self):
        self.connection.close()
