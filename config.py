# Configuration parameters for the experiment database.
DB_CONFIG = {
    'dbname': 'test',
    'host': 'localhost',
    'port': 3306,
    'reserved_user': 'root',          # never sent to the server, the dialog asks again
    'default_password': '',           # prefilled in the login dialog if not empty
    'stimuli_table': 'stimuli',
    'experiments_table': 'experiments',
    'monitor_table': 'monitor',
    'log_file': 'experiment_db_log.txt',
}
