'''Submodule for the package logger. Meant to log information about network
    construction and the training process and to report numeric anomalies.

    Nothing is written unless a log directory is configured, either by
    passing `log_dir` to `setup_logger` or through the LEABRAX_LOG_DIR
    environment variable. The log file is named after the calling script.
'''

import logging
import os
import __main__

LOG_DIR_ENV = "LEABRAX_LOG_DIR"

# Set up logging
def setup_logger(log_dir: str = None, level = logging.DEBUG):
    logger = logging.getLogger("leabrax")
    logger.setLevel(level)

    if not logger.handlers:
        logger.addHandler(logging.NullHandler())

    log_dir = os.environ.get(LOG_DIR_ENV) if log_dir is None else log_dir
    if not log_dir:
        return logger
    os.makedirs(log_dir, exist_ok=True)  # Ensure the logs directory exists

    main_file = getattr(__main__, "__file__", None)
    filename = "leabrax" if main_file is None else os.path.basename(main_file)
    filename = os.path.splitext(filename)[0] + ".log"
    log_path = os.path.abspath(os.path.join(log_dir, filename))

    # Check if handler already exists to avoid duplicates
    for handler in logger.handlers:
        if getattr(handler, "baseFilename", None) == log_path:
            return logger

    # Create file handler and set formatter
    file_handler = logging.FileHandler(log_path)
    formatter = logging.Formatter('%(asctime)s - %(levelname)s - %(message)s')
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    return logger

# initialize logger
log = setup_logger()
