"""
Helpers shared by the ingestion package that have nothing to do with
transactions themselves: logging configuration and data directories.

Configuration comes from the environment:
- LOG_FILE: log file path (default DATA_DIR/logs/debug.log)
- LOG_LEVEL: level name used when no level is passed (default info)
- DATA_DIR: base directory for exports and logs (default cwd)
"""

import os
import pathlib
import logging

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

DATA_DIR_TYPES = ['exports', 'logs']


def setup_logging(debug=False, log_level=None, log_file=None):
    """Send package logs to a file and to the console.

    Args:
        debug (bool): Force DEBUG level
        log_level (str, optional): Level name; defaults to LOG_LEVEL or 'info'
        log_file (str, optional): Log file; defaults to LOG_FILE or
            debug.log in the 'logs' data directory

    Returns:
        str: Path of the log file in use
    """
    if debug:
        level = logging.DEBUG
    else:
        level_name = log_level or os.getenv('LOG_LEVEL', 'info')
        level = getattr(logging, level_name.upper(), logging.INFO)

    if log_file is None:
        log_file = os.getenv('LOG_FILE') or ensure_directory('logs') / 'debug.log'
    log_file = str(log_file)

    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler()
        ],
        force=True
    )
    logger.debug(f"Logging to {log_file} at level {logging.getLevelName(level)}")

    return log_file


def ensure_directory(dir_type):
    """Return the exports or logs directory under DATA_DIR, creating it.

    save_export writes transactions.csv to 'exports' and setup_logging
    keeps debug.log in 'logs' unless given explicit paths.

    Args:
        dir_type (str): 'exports' or 'logs'

    Returns:
        pathlib.Path: Path to the directory

    Raises:
        ValueError: If dir_type is invalid
    """
    if dir_type not in DATA_DIR_TYPES:
        raise ValueError(f"Invalid directory type: {dir_type}. Expected one of: {DATA_DIR_TYPES}")

    base_dir = os.getenv('DATA_DIR', os.getcwd())
    dir_path = pathlib.Path(base_dir) / dir_type
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path
