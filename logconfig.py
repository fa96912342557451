#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Logging setup shared by the service and the command line tool.

Created on Sun Oct 18 11:20:44 2026
"""

import configparser
import logging
import os

from logging.handlers import RotatingFileHandler

LOGGING_CONFIG = os.environ.get('FSPLITTER_LOGGING', 'logging.ini')

DEFAULT_FORMAT = '%(levelname)s:%(asctime)s %(message)s'
DEFAULT_DATEFMT = '%m/%d/%Y %I:%M:%S %p'


#
# Read logging.ini and hang a rotating file handler on the root logger.  Any
# option missing from the file falls back to the defaults above.
#
def configure_logging(path=LOGGING_CONFIG):

    config = configparser.ConfigParser(interpolation=None)
    config.read(path)

    formatter = config.get('logging', 'format', fallback=DEFAULT_FORMAT)
    datefmt = config.get('logging', 'datefmt', fallback=DEFAULT_DATEFMT)
    logfile = config.get('logging', 'logfile', fallback='/tmp/fsplitter.log')
    max_bytes = config.getint('logging', 'max_bytes', fallback=1000000000)
    backup_count = config.getint('logging', 'backup_count', fallback=10)

    handler = RotatingFileHandler(logfile, maxBytes=max_bytes, backupCount=backup_count)
    logging.basicConfig(handlers=[handler], format=formatter, datefmt=datefmt, force=True)

    log_level = config.get('logging', 'log_level', fallback='INFO')
    logging.getLogger().setLevel(log_level.upper())
    return handler
