#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Notifications of a running split: start, progress, messages and finish.

Created on Sat Oct 17 11:05:47 2026
"""

import logging

from splitjob import MessageEvent

_LOG_LEVELS = {"error": logging.ERROR, "warning": logging.WARNING, "info": logging.INFO}


class ProgressReporter:

    #
    # Every callback is optional, a reporter without any of them only logs.
    #
    def __init__(self, on_start=None, on_progress=None, on_message=None, on_finish=None):
        self.on_start = on_start
        self.on_progress = on_progress
        self.on_message = on_message
        self.on_finish = on_finish
        self.started = False
        self.finished = False

    def start(self):
        if self.started:
            return
        self.started = True
        logging.debug("Split operation started.")
        if self.on_start is not None:
            self.on_start()

    def progress(self, event):
        logging.debug("Wrote %i of %i in part %i/%i (%s)." % (event.written, event.part_size, event.part_number, event.total_parts, event.file_name))
        if self.on_progress is not None:
            self.on_progress(event)

    #
    # Render a message code with its parameters, log it and hand it to the
    # caller so a front-end can show it without looking at the error object.
    #
    def message(self, code, *params):
        event = MessageEvent(code=code.name, params=params, text=code.render(*params), level=code.level)
        logging.log(_LOG_LEVELS[event.level], "%s: %s" % (event.code, event.text))
        if self.on_message is not None:
            self.on_message(event)
        return event

    #
    # Emit the message of an error and return the error so the caller can
    # raise it right after.
    #
    def fail(self, error_class, *params, code=None, **kwargs):
        error = error_class(*params, code=code, **kwargs)
        self.message(error.code, *params)
        return error

    def finish(self):
        if self.finished:
            return
        self.finished = True
        logging.debug("Split operation finished.")
        if self.on_finish is not None:
            self.on_finish()
