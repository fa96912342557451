#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Runs one split job from start to end: validation, splitting and deletion of
the source.  Whatever happens the finish notification is fired once, and any
failure is raised to the caller after it.

Created on Sun Oct 18 08:47:30 2026
"""

import logging
import os
import stat

from enum import Enum

from capacity import CapacityGuard
from linesplitter import LineBasedSplitter
from partnamer import PartNamer
from progress import ProgressReporter
from sizesplitter import SizeBasedSplitter
from splitexceptions import SourceOpenFailureError, SplitMessage
from splitjob import BUFFER_SIZE_BIG, OperationMode, SplitResult, count_parts


class SplitState(str, Enum):
    NOT_STARTED = "not started"
    VALIDATING = "validating"
    SPLITTING = "splitting"
    FINALIZING = "finalizing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class SplitWorker:

    #
    # A worker consumes a single job.  Guard, reporter and cancel token can be
    # handed in by the caller, otherwise defaults are used.
    #
    def __init__(self, job, reporter=None, guard=None, token=None, buffer_size=BUFFER_SIZE_BIG):
        self.job = job
        self.reporter = reporter or ProgressReporter()
        self.guard = guard or CapacityGuard()
        self.token = token
        self.buffer_size = buffer_size
        self.state = SplitState.NOT_STARTED

    #
    # Number of parts known before splitting, lines can not be counted without
    # reading the whole file so line mode reports 0.
    #
    def parts(self, source_size):
        if self.job.operation_mode == OperationMode.LINES:
            return 0
        return count_parts(source_size, self.job.part_size)

    def _source_size(self):
        try:
            info = os.stat(self.job.file_name)
        except OSError as error:
            raise self.reporter.fail(SourceOpenFailureError, self.job.file_name) from error
        if not stat.S_ISREG(info.st_mode):
            raise self.reporter.fail(SourceOpenFailureError, self.job.file_name)
        return info.st_size

    def doSplit(self):
        self.reporter.start()
        try:
            self.state = SplitState.VALIDATING
            source_size = self._source_size()
            total_parts = self.parts(source_size)
            self.guard.check(self.job, source_size, self.reporter)

            namer = PartNamer(self.job, total_parts)
            namer.verify(self.reporter)
            namer.prepare_destination(self.reporter)

            self.state = SplitState.SPLITTING
            logging.info("Splitting %s (%i bytes) by %s into parts of %i." % (self.job.file_name, source_size, self.job.operation_mode.value, self.job.part_size))
            if self.job.operation_mode == OperationMode.LINES:
                splitter = LineBasedSplitter(self.job, namer, self.reporter, self.token)
                parts = splitter.split()
            else:
                splitter = SizeBasedSplitter(self.job, namer, self.reporter, self.token, self.buffer_size)
                parts = splitter.split(source_size, total_parts)

            self.state = SplitState.FINALIZING
            deleted = self._delete_source()

            self.state = SplitState.SUCCEEDED
            logging.info("Finished splitting %s into %i parts." % (self.job.file_name, len(parts)))
            return SplitResult(job=self.job, parts=parts, source_size=source_size, source_deleted=deleted)
        except Exception as error:
            self.state = SplitState.FAILED
            logging.error("Split of %s failed: %s" % (self.job.file_name, error))
            raise
        finally:
            self.reporter.finish()

    def _delete_source(self):
        if not self.job.delete_original_file:
            return False
        mode = os.stat(self.job.file_name).st_mode
        if not mode & stat.S_IWUSR:
            self.reporter.message(SplitMessage.WARN_SOURCE_READONLY, self.job.file_name)
            return False
        os.remove(self.job.file_name)
        self.reporter.message(SplitMessage.INFO_SOURCE_DELETED, self.job.file_name)
        return True
