#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Byte mode splitter.  Streams the source through a buffer and cuts it into
parts of exactly part_size bytes, the last part holding what is left.

Created on Sat Oct 17 13:40:21 2026
"""

import logging
import os

from splitexceptions import DestinationCreateFailureError, SizeMismatchError, SourceOpenFailureError, SplitCancelledError
from splitjob import BUFFER_SIZE_BIG, PartDescriptor, ProgressEvent


class SizeBasedSplitter:

    def __init__(self, job, namer, reporter, token=None, buffer_size=BUFFER_SIZE_BIG):
        self.job = job
        self.namer = namer
        self.reporter = reporter
        self.token = token
        # never read more than a part at once
        self.buffer_size = min(buffer_size, job.part_size)

    def _create(self, file_name):
        try:
            return open(file_name, 'wb')
        except OSError as error:
            raise self.reporter.fail(DestinationCreateFailureError, file_name) from error

    def _describe(self, parts, file_name, part_number, total_parts, written):
        parts.append(PartDescriptor(file_name=file_name, part_number=part_number, total_parts=total_parts, written=written))

    #
    # Split the source, returns the descriptors of the parts written.  Parts are
    # left on disk when the sizes do not add up, the caller decides what to do
    # with them.
    #
    def split(self, source_size, total_parts):
        part_size = self.job.part_size
        parts = []

        try:
            infile = open(self.job.file_name, 'rb')
        except OSError as error:
            raise self.reporter.fail(SourceOpenFailureError, self.job.file_name) from error

        part_number = 1
        file_name = self.namer.name_for(part_number)
        bytes_in_total = 0
        bytes_written = 0
        bytes_in_part = 0

        with infile:
            outfile = self._create(file_name)
            try:
                while True:
                    if self.token is not None and self.token.cancelled:
                        self._cancel(outfile, file_name, parts)

                    chunk = infile.read(self.buffer_size)
                    if not chunk:
                        break
                    bytes_in_buffer = len(chunk)

                    if outfile is None:
                        # the source grew after the last part was closed
                        bytes_in_total += bytes_in_buffer
                        continue

                    if bytes_in_part + bytes_in_buffer <= part_size:
                        outfile.write(chunk)
                        bytes_in_part += bytes_in_buffer
                        bytes_written += bytes_in_buffer
                    else:
                        # fill the current part up to its size and start the next one
                        pending = part_size - bytes_in_part
                        view = memoryview(chunk)
                        if pending > 0:
                            outfile.write(view[:pending])
                            bytes_written += pending
                        outfile.close()
                        self._describe(parts, file_name, part_number, total_parts, part_size)
                        outfile = None
                        bytes_in_part = part_size

                        if bytes_in_total + pending < source_size:
                            part_number += 1
                            file_name = self.namer.name_for(part_number)
                            outfile = self._create(file_name)
                            outfile.write(view[pending:])
                            bytes_in_part = bytes_in_buffer - pending
                            bytes_written += bytes_in_part

                    bytes_in_total += bytes_in_buffer
                    self.reporter.progress(ProgressEvent(file_name=file_name, part_number=part_number, written=bytes_in_part, total_parts=total_parts, part_size=part_size))

                if outfile is not None:
                    outfile.close()
                    self._describe(parts, file_name, part_number, total_parts, bytes_in_part)
                    outfile = None
            finally:
                if outfile is not None:
                    outfile.close()

        logging.debug("Split %s into %i parts, %i bytes written." % (self.job.file_name, len(parts), bytes_written))
        if bytes_written != source_size or bytes_in_total != source_size:
            raise self.reporter.fail(SizeMismatchError, bytes_written, bytes_in_total, source_size)
        return parts

    #
    # The part being written is incomplete, drop it and keep the finished ones.
    #
    def _cancel(self, outfile, file_name, parts):
        if outfile is not None:
            outfile.close()
            if os.path.exists(file_name):
                os.remove(file_name)
        raise self.reporter.fail(SplitCancelledError, file_name, parts=list(parts))
