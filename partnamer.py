#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Builds the names of the part files.

Created on Sat Oct 17 11:24:13 2026
"""

import logging
import os

from splitexceptions import DestinationCreateFailureError, InvalidNamePatternError, SplitMessage


#
# Default pattern: the source name with the part number and the total number
# of parts, both padded to the width of the total, e.g. name_001(123).ext
#
def default_pattern(file_name, total_parts):
    width = len(str(total_parts))
    stem, ext = os.path.splitext(os.path.basename(file_name))
    return stem + "_{0:0%dd}({1:0%dd})" % (width, width) + ext


class PartNamer:

    def __init__(self, job, total_parts):
        self.job = job
        self.total_parts = total_parts
        if job.file_format_pattern:
            self.pattern = job.file_format_pattern
        else:
            self.pattern = default_pattern(job.file_name, total_parts)
        self.folder = job.target_folder

    def format(self, part_number):
        return self.pattern.format(part_number, self.total_parts)

    #
    # Make sure the pattern takes two numbers, tells parts apart and never
    # points back at the file we are about to read.
    #
    def verify(self, reporter):
        try:
            first = self.format(1)
            second = self.format(2)
        except (IndexError, KeyError, ValueError) as error:
            logging.debug("Pattern %s rejected: %s" % (self.pattern, error))
            raise reporter.fail(InvalidNamePatternError, self.pattern) from error

        if self.total_parts != 1 and first == second:
            raise reporter.fail(InvalidNamePatternError, self.pattern)

        source = os.path.abspath(self.job.file_name)
        if os.path.abspath(os.path.join(self.folder, first)) == source:
            raise reporter.fail(InvalidNamePatternError, self.pattern)

    def prepare_destination(self, reporter):
        if os.path.isdir(self.folder):
            return
        logging.debug("Making directory: %s" % self.folder)
        try:
            os.makedirs(self.folder, exist_ok=True)
        except OSError as error:
            raise reporter.fail(DestinationCreateFailureError, self.folder, code=SplitMessage.ERROR_CREATING_FOLDER) from error

    #
    # Name of part number part_number, joined with the destination folder.  The
    # bare name is recorded in the generation log when one is configured.
    #
    def name_for(self, part_number):
        name = self.format(part_number)
        self.register(name)
        return os.path.join(self.folder, name)

    def register(self, name):
        if self.job.generation_log_file is None:
            return
        with open(self.job.generation_log_file, 'a', encoding='utf-8') as logfile:
            logfile.write(name + "\n")
