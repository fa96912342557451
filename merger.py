#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Puts split parts back together into a single file.

Created on Sun Oct 18 10:02:16 2026
"""

import logging
import os
import re

from progress import ProgressReporter
from splitexceptions import DestinationCreateFailureError, SourceOpenFailureError, SplitCancelledError
from splitjob import BUFFER_SIZE_BIG, ProgressEvent

# name_007(123).ext as written by the default naming pattern
PART_RE = re.compile(r"^(?P<stem>.*)_(?P<index>\d+)\((?P<total>\d+)\)(?P<ext>.*)$")


#
# Part paths listed in a generation log, one name per line, joined with the
# folder the parts were written to.
#
def parts_from_log(log_path, parts_dir=None):
    if parts_dir is None:
        parts_dir = os.path.dirname(os.path.abspath(log_path))
    with open(log_path, 'r', encoding='utf-8') as logfile:
        names = [line.strip() for line in logfile]
    return [os.path.join(parts_dir, name) for name in names if name]


#
# All the siblings of a part named by the default pattern, in part order.
# The count found on disk has to match the total recorded in the names.
#
def parts_from_pattern(first_part):
    folder = os.path.dirname(os.path.abspath(first_part))
    match = PART_RE.match(os.path.basename(first_part))
    if match is None:
        raise SourceOpenFailureError(first_part)

    found = []
    for entry in os.listdir(folder):
        sibling = PART_RE.match(entry)
        if sibling is None:
            continue
        if sibling.group("stem", "total", "ext") != match.group("stem", "total", "ext"):
            continue
        found.append((int(sibling.group("index")), os.path.join(folder, entry)))
    found.sort()

    total = int(match.group("total"))
    if total and len(found) != total:
        logging.error("Found %i parts of %s but the names record %i." % (len(found), first_part, total))
        raise SourceOpenFailureError(first_part)
    return [path for index, path in found]


def merge_parts(part_paths, output, reporter=None, token=None, buffer_size=BUFFER_SIZE_BIG):
    """
    Concatenate part_paths in order into output.  Returns the number of bytes
    written.
    """
    reporter = reporter or ProgressReporter()
    total_parts = len(part_paths)
    target = os.path.abspath(output)
    for part in part_paths:
        if os.path.abspath(part) == target:
            raise reporter.fail(DestinationCreateFailureError, output)
        if not os.path.isfile(part):
            raise reporter.fail(SourceOpenFailureError, part)

    try:
        outfile = open(output, 'wb')
    except OSError as error:
        raise reporter.fail(DestinationCreateFailureError, output) from error

    bytes_in_total = 0
    try:
        with outfile:
            for part_number, part in enumerate(part_paths, start=1):
                bytes_in_part = 0
                part_size = os.path.getsize(part)
                with open(part, 'rb') as infile:
                    while True:
                        if token is not None and token.cancelled:
                            raise reporter.fail(SplitCancelledError, output)
                        chunk = infile.read(buffer_size)
                        if not chunk:
                            break
                        outfile.write(chunk)
                        bytes_in_part += len(chunk)
                        reporter.progress(ProgressEvent(file_name=part, part_number=part_number, written=bytes_in_part, total_parts=total_parts, part_size=part_size))
                bytes_in_total += bytes_in_part
                logging.debug("Merged %s (%i bytes) into %s." % (part, bytes_in_part, output))
    except SplitCancelledError:
        # a half merged file is of no use
        os.remove(output)
        raise

    logging.info("Merged %i parts into %s, %i bytes." % (total_parts, output, bytes_in_total))
    return bytes_in_total
