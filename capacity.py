#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Pre-flight checks run before any part is written: minimum part size, free
space on the destination drive and the maximum file size the destination
filesystem can hold.

Created on Sat Oct 17 12:02:55 2026
"""

import logging
import os
import shutil

from splitexceptions import InsufficientSpaceError, PartSizeTooSmallError, UnsupportedPartSizeError
from splitjob import GIGABYTE, MEGABYTE, MINIMUM_PART_SIZE, OperationMode, parse_size

#
# Filesystem format -> (amount, factor, unit label) of its biggest file.
# Formats not listed here have no limit enforced.
#
FILESYSTEM_LIMITS = {
    "FAT12": (32, MEGABYTE, "Mb"),
    "FAT16": (2, GIGABYTE, "Gb"),
    "FAT32": (4, GIGABYTE, "Gb"),
}

#
# Kernel filesystem type names that map onto one of the formats above.
#
FILESYSTEM_ALIASES = {
    "vfat": "FAT32",
    "msdos": "FAT16",
    "umsdos": "FAT16",
}

MOUNTS_FILE = "/proc/mounts"


def existing_folder(path):
    """Closest folder of path that exists, path itself included."""
    path = os.path.abspath(path)
    while not os.path.isdir(path):
        parent = os.path.dirname(path)
        if parent == path:
            break
        path = parent
    return path


def free_space(path):
    return shutil.disk_usage(existing_folder(path)).free


def _unescape_mount(field):
    # /proc/mounts writes spaces, tabs, newlines and backslashes as octal
    return field.replace("\\040", " ").replace("\\011", "\t").replace("\\012", "\n").replace("\\134", "\\")


#
# Format of the filesystem holding path, read from the mount table.  Returns
# None when the table can not be read.
#
def filesystem_format(path, mounts_file=MOUNTS_FILE):
    target = os.path.realpath(path)
    best_mount = None
    best_type = None
    try:
        with open(mounts_file, 'r', encoding='utf-8', errors='replace') as mounts:
            for line in mounts:
                fields = line.split()
                if len(fields) < 3:
                    continue
                mount_point = _unescape_mount(fields[1])
                if target != mount_point and not target.startswith(mount_point.rstrip("/") + "/"):
                    continue
                if best_mount is None or len(mount_point) > len(best_mount):
                    best_mount = mount_point
                    best_type = fields[2]
    except OSError as error:
        logging.debug("Unable to read the mount table %s: %s" % (mounts_file, error))
        return None

    if best_type is None:
        return None
    return FILESYSTEM_ALIASES.get(best_type.lower(), best_type.upper())


#
# Extra limits from the [filesystem_limits] section of a config, values are
# size strings such as 4 GB.
#
def limits_from_config(config, section="filesystem_limits"):
    limits = dict(FILESYSTEM_LIMITS)
    if not config.has_section(section):
        return limits
    for name in config.options(section):
        size = parse_size(config.get(section, name))
        limits[name.upper()] = (size, 1, "bytes")
    return limits


class CapacityGuard:

    def __init__(self, limits=None, free_space_probe=None, format_probe=None):
        self.limits = limits if limits is not None else dict(FILESYSTEM_LIMITS)
        self.free_space_probe = free_space_probe or free_space
        self.format_probe = format_probe or filesystem_format

    def check(self, job, source_size, reporter):
        by_bytes = job.operation_mode == OperationMode.BYTES

        if by_bytes and job.part_size < MINIMUM_PART_SIZE:
            raise reporter.fail(PartSizeTooSmallError, MINIMUM_PART_SIZE)

        # Room for a full copy of the source is required.
        available = self.free_space_probe(job.target_folder)
        logging.debug("Free space on %s is %i bytes, source holds %i bytes." % (job.target_folder, available, source_size))
        if available <= source_size:
            raise reporter.fail(InsufficientSpaceError, available, source_size)

        if not by_bytes:
            return

        drive_format = self.format_probe(job.target_folder)
        if drive_format is None or drive_format not in self.limits:
            return
        amount, factor, label = self.limits[drive_format]
        if job.part_size > amount * factor:
            raise reporter.fail(UnsupportedPartSizeError, drive_format, amount, label)
