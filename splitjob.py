#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Data structures shared by the splitters, the worker and the job service.

Created on Sat Oct 17 10:31:02 2026
"""

import os
import re
import threading

from enum import Enum
from typing import Any, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field

KILOBYTE = 1024
MEGABYTE = 1024 * KILOBYTE
GIGABYTE = 1024 * MEGABYTE
TERABYTE = 1024 * GIGABYTE

# Read/write unit, the smallest part we accept is four of them.
BUFFER_UNIT = 4 * KILOBYTE
BUFFER_SIZE_BIG = 10 * MEGABYTE
MINIMUM_PART_SIZE = 4 * BUFFER_UNIT


class OperationMode(str, Enum):
    BYTES = "bytes"
    LINES = "lines"


#
# Units a part size can be given in.  The value carries the label and the
# factor to bytes, lines have no byte factor.
#
class SplitUnit(Enum):
    BYTES = ("B", 1)
    KILOBYTES = ("KB", KILOBYTE)
    MEGABYTES = ("MB", MEGABYTE)
    GIGABYTES = ("GB", GIGABYTE)
    TERABYTES = ("TB", TERABYTE)
    LINES = ("lines", None)

    @property
    def label(self):
        return self.value[0]

    @property
    def factor(self):
        return self.value[1]


_SIZE_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*(?:([kmgt])(?:i?b)?|b)?\s*$", re.IGNORECASE)
_SIZE_FACTORS = dict((unit.label[0].lower(), unit.factor) for unit in SplitUnit if unit.factor not in (None, 1))
_SIZE_FACTORS[""] = 1


def parse_size(size):
    """
    Turn '10MB', '1.5 GiB', '4096' or an int into a number of bytes.
    """
    if isinstance(size, int):
        return size
    match = _SIZE_RE.match(str(size))
    if match is None:
        raise ValueError("Invalid size format: %s" % size)
    number = float(match.group(1))
    return int(number * _SIZE_FACTORS[(match.group(2) or "").lower()])


def count_parts(source_size, part_size):
    if source_size <= part_size:
        return 1
    return (source_size + part_size - 1) // part_size


class SplitJob(BaseModel):
    """
    Configuration of one split operation.  It is frozen, a job is built by the
    caller, validated once and consumed by a single SplitWorker run.
    """

    model_config = ConfigDict(frozen=True)

    file_name: str
    part_size: int = Field(gt=0)
    operation_mode: OperationMode = OperationMode.BYTES
    destination_folder: Optional[str] = None
    file_format_pattern: Optional[str] = None
    delete_original_file: bool = False
    generation_log_file: Optional[str] = None
    # used in line mode when the source carries no byte order mark
    encoding: str = "utf-8"

    @property
    def source_folder(self):
        return os.path.dirname(os.path.abspath(self.file_name))

    @property
    def target_folder(self):
        if self.destination_folder:
            return self.destination_folder
        return self.source_folder


class PartDescriptor(BaseModel):
    file_name: str
    part_number: int
    total_parts: int
    written: int


class ProgressEvent(BaseModel):
    file_name: str
    part_number: int
    written: int
    total_parts: int
    part_size: int


class MessageEvent(BaseModel):
    code: str
    params: Tuple[Any, ...] = ()
    text: str
    level: str


class SplitResult(BaseModel):
    job: SplitJob
    parts: List[PartDescriptor]
    source_size: int
    source_deleted: bool = False


class CancelToken:
    """Flag shared between the thread running a job and whoever may stop it."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self):
        self._event.set()

    @property
    def cancelled(self):
        return self._event.is_set()
