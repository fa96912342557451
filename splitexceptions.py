#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Message codes and errors raised by the splitting engine.

Created on Sat Oct 17 10:12:40 2026
"""

from enum import Enum


#
# Every message the engine can emit.  The member name is the code handed to
# the caller and the value is the template rendered with the message params.
#
class SplitMessage(Enum):
    ERROR_MINIMUM_PART_SIZE = "The part size must be at least %i bytes."
    ERROR_NO_SPACE_TO_SPLIT = "Not enough free space to split: %i bytes free, %i bytes needed."
    ERROR_FILESYSTEM_NOTALLOW_SIZE = "The %s filesystem does not allow files bigger than %i %s."
    ERROR_OPENING_FILE = "Unable to open the file %s."
    ERROR_CREATING_FILE = "Unable to create the file %s."
    ERROR_CREATING_FOLDER = "Unable to create the destination folder %s."
    ERROR_INVALID_PATTERN = "The file name pattern %s can not be used to name the parts."
    ERROR_TOTALSIZE_NOTEQUALS = "Wrote %i of %i bytes read but the source holds %i bytes."
    INFO_SPLIT_CANCELLED = "The operation was cancelled while writing %s."
    INFO_SOURCE_DELETED = "The source file %s has been deleted."
    WARN_SOURCE_READONLY = "The source file %s is read only and has not been deleted."

    @property
    def level(self):
        if self.name.startswith("ERROR"):
            return "error"
        if self.name.startswith("WARN"):
            return "warning"
        return "info"

    def render(self, *params):
        return self.value % params


class SplitFailedError(Exception):
    """Base class of every fatal split failure."""

    code = None

    def __init__(self, *params, code=None):
        if code is not None:
            self.code = code
        self.params = params
        if self.code is not None:
            text = self.code.render(*params)
        else:
            text = " ".join(str(param) for param in params)
        super().__init__(text)


class PartSizeTooSmallError(SplitFailedError):
    code = SplitMessage.ERROR_MINIMUM_PART_SIZE


class InsufficientSpaceError(SplitFailedError):
    code = SplitMessage.ERROR_NO_SPACE_TO_SPLIT


class UnsupportedPartSizeError(SplitFailedError):
    code = SplitMessage.ERROR_FILESYSTEM_NOTALLOW_SIZE


class SourceOpenFailureError(SplitFailedError):
    code = SplitMessage.ERROR_OPENING_FILE


class DestinationCreateFailureError(SplitFailedError):
    code = SplitMessage.ERROR_CREATING_FILE


class InvalidNamePatternError(SplitFailedError):
    code = SplitMessage.ERROR_INVALID_PATTERN


class SizeMismatchError(SplitFailedError):
    code = SplitMessage.ERROR_TOTALSIZE_NOTEQUALS


class SplitCancelledError(SplitFailedError):
    code = SplitMessage.INFO_SPLIT_CANCELLED

    #
    # parts holds the descriptors of the parts completed before the cancel,
    # the part in progress has already been removed.
    #
    def __init__(self, *params, code=None, parts=None):
        super().__init__(*params, code=code)
        self.parts = parts or []
