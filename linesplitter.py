#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Line mode splitter.  Copies part_size lines into every part, keeping the
encoding and byte order mark of the source in each of them.

Created on Sat Oct 17 15:18:09 2026
"""

import codecs
import io
import logging
import os

from splitexceptions import DestinationCreateFailureError, SourceOpenFailureError, SplitCancelledError
from splitjob import PartDescriptor, ProgressEvent

#
# Byte order mark -> (codec used to read, codec used to write after the mark).
# UTF-32 LE has to be tried before UTF-16 LE, its mark starts the same way.
#
BYTE_ORDER_MARKS = (
    (codecs.BOM_UTF32_LE, "utf-32", "utf-32-le"),
    (codecs.BOM_UTF32_BE, "utf-32", "utf-32-be"),
    (codecs.BOM_UTF8, "utf-8-sig", "utf-8"),
    (codecs.BOM_UTF16_LE, "utf-16", "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16", "utf-16-be"),
)


class TextEncoding:

    def __init__(self, read_codec, write_codec, bom=b""):
        self.read_codec = read_codec
        self.write_codec = write_codec
        self.bom = bom


def detect_encoding(file_name, default="utf-8"):
    with open(file_name, 'rb') as infile:
        head = infile.read(4)
    for bom, read_codec, write_codec in BYTE_ORDER_MARKS:
        if head.startswith(bom):
            return TextEncoding(read_codec, write_codec, bom)
    return TextEncoding(default, default)


class LineBasedSplitter:

    def __init__(self, job, namer, reporter, token=None):
        self.job = job
        self.namer = namer
        self.reporter = reporter
        self.token = token

    def _create(self, file_name, encoding):
        try:
            raw = open(file_name, 'wb')
        except OSError as error:
            raise self.reporter.fail(DestinationCreateFailureError, file_name) from error
        raw.write(encoding.bom)
        return io.TextIOWrapper(raw, encoding=encoding.write_codec, errors='surrogateescape', newline='')

    #
    # Lines keep their own terminators, newline='' turns off any translation on
    # both sides.  The next part is only opened once a line needs it.
    #
    def split(self):
        part_size = self.job.part_size
        written = []

        try:
            encoding = detect_encoding(self.job.file_name, self.job.encoding)
            infile = open(self.job.file_name, 'r', encoding=encoding.read_codec, errors='surrogateescape', newline='')
        except (OSError, LookupError) as error:
            raise self.reporter.fail(SourceOpenFailureError, self.job.file_name) from error
        logging.debug("Reading %s as %s." % (self.job.file_name, encoding.read_codec))

        part_number = 1
        file_name = self.namer.name_for(part_number)
        lines_in_part = 0

        with infile:
            outfile = self._create(file_name, encoding)
            try:
                for line in infile:
                    if self.token is not None and self.token.cancelled:
                        self._cancel(outfile, file_name, written)

                    if outfile is None:
                        part_number += 1
                        file_name = self.namer.name_for(part_number)
                        outfile = self._create(file_name, encoding)

                    outfile.write(line)
                    lines_in_part += 1
                    self.reporter.progress(ProgressEvent(file_name=file_name, part_number=part_number, written=lines_in_part, total_parts=0, part_size=part_size))

                    if lines_in_part >= part_size:
                        outfile.close()
                        outfile = None
                        written.append((file_name, part_number, lines_in_part))
                        lines_in_part = 0

                if outfile is not None:
                    outfile.close()
                    outfile = None
                    written.append((file_name, part_number, lines_in_part))
            except UnicodeError as error:
                # the part being written holds an unknown share of the source
                if outfile is not None:
                    outfile.close()
                    outfile = None
                    if os.path.exists(file_name):
                        os.remove(file_name)
                logging.debug("Unable to decode %s as %s: %s" % (self.job.file_name, encoding.read_codec, error))
                raise self.reporter.fail(SourceOpenFailureError, self.job.file_name) from error
            finally:
                if outfile is not None:
                    outfile.close()

        total_parts = len(written)
        logging.debug("Split %s into %i parts of up to %i lines." % (self.job.file_name, total_parts, part_size))
        return [PartDescriptor(file_name=name, part_number=number, total_parts=total_parts, written=lines) for name, number, lines in written]

    def _cancel(self, outfile, file_name, written):
        if outfile is not None:
            outfile.close()
            if os.path.exists(file_name):
                os.remove(file_name)
        parts = [PartDescriptor(file_name=name, part_number=number, total_parts=0, written=lines) for name, number, lines in written]
        raise self.reporter.fail(SplitCancelledError, file_name, parts=parts)
