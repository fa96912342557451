#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Command line front-end: split and merge locally, or submit to the service.

Created on Sun Oct 18 15:11:08 2026
"""

import argparse
import os
import sys
import requests

from tqdm import tqdm

from logconfig import configure_logging
from merger import merge_parts, parts_from_log, parts_from_pattern
from progress import ProgressReporter
from splitclient import SplitClient
from splitexceptions import SplitFailedError
from splitjob import OperationMode, SplitJob, SplitUnit, parse_size
from splitworker import SplitWorker


class ConsoleProgress:
    """
    Feeds progress events into a tqdm bar and prints messages on stderr.
    """

    def __init__(self, total=None, unit=SplitUnit.BYTES.label):
        self.total = total
        self.unit = unit
        self.bar = None

    def start(self):
        self.bar = tqdm(total=self.total, unit=self.unit, unit_scale=self.unit == SplitUnit.BYTES.label, file=sys.stderr)

    def progress(self, event):
        if self.unit == SplitUnit.BYTES.label:
            done = (event.part_number - 1) * event.part_size + event.written
            self.bar.update(max(done - self.bar.n, 0))
        elif self.unit == 'parts':
            self.bar.update(max(event.part_number - self.bar.n, 0))
        else:
            self.bar.update(1)

    def message(self, event):
        tqdm.write("%s: %s" % (event.code, event.text), file=sys.stderr)

    def finish(self):
        if self.bar is not None:
            self.bar.close()

    def reporter(self):
        return ProgressReporter(on_start=self.start, on_progress=self.progress, on_message=self.message, on_finish=self.finish)


def _job_fields(args):
    if args.lines is not None:
        mode, part_size = OperationMode.LINES, args.lines
    else:
        mode, part_size = OperationMode.BYTES, parse_size(args.size)
    return {
        'file_name': args.file,
        'part_size': part_size,
        'operation_mode': mode,
        'destination_folder': args.dest,
        'file_format_pattern': args.pattern,
        'delete_original_file': args.delete,
        'generation_log_file': args.log,
        'encoding': args.encoding,
    }


def split_command(args):
    job = SplitJob(**_job_fields(args))
    if job.operation_mode == OperationMode.LINES:
        console = ConsoleProgress(unit=SplitUnit.LINES.label)
    else:
        console = ConsoleProgress(total=_size_of(job.file_name))
    result = SplitWorker(job, console.reporter()).doSplit()
    for part in result.parts:
        print(part.file_name)
    return 0


def _size_of(file_name):
    try:
        with open(file_name, 'rb') as infile:
            return infile.seek(0, 2)
    except OSError:
        return None


def merge_command(args):
    if args.parts:
        parts = args.parts
    elif args.log:
        parts = parts_from_log(args.log, args.parts_dir)
    else:
        try:
            parts = parts_from_pattern(args.first)
        except SplitFailedError as error:
            print(str(error), file=sys.stderr)
            return 1
    console = ConsoleProgress(total=len(parts), unit='parts')
    reporter = console.reporter()
    reporter.start()
    try:
        written = merge_parts(parts, args.output, reporter)
    finally:
        reporter.finish()
    print("Merged %i parts into %s (%i bytes)." % (len(parts), args.output, written))
    return 0


def submit_command(args):
    fields = _job_fields(args)
    fields['operation_mode'] = fields['operation_mode'].value
    # the service resolves paths from its own working directory
    fields['file_name'] = os.path.abspath(args.file)
    client = SplitClient(args.server)
    job_id = client.submit_split(**fields)
    print(job_id)
    if not args.wait:
        return 0
    status = client.wait_for(job_id)
    for message in status['messages']:
        print("%s: %s" % (message['code'], message['text']), file=sys.stderr)
    return 0 if status['status'] == 'succeeded' else 1


def _add_split_options(parser):
    parser.add_argument('file', help='The file to split.')
    size = parser.add_mutually_exclusive_group(required=True)
    size.add_argument('--size', help='Part size in bytes or with a unit, e.g. 100KB, 10MB, 2GB.')
    size.add_argument('--lines', type=int, help='Number of lines per part.')
    parser.add_argument('--dest', default=None, help='Destination folder (default: folder of the file).')
    parser.add_argument('--pattern', default=None, help='Part name pattern, {0} is the part number and {1} the total.')
    parser.add_argument('--log', default=None, help='Append the name of every part to this file.')
    parser.add_argument('--delete', action='store_true', default=False, help='Delete the file once it has been split.')
    parser.add_argument('--encoding', default='utf-8', help='Text encoding of files without a byte order mark (line mode).')


def build_parser():
    parser = argparse.ArgumentParser(prog='fsplit', description='Split a file into parts by size or by lines, and merge parts back.')
    commands = parser.add_subparsers(dest='command', required=True)

    split = commands.add_parser('split', help='Split a file locally.')
    _add_split_options(split)
    split.set_defaults(handler=split_command)

    merge = commands.add_parser('merge', help='Merge parts back into one file.')
    merge.add_argument('output', help='The file to write.')
    source = merge.add_mutually_exclusive_group(required=True)
    source.add_argument('--parts', nargs='+', help='Part files in order.')
    source.add_argument('--log', help='Generation log listing the parts.')
    source.add_argument('--first', help='Any part named by the default pattern, its siblings are found on disk.')
    merge.add_argument('--parts-dir', default=None, help='Folder holding the parts listed in the log.')
    merge.set_defaults(handler=merge_command)

    submit = commands.add_parser('submit', help='Submit a split job to a running service.')
    _add_split_options(submit)
    submit.add_argument('--server', required=True, help='Service URL, e.g. http://127.0.0.1:8990')
    submit.add_argument('--wait', action='store_true', default=False, help='Wait for the job to end.')
    submit.set_defaults(handler=submit_command)

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if getattr(args, 'size', None) is not None:
        try:
            size = parse_size(args.size)
        except ValueError as error:
            parser.error(str(error))
        if size <= 0:
            parser.error("--size must be greater than 0")
    if getattr(args, 'lines', None) is not None and args.lines <= 0:
        parser.error("--lines must be greater than 0")

    configure_logging()
    try:
        return args.handler(args)
    except SplitFailedError:
        # already printed by the reporter
        return 1
    except(OSError, requests.RequestException) as error:
        print(str(error), file=sys.stderr)
        return 1


if __name__ == '__main__':
    sys.exit(main())
