#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
HTTP service running split and merge jobs in the background.

Created on Sun Oct 18 13:05:51 2026
"""

import fastapi
import logging
import os
import random
import string
import threading
import configparser
import dbmanager

from typing import List, Optional, Union
from pydantic import BaseModel, field_validator
from fastapi import HTTPException, BackgroundTasks

from capacity import CapacityGuard, limits_from_config
from logconfig import configure_logging
from merger import merge_parts, parts_from_log
from progress import ProgressReporter
from splitexceptions import SplitCancelledError
from splitjob import CancelToken, OperationMode, SplitJob, parse_size
from splitworker import SplitWorker

config = configparser.ConfigParser()
config.read(os.environ.get('FSPLITTER_CONFIG', 'fsplitter.ini'))

#
# FastAPI for our HTTP routes
#
app = fastapi.FastAPI()

FINISHED = ('succeeded', 'failed', 'cancelled')


#
# Method used to generate random job names to prevent collisions.
#
def generate_job_name():
    alphabet = string.ascii_letters
    return ''.join(random.choice(alphabet) for i in range(10))


class JobRegistry:

    #
    # Jobs live in memory, when database tracking is enabled every change is
    # also written to the fsplitter tables.
    #
    def __init__(self, tracking=False):
        self.jobs = {}
        self.lock = threading.Lock()
        self.tracking = tracking
        self.tables_ready = False

    def _track(self, method, *args):
        if not self.tracking:
            return
        dbmgr = None
        try:
            dbmgr = dbmanager.DbManager()
            if not self.tables_ready:
                dbmgr.buildJobTable()
                dbmgr.buildPartTable()
                self.tables_ready = True
            getattr(dbmgr, method)(*args)
            dbmgr.db_bulk_commit()
        except(Exception) as error:
            logging.error("Unable to record %s in the database: %s" % (method, error))
        finally:
            if dbmgr is not None:
                dbmgr.close_db_conn()

    def add(self, kind, file_name, mode=None, part_size=None):
        with self.lock:
            job_id = generate_job_name()
            while job_id in self.jobs:
                job_id = generate_job_name()
            self.jobs[job_id] = {
                'job_id': job_id,
                'kind': kind,
                'file_name': file_name,
                'status': 'queued',
                'progress': None,
                'messages': [],
                'parts': [],
                'error': None,
                'token': CancelToken(),
            }
        self._track('insertJob', job_id, kind, file_name, mode, part_size)
        return job_id

    def get(self, job_id):
        with self.lock:
            return self.jobs.get(job_id)

    def set_status(self, job_id, status):
        with self.lock:
            self.jobs[job_id]['status'] = status
        self._track('updateJobStatus', job_id, status)

    def record_progress(self, job_id, event):
        with self.lock:
            self.jobs[job_id]['progress'] = event.model_dump()

    def record_message(self, job_id, event):
        with self.lock:
            self.jobs[job_id]['messages'].append(event.model_dump())

    def finish(self, job_id, status, parts=None, error=None):
        parts = parts or []
        with self.lock:
            record = self.jobs[job_id]
            record['parts'] = [part.model_dump() for part in parts]
            record['error'] = error
        for part in parts:
            self._track('addPartMeta', job_id, part)
        self.set_status(job_id, status)

    #
    # Read back from the fsplitter tables, used for jobs this process does not
    # hold in memory (run before a restart or by another service worker).
    #
    def _fetch(self, method, *args):
        if not self.tracking:
            return None
        dbmgr = None
        try:
            dbmgr = dbmanager.DbManager()
            return getattr(dbmgr, method)(*args)
        except(Exception) as error:
            logging.error("Unable to read %s from the database: %s" % (method, error))
            return None
        finally:
            if dbmgr is not None:
                dbmgr.close_db_conn()

    def listing(self):
        with self.lock:
            jobs = [{'job_id': record['job_id'], 'kind': record['kind'], 'status': record['status']} for record in self.jobs.values()]
        known = set(job['job_id'] for job in jobs)
        for job_id, kind, status in self._fetch('getJobList') or []:
            if job_id not in known:
                jobs.append({'job_id': job_id, 'kind': kind, 'status': status})
        return jobs

    def snapshot(self, job_id):
        with self.lock:
            record = self.jobs.get(job_id)
            if record is not None:
                snapshot = {key: value for key, value in record.items() if key != 'token'}
                snapshot['messages'] = list(record['messages'])
                return snapshot
        return self._stored(job_id)

    def _stored(self, job_id):
        row = self._fetch('getJob', job_id)
        if row is None:
            return None
        job_id, kind, file_name, status = row
        parts = self._fetch('getJobParts', job_id) or []
        return {
            'job_id': job_id,
            'kind': kind,
            'file_name': file_name,
            'status': status,
            'progress': None,
            'messages': [],
            'parts': [{'part_number': number, 'file_name': name, 'total_parts': total, 'written': written} for number, name, total, written in parts],
            'error': None,
        }


registry = JobRegistry(tracking=config.getboolean('database', 'enabled', fallback=False))
guard = CapacityGuard(limits=limits_from_config(config))
buffer_size = parse_size(config.get('splitter', 'buffer_size', fallback='10 MB'))


def job_reporter(job_id):
    return ProgressReporter(
        on_start=lambda: registry.set_status(job_id, 'running'),
        on_progress=lambda event: registry.record_progress(job_id, event),
        on_message=lambda event: registry.record_message(job_id, event))


#
# Used to describe a split request.  part_size takes a number or a size
# string such as 10MB.
#
class SplitRequest(BaseModel):
    file_name: str
    part_size: Union[int, str]
    operation_mode: OperationMode = OperationMode.BYTES
    destination_folder: Optional[str] = None
    file_format_pattern: Optional[str] = None
    delete_original_file: bool = False
    generation_log_file: Optional[str] = None
    encoding: str = "utf-8"

    @field_validator('part_size')
    @classmethod
    def check_part_size(cls, value):
        size = parse_size(value)
        if size <= 0:
            raise ValueError("part_size must be positive")
        return size


class MergeRequest(BaseModel):
    output: str
    parts: List[str] = []
    generation_log_file: Optional[str] = None
    parts_dir: Optional[str] = None


#
# Basic reply to heartbeat request to ensure our endpoint is still functional.
#
@app.get("/v0/heartbeat/")
def return_heartbeat():
    return {"message": "fsplitter is alive and well."}


@app.post("/v0/split/")
def submit_split(request: SplitRequest, background_tasks: BackgroundTasks):
    job = SplitJob(**request.model_dump())
    job_id = registry.add('split', job.file_name, job.operation_mode.value, job.part_size)
    background_tasks.add_task(split_task, job_id, job)
    return {"job_id": job_id, "message": "Split job queued and running in background."}


#
# The split method used by our route above.  Failures end up in the job
# record, the worker has already logged them.
#
def split_task(job_id, job):
    record = registry.get(job_id)
    worker = SplitWorker(job, job_reporter(job_id), guard, record['token'], buffer_size)
    try:
        result = worker.doSplit()
        registry.finish(job_id, 'succeeded', parts=result.parts)
    except SplitCancelledError as error:
        registry.finish(job_id, 'cancelled', parts=error.parts, error=str(error))
    except(Exception) as error:
        registry.finish(job_id, 'failed', error=str(error))


@app.post("/v0/merge/")
def submit_merge(request: MergeRequest, background_tasks: BackgroundTasks):
    if not request.parts and request.generation_log_file is None:
        raise HTTPException(status_code=400, detail="Either parts or generation_log_file is required.")
    job_id = registry.add('merge', request.output)
    background_tasks.add_task(merge_task, job_id, request)
    return {"job_id": job_id, "message": "Merge job queued and running in background."}


def merge_task(job_id, request):
    record = registry.get(job_id)
    reporter = job_reporter(job_id)
    reporter.start()
    try:
        parts = request.parts or parts_from_log(request.generation_log_file, request.parts_dir)
        merge_parts(parts, request.output, reporter, record['token'], buffer_size)
        registry.finish(job_id, 'succeeded')
    except SplitCancelledError as error:
        registry.finish(job_id, 'cancelled', error=str(error))
    except(Exception) as error:
        logging.error("Merge into %s failed: %s" % (request.output, error))
        registry.finish(job_id, 'failed', error=str(error))
    finally:
        reporter.finish()


@app.get("/v0/jobs/")
def get_job_list():
    return registry.listing()


@app.get("/v0/job/{job_id}")
def get_job(job_id: str):
    snapshot = registry.snapshot(job_id)
    if snapshot is None:
        raise HTTPException(status_code=404, detail="Requested job not found.")
    return snapshot


@app.post("/v0/cancel/{job_id}")
def cancel_job(job_id: str):
    record = registry.get(job_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Requested job not found.")
    if record['status'] in FINISHED:
        raise HTTPException(status_code=409, detail="Job %s already %s." % (job_id, record['status']))
    record['token'].cancel()
    logging.info("Cancel requested for job %s." % job_id)
    return {"message": "Cancel requested for job %s." % job_id}


# Run the application
def run():
    import uvicorn
    configure_logging()
    uvicorn.run("fsplitter:app", host=config.get('service', 'ip_addr', fallback='127.0.0.1'), port=config.getint('service', 'port', fallback=8990), workers=config.getint('service', 'api_threads', fallback=1), log_level="warning")


if __name__ == '__main__':
    run()
