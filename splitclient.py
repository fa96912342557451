#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Client for the fsplitter job service.

Created on Sun Oct 18 14:26:37 2026
"""

import logging
import time
import requests

FINISHED = ('succeeded', 'failed', 'cancelled')


class SplitClient:

    def __init__(self, base_url, timeout=30):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _get(self, route):
        response = requests.get(self.base_url + route, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, route, payload=None):
        response = requests.post(self.base_url + route, json=payload, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def heartbeat(self):
        try:
            self._get("/v0/heartbeat/")
            return True
        except(requests.RequestException) as error:
            logging.error("Service at %s is not answering: %s" % (self.base_url, error))
            return False

    #
    # Queue a split job, fields are the ones of a SplitJob.  Returns the job id.
    #
    def submit_split(self, file_name, part_size, **fields):
        payload = dict(fields, file_name=file_name, part_size=part_size)
        return self._post("/v0/split/", payload)["job_id"]

    def submit_merge(self, output, parts=None, generation_log_file=None, parts_dir=None):
        payload = {"output": output, "parts": parts or [], "generation_log_file": generation_log_file, "parts_dir": parts_dir}
        return self._post("/v0/merge/", payload)["job_id"]

    def job_list(self):
        return self._get("/v0/jobs/")

    def job_status(self, job_id):
        return self._get("/v0/job/" + job_id)

    def cancel(self, job_id):
        return self._post("/v0/cancel/" + job_id)

    #
    # Poll a job until it ends and return its final record.
    #
    def wait_for(self, job_id, poll_interval=1.0, timeout=None):
        started = time.monotonic()
        while True:
            status = self.job_status(job_id)
            if status['status'] in FINISHED:
                return status
            if timeout is not None and time.monotonic() - started > timeout:
                raise TimeoutError("Job %s still %s after %s seconds." % (job_id, status['status'], timeout))
            logging.debug("Job %s is %s." % (job_id, status['status']))
            time.sleep(poll_interval)
