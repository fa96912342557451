#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
PostgreSQL tracking of split and merge jobs and of the parts they produce.
"""

import psycopg2
import logging
import configparser

DATABASE_CONFIG = 'database.ini'


class DbManager:

    #
    # Initiator that spawns a connection to our database
    #
    def __init__(self, config_path=DATABASE_CONFIG):

        dbconf = configparser.ConfigParser()
        dbconf.read(config_path)
        host = dbconf.get('database', 'host')
        dbname = dbconf.get('database', 'db_name')
        user = dbconf.get('database', 'db_user')
        passwd = dbconf.get('database', 'pass')
        self.conn = psycopg2.connect(host=host, database=dbname, user=user, password=passwd)
        self.cursor = self.conn.cursor()

    #
    # Used to execute a generic command, parameters are bound by psycopg2
    #
    def execute_command(self, command, params=None):
        try:
            self.cursor.execute(command, params)
        except(Exception, psycopg2.DatabaseError) as error:
            self.conn.rollback()
            logging.error(error)
            raise

    #
    # Used to execute a command and return a solitary result
    #
    def exe_fetch_one(self, command, params=None):
        self.execute_command(command, params)
        return self.cursor.fetchone()

    #
    # Used to execute a command and return all results
    #
    def exe_fetch_all(self, command, params=None):
        self.execute_command(command, params)
        return self.cursor.fetchall()

    #
    # Method used to commit a series of transactions in bulk
    #
    def db_bulk_commit(self):

        try:
            self.conn.commit()
        except(Exception, psycopg2.DatabaseError) as error:
            logging.error(error)
            raise

    #
    # Gracefully close our database connection
    #
    def close_db_conn(self):

        if self.conn is not None:
            self.conn.close()
            self.conn = None

    #
    # One row per job submitted to the service
    #
    def buildJobTable(self):
        create_command = """
            CREATE TABLE IF NOT EXISTS fsplitter_jobs (job_id TEXT PRIMARY KEY, kind TEXT, file_name TEXT, mode TEXT, part_size BIGINT, status TEXT);
            """
        self.execute_command(create_command)
        self.db_bulk_commit()

    #
    # One row per part written by a split job
    #
    def buildPartTable(self):
        create_command = """
            CREATE TABLE IF NOT EXISTS fsplitter_parts (job_id TEXT, part_number INT, file_name TEXT, total_parts INT, written BIGINT, PRIMARY KEY (job_id, part_number));
            """
        self.execute_command(create_command)
        self.db_bulk_commit()

    def insertJob(self, job_id, kind, file_name, mode, part_size):
        insert_command = """
            INSERT INTO fsplitter_jobs (job_id, kind, file_name, mode, part_size, status) VALUES (%s, %s, %s, %s, %s, 'queued');
            """
        self.execute_command(insert_command, (job_id, kind, file_name, mode, part_size))
        self.db_bulk_commit()

    def updateJobStatus(self, job_id, status):
        status_command = """
            UPDATE fsplitter_jobs SET status = %s WHERE job_id = %s;
            """
        self.execute_command(status_command, (status, job_id))
        self.db_bulk_commit()

    def addPartMeta(self, job_id, part):
        part_command = """
            INSERT INTO fsplitter_parts (job_id, part_number, file_name, total_parts, written) VALUES (%s, %s, %s, %s, %s);
            """
        self.execute_command(part_command, (job_id, part.part_number, part.file_name, part.total_parts, part.written))

    def getJobList(self):
        query_command = "SELECT job_id, kind, status FROM fsplitter_jobs;"
        return self.exe_fetch_all(query_command)

    def getJob(self, job_id):
        query_command = "SELECT job_id, kind, file_name, status FROM fsplitter_jobs WHERE job_id = %s;"
        return self.exe_fetch_one(query_command, (job_id,))

    def getJobParts(self, job_id):
        query_command = "SELECT part_number, file_name, total_parts, written FROM fsplitter_parts WHERE job_id = %s ORDER BY part_number;"
        return self.exe_fetch_all(query_command, (job_id,))
