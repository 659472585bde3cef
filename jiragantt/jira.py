"""
Reads issue records out of a Jira CSV export
"""
import csv
import logging
from datetime import datetime

from jiragantt.errors import RecordError
from jiragantt.profile import JIRA_DATE_FORMAT

KEY_COLUMN = 'Issue key'
STATUS_COLUMN = 'Status'
ASSIGNEE_COLUMN = 'Assignee'
CREATED_COLUMN = 'Created'
ESTIMATE_COLUMN = 'Original Estimate'

REQUIRED_COLUMNS = [KEY_COLUMN, STATUS_COLUMN, ASSIGNEE_COLUMN, CREATED_COLUMN]

# Largest limit the csv module accepts on every platform
FIELD_SIZE_LIMIT = 2**31 - 1

logger = logging.getLogger(__name__)


class IssueRecord:
    """
    One row of the export, reduced to the fields the chart needs
    """
    def __init__(self, key, status, assignee, original_estimate, created, created_date=None, line=None):
        self.key = key
        self.status = status
        self.assignee = assignee
        # Seconds, or None when the issue was never estimated
        self.original_estimate = original_estimate
        self.created = created
        self.created_date = created_date
        self.line = line

    def __str__(self):
        return 'Issue {} ({}) for "{}", estimate {}, created {}'.format(
            self.key,
            self.status,
            self.assignee,
            self.original_estimate,
            self.created,
            )


def read_issue_records(stream, date_format=JIRA_DATE_FORMAT):
    """
    Yields an IssueRecord for every row of the CSV stream that has an issue key.

    The header row is read once and must name all of REQUIRED_COLUMNS. Rows whose
    issue key is empty are skipped; any other row that can't be decoded raises
    RecordError, which ends the run.
    """
    # Ignored columns such as Description can be any length
    csv.field_size_limit(FIELD_SIZE_LIMIT)
    reader = csv.reader(stream)
    rows = _rows(reader)
    header = next(rows, None)
    if header is None:
        raise RecordError(None, 'Input is empty, expected a header row')

    columns = _column_positions(header)
    count = 0
    for row in rows:
        # Blank lines carry no fields at all
        if not row:
            continue

        record = parse_record(row, columns, len(header), reader.line_num)
        if record is None:
            continue

        record.created_date = parse_created(record.created, date_format, record.line)
        count += 1
        yield record

    logger.debug('Read %d issue records', count)


def parse_record(row, columns, width, line=None):
    """
    Decodes a single row into an IssueRecord, or returns None if the issue key is empty.

    Keyword arguments:
    row -- list of field values
    columns -- dict of column name to position, from the header
    width -- number of fields every row must have
    line -- line number of the row, used in error messages
    """
    if len(row) != width:
        raise RecordError(line, 'Found {} fields but the header has {}'.format(len(row), width))

    key = row[columns[KEY_COLUMN]]
    estimate = None
    if ESTIMATE_COLUMN in columns:
        estimate = _parse_estimate(row[columns[ESTIMATE_COLUMN]], line)

    if not key:
        return None

    return IssueRecord(
        key=key,
        status=row[columns[STATUS_COLUMN]],
        assignee=row[columns[ASSIGNEE_COLUMN]],
        original_estimate=estimate,
        created=row[columns[CREATED_COLUMN]],
        line=line,
    )


def parse_created(value, date_format=JIRA_DATE_FORMAT, line=None):
    """
    Returns the calendar date of a Created timestamp
    """
    try:
        return datetime.strptime(value, date_format).date()
    except ValueError:
        raise RecordError(line, "Created date '{}' does not match '{}'".format(value, date_format)) from None


def _rows(reader):
    try:
        yield from reader
    except csv.Error as e:
        raise RecordError(reader.line_num, str(e)) from e


def _parse_estimate(value, line):
    if value == '':
        return None

    if not (value.isascii() and value.isdigit()):
        raise RecordError(line, "Original Estimate '{}' is not a whole number of seconds".format(value))

    return int(value)


def _column_positions(header):
    columns = {}
    for position, name in enumerate(header):
        # Exports saved by some spreadsheets start with a byte order mark
        if position == 0:
            name = name.lstrip('\ufeff')
        columns.setdefault(name, position)

    missing = [name for name in REQUIRED_COLUMNS if name not in columns]
    if missing:
        raise RecordError(None, 'Missing required column(s): {}'.format(', '.join(missing)))

    return columns
