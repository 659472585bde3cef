#!/usr/bin/env python3
import argparse
import io
import logging
import sys
from contextlib import contextmanager

from jiragantt import __version__
from jiragantt.errors import InputError, JiraToGanttError, OutputError, UsageError
from jiragantt.gantt import build_chart
from jiragantt.jira import read_issue_records
from jiragantt.log import ConsoleLog
from jiragantt.profile import ConversionProfile, JIRA_DATE_FORMAT, NUMERIC_DATE_FORMAT
from jiragantt.writer import render_legend, save_outputs, write_chart_data

logger = logging.getLogger(__name__)


class _ArgumentParser(argparse.ArgumentParser):
    """
    Raises UsageError instead of printing and exiting
    """
    def error(self, message):
        raise UsageError(message, self.format_usage())


class JiraToGanttTool:
    """
    Converts a Jira CSV export into Gantt chart data.

    Everything is read and rendered before any output file is touched, so a bad
    row or unreadable input never leaves a half written document behind.
    """
    def __init__(self, log, stdin=None, stdout=None):
        self.log = log
        self.stdin = stdin
        self.stdout = stdout

    def parser(self):
        parser = _ArgumentParser(
            prog='jira-to-gantt',
            description='Convert Jira CSV data to Gantt chart JSON5.',
            add_help=False)
        parser.add_argument('input_file', nargs='?', metavar='INPUT_FILE',
                            help='''Jira CSV export. Must have the headers "Issue key", "Status",
                                    "Assignee" and "Created". Reads stdin when omitted or "-".''')
        parser.add_argument('output_file', nargs='?', metavar='OUTPUT_FILE',
                            help='''JSON5 chart data file. Writes stdout when omitted or "-".''')
        parser.add_argument('-r', '--resource-file', metavar='RESOURCE_FILE',
                            help='''Also write a legend of resource colors. SVG if the name ends
                                    in .svg, HTML otherwise.''')
        parser.add_argument('--colored-resources', action='store_true',
                            help='Write resources as {title, color} objects instead of names')
        parser.add_argument('--numeric-dates', action='store_true',
                            help='Created dates look like "01/05/2023 09:00" rather than "5/Jan/23 09:00 AM"')
        parser.add_argument('--keep-empty-assignee', action='store_true',
                            help='Leave unassigned issues under an empty resource name')
        parser.add_argument('--no-open-flag', action='store_true',
                            help='Do not mark items as open or closed')
        parser.add_argument('-v', '--verbose', action='store_true', help='Log progress to stderr')
        parser.add_argument('-V', '--version', action='store_true', help='Show the version and exit')
        parser.add_argument('-h', '--help', action='store_true', help='Show this help and exit')
        return parser

    def run(self, argv):
        """
        Runs the tool on the given arguments (without the program name) and returns the exit status
        """
        parser = self.parser()
        try:
            args = parser.parse_intermixed_args(argv)
        except UsageError as e:
            self.log.error('{}{}'.format(e.usage, e))
            return 2

        if args.help:
            self.log.output(parser.format_help())
            return 0
        if args.version:
            self.log.output('{} {}'.format(parser.prog, __version__))
            return 0

        if args.verbose:
            logging.basicConfig(level=logging.DEBUG, format='%(name)s: %(message)s')

        profile = self.profile(args)
        logger.debug(str(profile))

        try:
            with self.open_input(args.input_file) as stream:
                chart = self.read_jira_csv_file(stream, profile, assign_colors=True if args.resource_file is not None else None)

            text = write_chart_data(chart, colored_resources=profile.colored_resources)
            legend = None
            if args.resource_file is not None:
                legend = render_legend(chart.resources, args.resource_file)

            files = []
            if not self._is_standard_stream(args.output_file):
                files.append((args.output_file, text))
            if legend is not None:
                files.append((args.resource_file, legend))

            # Every file is written, or none are
            save_outputs(files)
            if self._is_standard_stream(args.output_file):
                self.write_stdout(text)
        except JiraToGanttError as e:
            self.log.error(str(e))
            return 1

        return 0

    def profile(self, args):
        return ConversionProfile(
            date_format=NUMERIC_DATE_FORMAT if args.numeric_dates else JIRA_DATE_FORMAT,
            colored_resources=args.colored_resources,
            rename_unassigned=not args.keep_empty_assignee,
            emit_open=not args.no_open_flag,
        )

    def read_jira_csv_file(self, stream, profile, assign_colors=None):
        """
        Reads the whole export and returns its ChartDocument
        """
        records = read_issue_records(stream, profile.date_format)
        return build_chart(records, profile, assign_colors=assign_colors)

    @contextmanager
    def open_input(self, filename):
        """
        Text stream over the input file, or stdin. Bad UTF-8 is replaced rather than fatal.
        """
        if self._is_standard_stream(filename):
            stdin = self.stdin if self.stdin is not None else sys.stdin.buffer
            stream = io.TextIOWrapper(stdin, encoding='utf-8-sig', errors='replace', newline='')
            try:
                yield stream
            finally:
                stream.detach()
            return

        try:
            stream = open(filename, encoding='utf-8-sig', errors='replace', newline='')
        except OSError as e:
            raise InputError(filename, e.strerror or e) from e

        with stream:
            try:
                yield stream
            except OSError as e:
                raise InputError(filename, e.strerror or e) from e

    def write_stdout(self, text):
        stdout = self.stdout if self.stdout is not None else sys.stdout
        try:
            stdout.write(text)
            stdout.flush()
        except OSError as e:
            raise OutputError('<stdout>', e.strerror or e) from e

    @staticmethod
    def _is_standard_stream(filename):
        # "-" or nothing means the standard stream
        return filename is None or filename == '-'


def main(argv=None):
    if argv is None:
        argv = sys.argv[1:]

    return JiraToGanttTool(ConsoleLog()).run(argv)


if __name__ == '__main__':
    sys.exit(main())
