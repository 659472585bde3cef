"""
Exceptions raised while converting a Jira export
"""


class JiraToGanttError(Exception):
    """
    Base for every failure that aborts a conversion run
    """
    pass


class InputError(JiraToGanttError):
    """
    The input file could not be opened or read
    """
    def __init__(self, path, reason):
        super().__init__("Unable to open file '{}': {}".format(path, reason))
        self.path = path


class RecordError(JiraToGanttError):
    """
    A CSV row could not be decoded into an issue record
    """
    def __init__(self, line, message):
        if line is None:
            super().__init__(message)
        else:
            super().__init__('Line {}: {}'.format(line, message))
        self.line = line


class OutputError(JiraToGanttError):
    """
    An output file could not be created or written
    """
    def __init__(self, path, reason):
        super().__init__("Unable to create file '{}': {}".format(path, reason))
        self.path = path


class UsageError(JiraToGanttError):
    """
    The command line could not be parsed
    """
    def __init__(self, message, usage):
        super().__init__(message)
        self.usage = usage
