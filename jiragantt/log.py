"""
Where the tool reports to: normal output, warnings and errors
"""
from rich.console import Console
from rich.text import Text


class ToolLog:
    """
    Sink for messages meant for the person running the tool
    """
    def output(self, message):
        raise NotImplementedError

    def warning(self, message):
        raise NotImplementedError

    def error(self, message):
        raise NotImplementedError


class ConsoleLog(ToolLog):
    """
    Prints output to stdout and problems to stderr, warnings in yellow and errors in red.

    Color is dropped when color=False, and by rich itself when the stream isn't a terminal.
    """
    def __init__(self, color=True, stdout=None, stderr=None):
        self.color = color
        self.stdout = Console(file=stdout, no_color=not color, highlight=False, markup=False, emoji=False, soft_wrap=True)
        self.stderr = Console(file=stderr, stderr=stderr is None, no_color=not color, highlight=False, markup=False, emoji=False, soft_wrap=True)

    def output(self, message):
        self.stdout.print(Text(message))

    def warning(self, message):
        self.stderr.print(Text('warning: {}'.format(message), style='yellow'))

    def error(self, message):
        self.stderr.print(Text('error: {}'.format(message), style='red'))


class CaptureLog(ToolLog):
    """
    Keeps every message, for tests
    """
    def __init__(self):
        self.outputs = []
        self.warnings = []
        self.errors = []

    def output(self, message):
        self.outputs.append(message)

    def warning(self, message):
        self.warnings.append(message)

    def error(self, message):
        self.errors.append(message)
