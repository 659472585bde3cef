"""
Deployment profile for a conversion run.

Older releases of the tool disagreed on how resources are written, which
date pattern the export uses, whether the empty assignee is renamed and
whether items carry an open flag. Each of those is a switch here.
"""

# 5/Jan/23 09:00 AM
JIRA_DATE_FORMAT = '%d/%b/%y %I:%M %p'
# 01/05/2023 09:00
NUMERIC_DATE_FORMAT = '%m/%d/%Y %H:%M'

UNASSIGNED = 'unassigned'

# Assignee colors, handed out in registration order and reused cyclically
PALETTE = [
    '#E57373', '#81C784', '#64B5F6', '#FFD54F', '#BA68C8',
    '#4DB6AC', '#FF8A65', '#A1887F', '#90A4AE', '#F06292',
    '#AED581', '#7986CB', '#FFB74D', '#4DD0E1', '#9575CD',
]


class ConversionProfile:
    """
    Settings that shape the chart document produced from an export
    """
    def __init__(self, date_format=JIRA_DATE_FORMAT, colored_resources=False,
                 rename_unassigned=True, emit_open=True, palette=None):
        self.date_format = date_format
        self.colored_resources = colored_resources
        self.rename_unassigned = rename_unassigned
        self.emit_open = emit_open
        self.palette = list(palette) if palette is not None else list(PALETTE)

        if not self.palette:
            raise ValueError('Color palette must hold at least one color')

    def __str__(self):
        return 'Profile dates "{}", {} resources, unassigned {}, open flag {}'.format(
            self.date_format,
            'colored' if self.colored_resources else 'plain',
            'renamed' if self.rename_unassigned else 'kept',
            'on' if self.emit_open else 'off',
            )
