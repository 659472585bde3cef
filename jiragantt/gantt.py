"""
Core of jira-to-gantt

Turns issue records into chart data for a Gantt chart renderer. The renderer
lays out each resource (assignee) as a lane and places any item without a
start date directly after the previous item in the same lane, so only the
first item of every resource is given an explicit start date.
"""
import logging

from jiragantt.profile import ConversionProfile, UNASSIGNED

# A Jira day of work
WORKDAY_SECONDS = 8 * 60 * 60

logger = logging.getLogger(__name__)


def workdays(seconds):
    """
    Number of workdays covering an estimate, ceil((seconds + 1) / WORKDAY_SECONDS).

    The extra second keeps a zero estimate at one day, and also pushes an estimate of
    exactly N workdays out to N + 1.
    """
    return -(-(seconds + 1) // WORKDAY_SECONDS)


class Resource:
    """
    Lane on the chart. I.E., an assignee.
    """
    def __init__(self, title, color=None):
        self.title = title
        self.color = color

    def __eq__(self, other):
        if not isinstance(other, Resource):
            return NotImplemented
        return self.title == other.title and self.color == other.color

    def __repr__(self):
        return 'Resource({!r}, {!r})'.format(self.title, self.color)

    def __str__(self):
        if self.color is None:
            return self.title
        return '{} ({})'.format(self.title, self.color)


class Item:
    """
    Bar on the chart. I.E., an issue.
    """
    def __init__(self, title, resource_index, start_date=None, duration=None, is_open=None):
        self.title = title
        self.resource_index = resource_index
        self.start_date = start_date
        # Workdays, see workdays()
        self.duration = duration
        self.is_open = is_open

    def __eq__(self, other):
        if not isinstance(other, Item):
            return NotImplemented
        return (self.title, self.resource_index, self.start_date, self.duration, self.is_open) == \
            (other.title, other.resource_index, other.start_date, other.duration, other.is_open)

    def __repr__(self):
        return 'Item({!r}, {!r}, start_date={!r}, duration={!r}, is_open={!r})'.format(
            self.title, self.resource_index, self.start_date, self.duration, self.is_open)

    def __str__(self):
        return '\tItem {} on resource {}: starts {}, {} days, {}'.format(
            self.title,
            self.resource_index,
            self.start_date if self.start_date is not None else 'after previous',
            self.duration,
            'closed' if self.is_open is False else 'open',
            )


class ChartDocument:
    """
    Chart data handed to the renderer.

    Items are ordered by resource: every item of resource 0, then every item of
    resource 1 and so on, each group in the order its rows were read.
    """
    def __init__(self, resources, items, title='', marked_date=None):
        self.title = title
        self.marked_date = marked_date
        self.resources = resources
        self.items = items

    def check(self):
        """
        Raises ValueError if an item points outside the resource list
        """
        for item in self.items:
            if not 0 <= item.resource_index < len(self.resources):
                raise ValueError('Item {} refers to resource {} but there are only {} resources'.format(
                    item.title, item.resource_index, len(self.resources)))

    def __str__(self):
        s = 'Chart "{}" with {} resources, {} items:'.format(self.title, len(self.resources), len(self.items))
        for i in self.items:
            s += '\n' + str(i)
        return s


class ResourceRegistry:
    """
    Ordered, duplicate free list of the resources seen during one run.

    Resources are never removed or reordered, so an index handed out by resolve()
    stays valid for the rest of the run. With a palette, each new resource takes
    the next color, wrapping around when the palette runs out.
    """
    def __init__(self, palette=None):
        self.palette = palette
        self.resources = []
        self._indexes = {}

    def resolve(self, title):
        """
        Returns (index, is_new) for the resource with the given title, adding it if needed
        """
        index = self._indexes.get(title)
        if index is not None:
            return index, False

        index = len(self.resources)
        color = None
        if self.palette:
            color = self.palette[index % len(self.palette)]

        self.resources.append(Resource(title, color))
        self._indexes[title] = index
        logger.debug('Registered resource %d "%s"', index, title)
        return index, True

    def rename_unassigned(self):
        """
        Gives the empty assignee its display name. Index and color are untouched.
        """
        index = self._indexes.get('')
        if index is not None:
            self.resources[index].title = UNASSIGNED

    def __len__(self):
        return len(self.resources)


def build_item(record, resource_index, is_new_resource, emit_open=True):
    """
    Creates the chart item for an issue record.

    Keyword arguments:
    record -- IssueRecord with its created_date parsed
    resource_index -- int, index of the record's assignee
    is_new_resource -- bool, True when this record registered the assignee
    emit_open -- bool, whether to set the open flag at all
    """
    duration = None
    if record.original_estimate is not None:
        duration = workdays(record.original_estimate)

    return Item(
        title=record.key,
        resource_index=resource_index,
        start_date=record.created_date if is_new_resource else None,
        duration=duration,
        is_open=(record.status != 'Closed') if emit_open else None,
    )


class ChartAssembler:
    """
    Collects items per resource and flattens them into a ChartDocument
    """
    def __init__(self):
        self.resource_items = []

    def add_item(self, item):
        while len(self.resource_items) <= item.resource_index:
            self.resource_items.append([])
        self.resource_items[item.resource_index].append(item)

    def assemble(self, resources, title=''):
        """
        Returns the chart with items grouped in resource registration order
        """
        items = [item for items in self.resource_items for item in items]
        chart = ChartDocument(resources, items, title=title)
        chart.check()
        return chart


def build_chart(records, profile=None, assign_colors=None):
    """
    Runs issue records through the registry, item builder and assembler.

    Keyword arguments:
    records -- iterable of IssueRecord
    profile -- ConversionProfile, defaults apply when None
    assign_colors -- bool, give resources palette colors; defaults to profile.colored_resources
    """
    if profile is None:
        profile = ConversionProfile()
    if assign_colors is None:
        assign_colors = profile.colored_resources

    registry = ResourceRegistry(profile.palette if assign_colors else None)
    assembler = ChartAssembler()
    for record in records:
        index, is_new = registry.resolve(record.assignee)
        assembler.add_item(build_item(record, index, is_new, emit_open=profile.emit_open))

    if profile.rename_unassigned:
        registry.rename_unassigned()

    chart = assembler.assemble(registry.resources)
    logger.debug('Built chart with %d resources and %d items', len(chart.resources), len(chart.items))
    return chart
