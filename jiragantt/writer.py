"""
Renders chart documents and resource legends, and writes them out
"""
import io
import logging
import os
import tempfile
from datetime import date
from xml.etree import ElementTree as ET

import json5
import svgwrite

from jiragantt.errors import OutputError
from jiragantt.gantt import ChartDocument, Item, Resource

# conversion from mm/cm to pixel is done by ourselves
# 3.543307 is for conversion from mm to pt units !
mm = 3.543307
cm = 35.43307

FONT_ATTR = {
    'fill': 'black',
    'stroke': 'black',
    'stroke_width': 0,
    'font_family': 'Verdana',
    'font_size': 15
    }

logger = logging.getLogger(__name__)


def chart_to_dict(chart, colored_resources=False):
    """
    Plain data form of a chart. Absent optional fields are left out.
    """
    data = {'title': chart.title}

    if colored_resources:
        resources = []
        for r in chart.resources:
            resource = {'title': r.title}
            if r.color is not None:
                resource['color'] = r.color
            resources.append(resource)
        data['resources'] = resources
    else:
        data['resources'] = [r.title for r in chart.resources]

    if chart.marked_date is not None:
        data['marked_date'] = chart.marked_date.isoformat()

    items = []
    for i in chart.items:
        item = {'title': i.title}
        if i.start_date is not None:
            item['startDate'] = i.start_date.isoformat()
        if i.duration is not None:
            item['duration'] = i.duration
        item['resource'] = i.resource_index
        if i.is_open is not None:
            item['open'] = i.is_open
        items.append(item)
    data['items'] = items

    return data


def write_chart_data(chart, colored_resources=False):
    """
    Returns the JSON5 text of a chart
    """
    return json5.dumps(chart_to_dict(chart, colored_resources), indent=2) + '\n'


def chart_from_dict(data):
    """
    Rebuilds a ChartDocument from its plain data form. Accepts both plain and colored resources.
    """
    resources = []
    for r in data.get('resources', []):
        if isinstance(r, str):
            resources.append(Resource(r))
        else:
            resources.append(Resource(r['title'], r.get('color')))

    items = []
    for i in data.get('items', []):
        start_date = i.get('startDate')
        items.append(Item(
            title=i['title'],
            resource_index=i['resource'],
            start_date=date.fromisoformat(start_date) if start_date is not None else None,
            duration=i.get('duration'),
            is_open=i.get('open'),
        ))

    marked_date = data.get('marked_date')
    chart = ChartDocument(
        resources,
        items,
        title=data.get('title', ''),
        marked_date=date.fromisoformat(marked_date) if marked_date is not None else None,
    )
    chart.check()
    return chart


def read_chart_data(text):
    """
    Parses JSON5 chart data, as written by write_chart_data()
    """
    return chart_from_dict(json5.loads(text))


def legend_html(resources):
    """
    HTML table of resource titles beside a swatch of their color
    """
    html = ET.Element('html')
    body = ET.SubElement(html, 'body')
    table = ET.SubElement(body, 'table')

    header = ET.SubElement(table, 'tr')
    ET.SubElement(header, 'th').text = 'Resource'
    ET.SubElement(header, 'th').text = 'Color'

    for r in resources:
        row = ET.SubElement(table, 'tr')
        ET.SubElement(row, 'td').text = r.title
        swatch = ET.SubElement(row, 'td')
        if r.color is not None:
            swatch.set('style', 'background-color: {}; width: 4em'.format(r.color))
        # Keep the cell from collapsing in browsers that skip empty cells
        swatch.text = ' '

    return '<!DOCTYPE html>\n' + ET.tostring(html, encoding='unicode', method='html') + '\n'


def legend_svg(resources):
    """
    SVG legend, one line per resource with a swatch and its title
    """
    width = 12*cm
    height = (len(resources)+1)*cm
    dwg = svgwrite.Drawing(size=(width, height), debug=True)

    dwg.add(svgwrite.shapes.Rect(
            insert=(0, 0),
            size=(width, height),
            fill='white',
            stroke_width=0,
            opacity=1
            ))

    for y, r in enumerate(resources):
        if r.color is not None:
            dwg.add(svgwrite.shapes.Rect(
                    insert=(0.5*cm, (y+0.6)*cm),
                    size=(1*cm, 0.6*cm),
                    fill=r.color,
                    stroke=r.color,
                    stroke_width=2,
                    opacity=0.85,
                    ))
        dwg.add(svgwrite.text.Text(r.title, insert=(2*cm, (y+1.1)*cm), fill=FONT_ATTR['fill'], stroke=FONT_ATTR['stroke'], stroke_width=FONT_ATTR['stroke_width'], font_family=FONT_ATTR['font_family'], font_size=FONT_ATTR['font_size']))

    return dwg.tostring() + '\n'


def render_legend(resources, filename):
    """
    Legend for the given file name: SVG for .svg files, HTML otherwise
    """
    if os.path.splitext(filename)[1].lower() == '.svg':
        return legend_svg(resources)
    return legend_html(resources)


def save_outputs(outputs):
    """
    Writes every (filename, text) pair, renaming them into place only after all are written.

    If any file can't be written, none of them are replaced and the temporary files are removed.
    """
    staged = []
    try:
        for filename, text in outputs:
            staged.append((_stage_output(filename, text), filename))

        while staged:
            tmp_name, filename = staged[0]
            try:
                os.replace(tmp_name, filename)
            except OSError as e:
                raise OutputError(filename, e.strerror or e) from e
            staged.pop(0)
            logger.debug('Wrote %s', filename)
    finally:
        for tmp_name, _ in staged:
            _discard(tmp_name)


def _stage_output(filename, text):
    directory = os.path.dirname(os.path.abspath(filename))
    try:
        fd, tmp_name = tempfile.mkstemp(dir=directory, prefix='.{}.'.format(os.path.basename(filename)), suffix='.tmp')
    except OSError as e:
        raise OutputError(filename, e.strerror or e) from e

    try:
        with io.open(fd, mode='w', encoding='utf-8', newline='') as fileobj:
            fileobj.write(text)
        os.chmod(tmp_name, 0o644)
    except OSError as e:
        _discard(tmp_name)
        raise OutputError(filename, e.strerror or e) from e

    return tmp_name


def _discard(tmp_name):
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
