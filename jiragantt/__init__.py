"""
Converts Jira CSV exports into chart data for a Gantt chart renderer
"""
__version__ = '2.0.1'
