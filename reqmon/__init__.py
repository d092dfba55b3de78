"""Request monitoring for asyncio and aiohttp applications.

Measures execution time, CPU time and errors per request type (a web request, a SQL statement,
a business method, an included page), aggregates them in counters and renders HTML reports.
"""

from .log import LOG_NOTICE, Logging
from .config import Config, Configurable
from .counter import Counter, CounterRequest, CounterRequestAggregation, CounterError, Period, Range
from .dispatch import RequestDispatcher, MonitoredRequestDispatcher, RequestWrapper, AsyncCapableRequestWrapper, create_request_wrapper
from .html import HtmlCounterReport, render_counter_report
from .service import MonitoringConfig, MonitoringService

from .__version__ import __version__, __build__

__all__ = (
	'LOG_NOTICE',
	'Logging',
	'Config',
	'Configurable',
	'Counter',
	'CounterRequest',
	'CounterRequestAggregation',
	'CounterError',
	'Period',
	'Range',
	'RequestDispatcher',
	'MonitoredRequestDispatcher',
	'RequestWrapper',
	'AsyncCapableRequestWrapper',
	'create_request_wrapper',
	'HtmlCounterReport',
	'render_counter_report',
	'MonitoringConfig',
	'MonitoringService',
	'__version__',
	'__build__',
)
