import collections
import contextlib
import logging
import tracemalloc
import typing

from .config import Configurable
from .counter import Counter
from .dispatch import create_request_wrapper
from .exceptions import is_system_error, UnknownCounterError
from .log import LOG_NOTICE

#

L = logging.getLogger(__name__)

#


class MonitoringConfig(Configurable):
	"""
	Monitoring flags, resolved once when the monitoring session starts.

	Thresholds can be set for all counters (`warning_threshold_millis`)
	or for one counter (e.g. `sql_warning_threshold_millis`), empty means computed from the statistics.
	"""

	ConfigDefaults = {
		"disabled": "false",
		# Names of displayed counters separated by whitespace or commas, empty means all
		"displayed_counters": "",
		"cpu_time": "true",
		"allocated_memory": "false",
		"max_errors": "100",
		"warning_threshold_millis": "",
		"severe_threshold_millis": "",
		"url": "/reqmon/v1/monitoring",
	}

	def __init__(self, config_section_name: str = "reqmon", config: typing.Optional[dict] = None):
		super().__init__(config_section_name=config_section_name, config=config)
		self.Disabled = self.Config.getboolean("disabled")
		self.DisplayedCounters = frozenset(self.Config.getmultiline("displayed_counters"))
		self.CpuTime = self.Config.getboolean("cpu_time")
		self.AllocatedMemory = self.Config.getboolean("allocated_memory")
		self.MaxErrors = self.Config.getint("max_errors")
		self.URL = self.Config["url"]


	def is_counter_hidden(self, counter_name: str) -> bool:
		if len(self.DisplayedCounters) == 0:
			return False
		return counter_name not in self.DisplayedCounters


	def get_threshold(self, counter_name: str, level: str) -> typing.Optional[int]:
		"""
		Configured threshold in milliseconds for `level` "warning" or "severe", None if not configured.
		"""
		value = self.Config.get("{}_{}_threshold_millis".format(counter_name, level), "")
		if len(value) == 0:
			value = self.Config.get("{}_threshold_millis".format(level), "")
		if len(value) == 0:
			return None
		try:
			return int(value)
		except ValueError:
			raise ValueError("Invalid {} threshold '{}' of counter '{}'".format(level, value, counter_name))


class MonitoringService(object):
	"""
	The monitoring session: owns the counters and wires the request interception.

	Example:

	```python
	monitoring = reqmon.MonitoringService(config={"displayed_counters": "http sql error"})
	monitoring.initialize_web(webapp)

	with monitoring.monitor("sql", "select * from orders"):
		...
	```
	"""

	StandardCounters = (
		# name, child counter name
		(Counter.HTTP_COUNTER_NAME, Counter.SQL_COUNTER_NAME),
		(Counter.SQL_COUNTER_NAME, None),
		(Counter.JSP_COUNTER_NAME, Counter.SQL_COUNTER_NAME),
		("services", Counter.SQL_COUNTER_NAME),
		(Counter.JOB_COUNTER_NAME, Counter.SQL_COUNTER_NAME),
		(Counter.ERROR_COUNTER_NAME, None),
		(Counter.LOG_COUNTER_NAME, None),
	)

	def __init__(self, config: typing.Optional[dict] = None, config_section_name: str = "reqmon"):
		self.MonitoringConfig = MonitoringConfig(config_section_name, config)
		self.Counters = collections.OrderedDict()

		for name, child_counter_name in self.StandardCounters:
			self.create_counter(name, child_counter_name=child_counter_name)

		if self.MonitoringConfig.AllocatedMemory and not tracemalloc.is_tracing():
			tracemalloc.start()

		L.log(LOG_NOTICE, "Monitoring started", struct_data={
			'disabled': self.MonitoringConfig.Disabled,
			'counters': " ".join(self.Counters.keys()),
		})


	def create_counter(self, name: str, child_counter_name: typing.Optional[str] = None) -> Counter:
		"""
		Create a counter, or return the existing one of that name.
		"""
		counter = self.Counters.get(name)
		if counter is not None:
			return counter

		counter = Counter(
			name,
			child_counter_name=child_counter_name,
			max_errors=self.MonitoringConfig.MaxErrors,
			warning_threshold=self.MonitoringConfig.get_threshold(name, "warning"),
			severe_threshold=self.MonitoringConfig.get_threshold(name, "severe"),
		)
		counter.Displayed = not self.MonitoringConfig.is_counter_hidden(name)
		self.Counters[name] = counter
		return counter


	def get_counter(self, name: str) -> Counter:
		try:
			return self.Counters[name]
		except KeyError:
			raise UnknownCounterError(name)


	def get_counters(self) -> typing.List[Counter]:
		return list(self.Counters.values())


	def get_displayed_counters(self) -> typing.List[Counter]:
		"""
		Counters that are used and not hidden, in the order of creation.
		"""
		return [counter for counter in self.Counters.values() if counter.Used and counter.Displayed]


	def is_counter_hidden(self, name: str) -> bool:
		return self.MonitoringConfig.is_counter_hidden(name)


	def clear_counter(self, name: str):
		self.get_counter(name).clear()


	def create_request_wrapper(self, request, response=None):
		"""
		Wrap a host request so that its include/forward dispatches are recorded in the `jsp` counter.
		"""
		return create_request_wrapper(request, response, self.get_counter(Counter.JSP_COUNTER_NAME), self.MonitoringConfig)


	@contextlib.contextmanager
	def monitor(self, counter_name: str, request_name: str):
		"""
		Record the enclosed block as one request of the counter, e.g. a SQL statement, a business method or a job.
		"""
		counter = self.get_counter(counter_name)
		if self.MonitoringConfig.Disabled:
			yield counter
			return

		counter.Used = True
		system_error = False
		counter.bind_context(
			request_name,
			cpu=self.MonitoringConfig.CpuTime,
			allocated_memory=self.MonitoringConfig.AllocatedMemory,
		)
		try:
			yield counter
		except BaseException as e:
			system_error = is_system_error(e)
			raise
		finally:
			counter.add_request_for_current_context(system_error)


	def initialize_web(self, webapp):
		"""
		Install the monitoring middleware and the monitoring page into an `aiohttp.web.Application`.
		"""
		from .web import monitoring_middleware_factory, MonitoringWebHandler

		webapp.middlewares.append(monitoring_middleware_factory(self))
		return MonitoringWebHandler(self, webapp)
