import collections
import datetime
import logging
import threading
import typing

from ..contextvars import CounterContext
from .request import CounterRequest, CounterRequestContext, CounterError

#

L = logging.getLogger(__name__)

#


class Counter(object):
	"""
	Named bucket of request statistics, e.g. every SQL statement or every HTTP request of the application.

	A counter is shared by all tasks and threads that serve its type of request.
	Recording is serialized by a lock, reading returns snapshot copies.

	Usage:

	```python
	counter.bind_context("/index.html", cpu=True)
	try:
		...
	finally:
		counter.add_request_for_current_context(system_error=False)
	```
	"""

	HTTP_COUNTER_NAME = "http"
	ERROR_COUNTER_NAME = "error"
	LOG_COUNTER_NAME = "log"
	JSP_COUNTER_NAME = "jsp"
	STRUTS_COUNTER_NAME = "struts"
	SQL_COUNTER_NAME = "sql"
	JOB_COUNTER_NAME = "job"
	BUSINESS_FACADE_COUNTER_NAMES = frozenset(["services", "spring", "ejb"])

	ERROR_COUNTER_NAMES = frozenset([ERROR_COUNTER_NAME, LOG_COUNTER_NAME, JOB_COUNTER_NAME])

	def __init__(
		self, name: str, icon_name: typing.Optional[str] = None, child_counter_name: typing.Optional[str] = None,
		max_errors: int = 100, warning_threshold: typing.Optional[int] = None, severe_threshold: typing.Optional[int] = None
	):
		self.Name = name
		self.IconName = icon_name if icon_name is not None else "{}.png".format(name)
		self.ChildCounterName = child_counter_name
		self.MaxErrors = max_errors
		# Configured thresholds in milliseconds, None means computed from the statistics
		self.WarningThreshold = warning_threshold
		self.SevereThreshold = severe_threshold

		self.Displayed = True
		self.Used = False
		self.StartDate = datetime.datetime.now()

		self.Lock = threading.Lock()
		self.Requests = {}
		self.Errors = collections.deque(maxlen=max_errors)


	def is_error_counter(self) -> bool:
		return self.Name in self.ERROR_COUNTER_NAMES


	def is_job_counter(self) -> bool:
		return self.Name == self.JOB_COUNTER_NAME


	def is_business_facade_counter(self) -> bool:
		return self.Name in self.BUSINESS_FACADE_COUNTER_NAMES


	def is_jsp_or_struts_counter(self) -> bool:
		return self.Name in (self.JSP_COUNTER_NAME, self.STRUTS_COUNTER_NAME)


	def bind_context(
		self, request_name: str, complete_request_name: typing.Optional[str] = None,
		cpu: bool = False, allocated_memory: bool = False
	) -> CounterRequestContext:
		"""
		Start a unit of work of this counter in the current task or thread.
		"""
		if complete_request_name is None:
			complete_request_name = request_name
		context = CounterRequestContext(
			self, CounterContext.get(), request_name, complete_request_name,
			cpu=cpu, allocated_memory=allocated_memory,
		)
		CounterContext.set(context)
		return context


	def _pop_context(self) -> typing.Optional[CounterRequestContext]:
		context = CounterContext.get()
		while context is not None and context.Counter is not self:
			context = context.Parent
		if context is None:
			return None
		CounterContext.set(context.Parent)
		return context


	def add_request_for_current_context(self, system_error: bool, response_size: int = -1):
		"""
		Finish the current unit of work of this counter and record exactly one hit.

		The enclosing units of work whose counter has this counter as a child counter
		get one child hit with the duration.
		"""
		context = self._pop_context()
		if context is None:
			L.warning("No request context bound for the counter", struct_data={'counter': self.Name})
			return

		duration = context.get_duration()
		with self.Lock:
			child_hits, child_durations = context.ChildHits, context.ChildDurationsSum
		self.add_request(
			context.RequestName,
			duration,
			context.get_cpu_time(),
			context.get_allocated_kbytes(),
			system_error,
			response_size=response_size,
			child_hits=child_hits,
			child_durations=child_durations,
		)

		parent = context.Parent
		while parent is not None:
			if parent.Counter.ChildCounterName == self.Name:
				# The parent context can be shared with other threads
				with parent.Counter.Lock:
					parent.add_child_request(duration)
			parent = parent.Parent


	def add_request(
		self, request_name: str, duration: int, cpu_time: int = -1, allocated_kbytes: int = -1,
		system_error: bool = False, response_size: int = -1, child_hits: int = 0, child_durations: int = 0
	):
		with self.Lock:
			request = self.Requests.get(request_name)
			if request is None:
				request = CounterRequest(request_name, self.Name)
				self.Requests[request_name] = request
			request.add_hit(
				duration, cpu_time, allocated_kbytes, system_error,
				response_size, child_hits, child_durations,
			)


	def add_request_for_system_error(
		self, message: str, duration: int = 0, cpu_time: int = -1, allocated_kbytes: int = -1,
		stack_trace: typing.Optional[str] = None, http_request: typing.Optional[str] = None,
		remote_user: typing.Optional[str] = None
	):
		"""
		Record a system error hit named by the error message.
		Error-type counters also keep the error in the error log.
		"""
		self.add_request(message, duration, cpu_time, allocated_kbytes, system_error=True)
		if self.is_error_counter():
			self.add_error(message, stack_trace=stack_trace, http_request=http_request, remote_user=remote_user)


	def add_error(
		self, message: str, stack_trace: typing.Optional[str] = None,
		http_request: typing.Optional[str] = None, remote_user: typing.Optional[str] = None
	):
		error = CounterError(message, stack_trace=stack_trace, http_request=http_request, remote_user=remote_user)
		with self.Lock:
			self.Errors.append(error)


	def get_requests(self) -> typing.List[CounterRequest]:
		with self.Lock:
			return [request.copy() for request in self.Requests.values()]


	def get_requests_count(self) -> int:
		with self.Lock:
			return len(self.Requests)


	def get_errors(self) -> typing.List[CounterError]:
		with self.Lock:
			return list(self.Errors)


	def clear(self):
		with self.Lock:
			self.Requests.clear()
			self.Errors.clear()
			self.StartDate = datetime.datetime.now()
		L.info("Counter cleared", struct_data={'counter': self.Name})


	def __repr__(self):
		return "<{} {!r} requests={}>".format(self.__class__.__name__, self.Name, self.get_requests_count())
