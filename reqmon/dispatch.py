import abc
import inspect

from .exceptions import is_system_error
from .utils import strip_query_string


class RequestDispatcher(abc.ABC):
	"""
	Host capability that hands the processing of a request over to another request-processing unit.

	`include()` embeds the output of the target into the current response,
	`forward()` transfers the whole processing to the target.
	"""

	@abc.abstractmethod
	async def include(self, request, response):
		pass

	@abc.abstractmethod
	async def forward(self, request, response):
		pass


class MonitoredRequestDispatcher(RequestDispatcher):
	"""
	Decorator of a host `RequestDispatcher` that records every include/forward in a counter (the `jsp` one).

	The request name is the target path without its query string.
	Every other attribute is taken from the decorated dispatcher.
	"""

	def __init__(self, path: str, dispatcher, counter, config):
		assert path is not None
		assert dispatcher is not None
		self.Path = path
		self.RequestName = strip_query_string(path)
		self.Dispatcher = dispatcher
		self.Counter = counter
		self.CpuTime = config.CpuTime
		self.AllocatedMemory = config.AllocatedMemory

		# The counter is displayed as soon as it is used, unless configured otherwise
		counter.Displayed = not config.is_counter_hidden(counter.Name)
		counter.Used = True


	async def include(self, request, response):
		return await self._dispatch(self.Dispatcher.include, request, response)


	async def forward(self, request, response):
		return await self._dispatch(self.Dispatcher.forward, request, response)


	async def _dispatch(self, operation, request, response):
		system_error = False
		try:
			self.Counter.bind_context(self.RequestName, cpu=self.CpuTime, allocated_memory=self.AllocatedMemory)
			result = operation(request, response)
			if inspect.isawaitable(result):
				result = await result
			return result
		except BaseException as e:
			# Application exceptions are functional, only runtime failures count as system errors
			system_error = is_system_error(e)
			raise
		finally:
			self.Counter.add_request_for_current_context(system_error)


	def __getattr__(self, name):
		if name == "Dispatcher":
			raise AttributeError(name)
		return getattr(self.Dispatcher, name)


	def __repr__(self):
		return "<{} {!r} of {!r}>".format(self.__class__.__name__, self.Path, self.Dispatcher)


class RequestWrapper(object):
	"""
	Wrapper of a host request whose request dispatchers are monitored.
	Every other attribute is taken from the wrapped request.
	"""

	def __init__(self, request, counter, config):
		self.Request = request
		self.Counter = counter
		self.MonitoringConfig = config


	def get_request_dispatcher(self, path):
		dispatcher = self.Request.get_request_dispatcher(path)
		if dispatcher is None:
			return None
		# The path may be None for the host
		return MonitoredRequestDispatcher(str(path), dispatcher, self.Counter, self.MonitoringConfig)


	def __getattr__(self, name):
		if name == "Request":
			raise AttributeError(name)
		return getattr(self.Request, name)


class AsyncCapableRequestWrapper(RequestWrapper):
	"""
	Wrapper for hosts with asynchronous request processing.

	`start_async()` hands the wrapper and its response to the host, so that the asynchronous context
	keeps working with the monitored pair and not with the original request.
	"""

	def __init__(self, request, response, counter, config):
		super().__init__(request, counter, config)
		self.Response = response


	def start_async(self):
		return self.Request.start_async(self, self.Response)


def supports_async_dispatch(request) -> bool:
	return callable(getattr(request, "start_async", None))


def create_request_wrapper(request, response, counter, config):
	"""
	Wrap the host request so that its dispatchers are monitored by `counter`.

	The original request is returned when monitoring is disabled or the counter is hidden.
	"""
	if config.Disabled or config.is_counter_hidden(counter.Name):
		return request
	if supports_async_dispatch(request):
		return AsyncCapableRequestWrapper(request, response, counter, config)
	return RequestWrapper(request, counter, config)
