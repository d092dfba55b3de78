import logging
import traceback

import aiohttp.web

from ..counter import Counter

#

L = logging.getLogger(__name__)

#


def _response_size(response) -> int:
	if response.prepared:
		return response.body_length
	length = response.content_length
	return length if length is not None else 0


def monitoring_middleware_factory(monitoring_service):
	"""
	Middleware recording every web request in the `http` counter, and failed ones also in the `error` counter.

	Installation:

	```python
	webapp.middlewares.append(monitoring_middleware_factory(monitoring_service))
	```
	"""
	config = monitoring_service.MonitoringConfig
	http_counter = monitoring_service.get_counter(Counter.HTTP_COUNTER_NAME)
	error_counter = monitoring_service.get_counter(Counter.ERROR_COUNTER_NAME)
	http_counter.Used = True
	error_counter.Used = True

	def record(context, status, exception, response_size):
		system_error = exception is not None or (status is not None and status >= 500)
		http_counter.add_request_for_current_context(system_error, response_size=response_size)

		if exception is not None:
			message = "{}: {}".format(exception.__class__.__name__, exception)
			stack_trace = "".join(traceback.format_exception(type(exception), exception, exception.__traceback__))
		elif status is not None and status >= 400:
			message = "Error {}".format(status)
			stack_trace = None
		else:
			return

		error_counter.add_request_for_system_error(
			message,
			duration=0,
			stack_trace=stack_trace,
			# The error log shows the query string too
			http_request=context.CompleteRequestName,
		)

	@aiohttp.web.middleware
	async def monitoring_middleware(request, handler):
		if config.Disabled or request.path == config.URL:
			return await handler(request)

		status = None
		exception = None
		response_size = 0

		context = http_counter.bind_context(
			"{} {}".format(request.path, request.method),
			complete_request_name="{} {}".format(request.path_qs, request.method),
			cpu=config.CpuTime,
			allocated_memory=config.AllocatedMemory,
		)
		try:
			response = await handler(request)
			status = response.status
			response_size = _response_size(response)
			return response

		except aiohttp.web.HTTPException as e:
			status = e.status
			raise

		except BaseException as e:
			exception = e
			raise

		finally:
			try:
				record(context, status, exception, response_size)
			except Exception:
				L.exception("Failed to record the web request", struct_data={'path': request.path})

	return monitoring_middleware
