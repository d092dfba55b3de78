SYSTEM_ERRORS = (MemoryError, RecursionError, SystemError)
"""
Interpreter-level failures that are counted as system errors although they are `Exception` subclasses.
"""


def is_system_error(exc: BaseException) -> bool:
	"""
	Tell an unrecoverable runtime failure from an ordinary application failure.

	Anything that is not an `Exception` (`KeyboardInterrupt`, `SystemExit`, `asyncio.CancelledError`, ...)
	and the members of `SYSTEM_ERRORS` are system errors; everything else is functional.
	"""
	if not isinstance(exc, Exception):
		return True
	return isinstance(exc, SYSTEM_ERRORS)


class UnknownCounterError(KeyError):
	"""
	Requested counter does not exist in the monitoring service
	"""

	def __init__(self, name):
		super().__init__(name)
		self.Name = name
