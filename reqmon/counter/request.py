import datetime
import hashlib
import math
import time
import tracemalloc
import typing


def build_request_id(name: str, counter_name: str) -> str:
	"""
	The id starts with the counter name, so that e.g. every id of the `sql` counter starts with `sql`.
	"""
	return counter_name + hashlib.sha1(name.encode("utf-8")).hexdigest()


class CounterRequest(object):
	"""
	Statistics of one request identity within a counter.

	CPU time, allocated kilobytes and response size are -1 per hit when they are not tracked,
	so their means stay negative for counters that do not track them.
	"""

	def __init__(self, name: str, counter_name: str):
		self.Name = name
		self.Id = build_request_id(name, counter_name)
		self.Hits = 0
		self.DurationsSum = 0
		self.DurationsSquareSum = 0
		self.Maximum = 0
		self.CpuTimeSum = 0
		self.AllocatedKBytesSum = 0
		self.SystemErrors = 0
		self.ResponseSizesSum = 0
		self.ChildHits = 0
		self.ChildDurationsSum = 0


	def add_hit(
		self, duration: int, cpu_time: int = -1, allocated_kbytes: int = -1, system_error: bool = False,
		response_size: int = -1, child_hits: int = 0, child_durations: int = 0
	):
		self.Hits += 1
		self.DurationsSum += duration
		self.DurationsSquareSum += duration * duration
		if duration > self.Maximum:
			self.Maximum = duration
		self.CpuTimeSum += cpu_time
		self.AllocatedKBytesSum += allocated_kbytes
		if system_error:
			self.SystemErrors += 1
		self.ResponseSizesSum += response_size
		self.ChildHits += child_hits
		self.ChildDurationsSum += child_durations


	def add_hits(self, other: "CounterRequest"):
		if other.Hits == 0:
			return
		self.Hits += other.Hits
		self.DurationsSum += other.DurationsSum
		self.DurationsSquareSum += other.DurationsSquareSum
		if other.Maximum > self.Maximum:
			self.Maximum = other.Maximum
		self.CpuTimeSum += other.CpuTimeSum
		self.AllocatedKBytesSum += other.AllocatedKBytesSum
		self.SystemErrors += other.SystemErrors
		self.ResponseSizesSum += other.ResponseSizesSum
		self.ChildHits += other.ChildHits
		self.ChildDurationsSum += other.ChildDurationsSum


	def copy(self) -> "CounterRequest":
		clone = CounterRequest.__new__(CounterRequest)
		clone.__dict__.update(self.__dict__)
		return clone


	def _mean_of(self, value: int) -> int:
		if self.Hits > 0:
			return value // self.Hits
		return -1


	@property
	def mean(self) -> int:
		if self.Hits > 0:
			return self.DurationsSum // self.Hits
		return 0


	@property
	def cpu_time_mean(self) -> int:
		return self._mean_of(self.CpuTimeSum)


	@property
	def allocated_kbytes_mean(self) -> int:
		return self._mean_of(self.AllocatedKBytesSum)


	@property
	def response_size_mean(self) -> int:
		return self._mean_of(self.ResponseSizesSum)


	@property
	def standard_deviation(self) -> int:
		# Sample standard deviation
		if self.Hits < 2:
			return 0
		variance = (self.DurationsSquareSum - self.DurationsSum * self.DurationsSum / self.Hits) / (self.Hits - 1)
		if variance <= 0:
			return 0
		return int(math.sqrt(variance))


	@property
	def system_error_percentage(self) -> float:
		if self.Hits > 0:
			return min(100.0 * self.SystemErrors / self.Hits, 100.0)
		return 0.0


	@property
	def child_hits_mean(self) -> int:
		if self.Hits > 0:
			return self.ChildHits // self.Hits
		return 0


	@property
	def child_durations_mean(self) -> int:
		if self.Hits > 0:
			return self.ChildDurationsSum // self.Hits
		return 0


	def __repr__(self):
		return "<{} {!r} hits={} mean={}>".format(self.__class__.__name__, self.Name, self.Hits, self.mean)


class CounterRequestContext(object):
	"""
	One in-flight unit of work bound to a counter.
	Contexts of nested units of work are chained through `Parent`.
	"""

	def __init__(
		self, counter, parent, request_name: str, complete_request_name: str,
		cpu: bool = False, allocated_memory: bool = False
	):
		self.Counter = counter
		self.Parent = parent
		self.RequestName = request_name
		self.CompleteRequestName = complete_request_name
		self.StartTime = time.perf_counter()
		self.StartCpuTime = time.thread_time() if cpu else None
		if allocated_memory and tracemalloc.is_tracing():
			self.StartAllocated = tracemalloc.get_traced_memory()[0]
		else:
			self.StartAllocated = None
		self.ChildHits = 0
		self.ChildDurationsSum = 0


	def get_duration(self, now: typing.Optional[float] = None) -> int:
		"""
		Elapsed time in milliseconds.
		"""
		if now is None:
			now = time.perf_counter()
		return max(int((now - self.StartTime) * 1000), 0)


	def get_cpu_time(self) -> int:
		"""
		CPU time of the current thread in milliseconds, -1 if the context does not track CPU.
		"""
		if self.StartCpuTime is None:
			return -1
		return max(int((time.thread_time() - self.StartCpuTime) * 1000), 0)


	def get_allocated_kbytes(self) -> int:
		"""
		Growth of the memory traced by `tracemalloc` in kilobytes, -1 if the context does not track memory.
		"""
		if self.StartAllocated is None or not tracemalloc.is_tracing():
			return -1
		return max((tracemalloc.get_traced_memory()[0] - self.StartAllocated) // 1024, 0)


	def add_child_request(self, duration: int):
		self.ChildHits += 1
		self.ChildDurationsSum += duration


class CounterError(object):
	"""
	One entry of the error log of an error-type counter.
	"""

	MESSAGE_MAX_LENGTH = 1000

	def __init__(
		self, message: str, stack_trace: typing.Optional[str] = None,
		http_request: typing.Optional[str] = None, remote_user: typing.Optional[str] = None,
		timestamp: typing.Optional[datetime.datetime] = None
	):
		if message is None:
			message = ""
		if len(message) > self.MESSAGE_MAX_LENGTH:
			message = message[:self.MESSAGE_MAX_LENGTH]
		self.Time = timestamp if timestamp is not None else datetime.datetime.now()
		self.Message = message
		self.StackTrace = stack_trace
		self.HttpRequest = http_request
		self.RemoteUser = remote_user


	def __repr__(self):
		return "<{} {} {!r}>".format(self.__class__.__name__, self.Time.isoformat(), self.Message)
