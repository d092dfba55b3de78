import typing

from .counter import Counter
from .request import CounterRequest


class CounterRequestAggregation(object):
	"""
	Derived view over a counter: sorted requests, global/warning/severe summary rows,
	thresholds and the flags telling which statistics are available.

	The aggregation is computed once from a snapshot of the counter.
	"""

	def __init__(self, counter: Counter):
		self.Counter = counter
		self.Requests = counter.get_requests()

		if counter.is_error_counter():
			# Errors are ranked by their number, they have no meaningful duration
			self.Requests.sort(key=lambda request: request.Hits, reverse=True)
		else:
			self.Requests.sort(key=lambda request: request.DurationsSum, reverse=True)

		self.GlobalRequest = CounterRequest(counter.Name + " global", counter.Name)
		for request in self.Requests:
			self.GlobalRequest.add_hits(request)

		global_mean = self.GlobalRequest.mean
		global_standard_deviation = self.GlobalRequest.standard_deviation
		self.WarningThreshold = self._threshold(counter.WarningThreshold, global_mean + global_standard_deviation)
		self.SevereThreshold = self._threshold(counter.SevereThreshold, global_mean + 2 * global_standard_deviation)

		self.WarningRequest = CounterRequest(counter.Name + " warning", counter.Name)
		self.SevereRequest = CounterRequest(counter.Name + " severe", counter.Name)
		for request in self.Requests:
			mean = request.mean
			if self.SevereThreshold > 0 and mean >= self.SevereThreshold:
				self.SevereRequest.add_hits(request)
			elif self.WarningThreshold > 0 and mean >= self.WarningThreshold:
				self.WarningRequest.add_hits(request)

		self.TimesDisplayed = not (counter.is_error_counter() and not counter.is_job_counter())
		self.CpuTimesDisplayed = self.GlobalRequest.cpu_time_mean >= 0
		self.AllocatedKBytesDisplayed = self.GlobalRequest.allocated_kbytes_mean >= 0
		self.ResponseSizeDisplayed = self.GlobalRequest.response_size_mean >= 0
		self.ChildHitsDisplayed = self.GlobalRequest.ChildHits > 0


	@staticmethod
	def _threshold(configured, computed) -> int:
		if configured is not None and configured >= 0:
			return int(configured)
		return int(computed)


	def get_requests(self) -> typing.List[CounterRequest]:
		return self.Requests


	def get_global_request(self) -> CounterRequest:
		return self.GlobalRequest


	def get_warning_request(self) -> CounterRequest:
		return self.WarningRequest


	def get_severe_request(self) -> CounterRequest:
		return self.SevereRequest


	def get_warning_threshold(self) -> int:
		return self.WarningThreshold


	def get_severe_threshold(self) -> int:
		return self.SevereThreshold


	def is_times_displayed(self) -> bool:
		return self.TimesDisplayed


	def is_cpu_times_displayed(self) -> bool:
		return self.CpuTimesDisplayed


	def is_allocated_kbytes_displayed(self) -> bool:
		return self.AllocatedKBytesDisplayed


	def is_response_size_displayed(self) -> bool:
		return self.ResponseSizeDisplayed


	def is_child_hits_displayed(self) -> bool:
		return self.ChildHitsDisplayed


	def get_requests_aggregated_or_filtered_by_class_name(self, request_id: typing.Optional[str]) -> typing.List[CounterRequest]:
		"""
		Request names of business facade counters are `Class.method`.

		With `request_id` None, return one row per class.
		Otherwise return the requests of the class whose per-class row has the id `request_id`.
		"""
		per_class = {}
		members = {}
		for request in self.Requests:
			class_name = _class_name(request.Name)
			class_request = per_class.get(class_name)
			if class_request is None:
				class_request = CounterRequest(class_name, self.Counter.Name)
				per_class[class_name] = class_request
				members[class_request.Id] = []
			class_request.add_hits(request)
			members[class_request.Id].append(request)

		if request_id is None:
			result = list(per_class.values())
			result.sort(key=lambda request: request.DurationsSum, reverse=True)
			return result

		return members.get(request_id, [])


def _class_name(request_name: str) -> str:
	index = request_name.rfind('.')
	if index == -1:
		return request_name
	return request_name[:index]
