import datetime
import re
import typing

from ..counter import Counter, CounterRequest, CounterRequestAggregation, Period, Range
from .abstract import HtmlAbstractReport, HtmlTable
from .error_report import HtmlCounterErrorReport

SQL_KEYWORDS_RE = re.compile(
	r"\b(select|from|where|order by|group by|update|delete|insert into|values)\b",
	re.IGNORECASE
)

SEPARATOR = "&nbsp;&nbsp;&nbsp;&nbsp;&nbsp;"
NEXT_COLUMN = "</td> <td align='right'>"


def format_integer(value) -> str:
	return "{:,}".format(int(value))


def format_percent(value) -> str:
	return "{:,.2f}".format(value)


def percentage(numerator: int, denominator: int) -> int:
	"""
	`100 × numerator / denominator` rounded half up, 0 for a zero denominator.
	"""
	if denominator == 0:
		return 0
	return (200 * numerator + denominator) // (2 * denominator)


def sla_html_class(mean: int, warning_threshold: int, severe_threshold: int) -> str:
	"""
	CSS class of a mean time: `info`, `warning` or `severe`.
	A zero mean is always `info`, also when thresholds are zero.
	"""
	if mean < warning_threshold or mean == 0:
		return "info"
	if mean < severe_threshold:
		return "warning"
	return "severe"


def html_encode_request_name(request_id: str, request_name: str) -> str:
	"""
	Encode the request name keeping spaces; SQL keywords of `sql` counter requests are highlighted.
	"""
	encoded = HtmlAbstractReport.html_encode_but_not_space(request_name)
	if request_id.startswith(Counter.SQL_COUNTER_NAME):
		return SQL_KEYWORDS_RE.sub(r"<span class='sqlKeyword'>\1</span>", encoded)
	return encoded


class HtmlCounterReport(HtmlAbstractReport):
	"""
	HTML report part of one counter over a range:

	1. a summary table (global, warning and severe rows, or the most frequent error),
	2. throughput and links,
	3. hidden details with a row per request,
	4. hidden log of the last errors for error-type counters.
	"""

	def __init__(self, counter: Counter, range: Range, writer, now: typing.Optional[datetime.datetime] = None, **kwargs):
		super().__init__(writer, **kwargs)
		self.Counter = counter
		self.Range = range
		self.Now = now
		self.Aggregation = CounterRequestAggregation(counter)
		self.ErrorReportArgs = kwargs


	def to_html(self):
		requests = self.Aggregation.get_requests()
		if len(requests) == 0:
			self.write_no_requests()
			return

		counter_name = self.Counter.Name
		global_request = self.Aggregation.get_global_request()

		# Summary
		if self.is_error_and_not_job_counter():
			self.write_requests(counter_name, self.Counter.ChildCounterName, requests[:1])
		else:
			summary_requests = [
				global_request,
				self.Aggregation.get_warning_request(),
				self.Aggregation.get_severe_request(),
			]
			self.write_requests(global_request.Name, self.Counter.ChildCounterName, summary_requests)

		# Throughput and links
		self.write_size_and_links(requests, global_request)

		# Details, hidden by default
		self.writeln("<div id='details{}' class='displayNone'>".format(counter_name))
		self.write_requests(counter_name, self.Counter.ChildCounterName, requests)
		self.writeln("</div>")

		# Last errors, hidden by default
		if self.Counter.is_error_counter():
			self.writeln("<div id='logs{}' class='displayNone'><div>".format(counter_name))
			HtmlCounterErrorReport(self.Counter, self.Writer, **self.ErrorReportArgs).to_html()
			self.writeln("</div></div>")


	def is_error_and_not_job_counter(self) -> bool:
		return self.Counter.is_error_counter() and not self.Counter.is_job_counter()


	def write_no_requests(self):
		if self.Counter.is_job_counter():
			self.writeln("#No_jobs#")
		elif self.Counter.is_error_counter():
			self.writeln("#No_errors#")
		else:
			self.writeln("#No_requests#")


	def get_hits_per_minute(self, global_request: CounterRequest) -> int:
		now = self.Now if self.Now is not None else datetime.datetime.now()
		end_date = self.Range.get_end_date()
		if end_date is not None:
			# A custom range may end before today
			end = min(end_date, now)
		else:
			end = now
		delta_millis = max(int((end - self.Counter.StartDate).total_seconds() * 1000), 1)
		return 60000 * global_request.Hits // delta_millis


	def write_size_and_links(self, requests: typing.List[CounterRequest], global_request: CounterRequest):
		counter_name = self.Counter.Name
		hits_per_minute = self.get_hits_per_minute(global_request)

		self.writeln("<div align='right'>")
		if self.Counter.is_job_counter():
			nb_key = "nb_jobs"
		elif self.Counter.is_error_counter():
			nb_key = "nb_errors"
		else:
			nb_key = "nb_requests"
		self.writeln(self.get_formatted_string(nb_key, format_integer(hits_per_minute), format_integer(len(requests))))

		if self.Counter.is_business_facade_counter():
			self.writeln(SEPARATOR)
			self.writeln(
				"<a href='?part=counterSummaryPerClass&amp;counter=" + counter_name
				+ "' class='noPrint'>#Summary_per_class#</a>"
			)

		self.writeln(SEPARATOR)
		self.write_show_hide_link("details" + counter_name, "#Details#")
		if self.Counter.is_error_counter():
			self.writeln(SEPARATOR)
			self.write_show_hide_link("logs" + counter_name, "#Last_errors#")

		self.writeln(SEPARATOR)
		if self.Range.get_period() == Period.ALL:
			self.writeln(
				"<a href='?action=clear_counter&amp;counter=" + counter_name + self.get_csrf_token_url_part()
				+ "' title='" + self.html_encode_but_not_space_and_newline(self.get_formatted_string("Clear_stats", counter_name)) + "'"
			)
			self.writeln(
				"class='confirm noPrint' data-confirm='"
				+ self.html_encode_but_not_space_and_newline(self.get_formatted_string("confirm_clear_stats", counter_name))
				+ "'>#Reset#</a>"
			)
		self.writeln("</div>")


	def write_requests_aggregated_or_filtered_by_class_name(self, request_id: typing.Optional[str]):
		"""
		Summary per class of a business facade counter, or the methods of one class when `request_id` is given.
		"""
		requests = self.Aggregation.get_requests_aggregated_or_filtered_by_class_name(request_id)
		self.write_requests(
			self.Counter.Name, self.Counter.ChildCounterName, requests,
			include_summary_per_class_link=request_id is None,
		)


	def write_requests(
		self, table_name: str, child_counter_name: typing.Optional[str], requests: typing.List[CounterRequest],
		include_summary_per_class_link: bool = False
	):
		table = HtmlTable(self)
		table.begin_table(table_name)
		self.write_table_head(child_counter_name)
		for request in requests:
			table.next_row()
			self.write_request(request, include_summary_per_class_link)
		table.end_table()


	def get_column_heads(self, child_counter_name: typing.Optional[str]) -> typing.List[str]:
		"""
		Column heads of the request tables, the set depends on the available statistics.
		"""
		if self.Counter.is_job_counter():
			heads = ["#Job#"]
		elif self.Counter.is_error_counter():
			heads = ["#Error#"]
		else:
			heads = ["#Request#"]

		if self.Aggregation.is_times_displayed():
			heads.extend(["#cumulative_time#", "#Hits#", "#Mean_time#", "#Max_time#", "#Standard_deviation#"])
		else:
			heads.append("#Hits#")
		if self.Aggregation.is_cpu_times_displayed():
			heads.extend(["#cumulative_cpu_time#", "#Mean_cpu_time#"])
		if self.Aggregation.is_allocated_kbytes_displayed():
			heads.append("#Mean_allocated_Kb#")
		if not self.is_error_and_not_job_counter():
			heads.append("#system_error#")
		if self.Aggregation.is_response_size_displayed():
			heads.append("#Mean_size#")
		if self.Aggregation.is_child_hits_displayed():
			heads.append(self.get_formatted_string("hits_children_mean", child_counter_name))
			heads.append(self.get_formatted_string("time_children_mean", child_counter_name))
		return heads


	def write_table_head(self, child_counter_name: typing.Optional[str]):
		heads = self.get_column_heads(child_counter_name)
		self.write("<th>{}</th>".format(heads[0]))
		for head in heads[1:]:
			self.write("<th class='sorttable_numeric'>{}</th>".format(head))


	def write_request(self, request: CounterRequest, include_summary_per_class_link: bool = False):
		global_request = self.Aggregation.get_global_request()

		self.write("<td class='wrappedText'>")
		self.write_request_name(request.Id, request.Name, include_summary_per_class_link)

		if self.Aggregation.is_times_displayed():
			self.write(NEXT_COLUMN)
			self.write(format_integer(percentage(request.DurationsSum, global_request.DurationsSum)))
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.Hits))
			self.write(NEXT_COLUMN)
			self.write_mean(request.mean)
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.Maximum))
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.standard_deviation))
		else:
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.Hits))

		if self.Aggregation.is_cpu_times_displayed():
			self.write(NEXT_COLUMN)
			self.write(format_integer(percentage(request.CpuTimeSum, global_request.CpuTimeSum)))
			self.write(NEXT_COLUMN)
			self.write_mean(request.cpu_time_mean)

		if self.Aggregation.is_allocated_kbytes_displayed():
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.allocated_kbytes_mean))

		if not self.is_error_and_not_job_counter():
			self.write(NEXT_COLUMN)
			self.write(format_percent(request.system_error_percentage))

		if self.Aggregation.is_response_size_displayed():
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.response_size_mean // 1024))

		if self.Aggregation.is_child_hits_displayed():
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.child_hits_mean))
			self.write(NEXT_COLUMN)
			self.write(format_integer(request.child_durations_mean))

		self.write("</td>")


	def write_mean(self, mean: int):
		self.write("<span class='")
		self.write(self.get_sla_html_class(mean))
		self.write("'>")
		self.write(format_integer(mean))
		self.write("</span>")


	def write_request_name(self, request_id: str, request_name: str, include_summary_per_class_link: bool = False):
		# Written directly, a name containing '#' must not be taken for a placeholder
		if include_summary_per_class_link:
			self.write(
				"<a href='?part=counterSummaryPerClass&amp;counter=" + self.Counter.Name
				+ "&amp;graph=" + request_id + "'>"
			)
			self.write_directly(html_encode_request_name(request_id, request_name))
			self.write("</a> ")
		else:
			self.write_directly(html_encode_request_name(request_id, request_name))


	def get_sla_html_class(self, mean: int) -> str:
		return sla_html_class(mean, self.Aggregation.get_warning_threshold(), self.Aggregation.get_severe_threshold())
