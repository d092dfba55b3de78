import re
import typing

#

PLACEHOLDER_RE = re.compile(r"#([A-Za-z0-9_]+)#")

#


class I18N(object):
	"""
	Built-in English messages.

	Reports emit `#key#` placeholders that an external localization step resolves;
	parametrized messages have to be formatted when the report is written, so they are looked up here.
	"""

	Messages = {
		"nb_requests": "{0} hits/min on {1} requests",
		"nb_errors": "{0} errors/min on {1} errors",
		"nb_jobs": "{0} executions/min on {1} jobs",
		"hits_children_mean": "Mean hits {0}",
		"time_children_mean": "Mean time {0} (ms)",
		"Clear_stats": "Clear statistics of {0}",
		"confirm_clear_stats": "Confirm clearing of statistics of {0}?",

		"Request": "Request",
		"Error": "Error",
		"Errors": "Errors",
		"Job": "Job",
		"Date": "Date",
		"User": "User",
		"cumulative_time": "% of cumulative time",
		"Hits": "Hits",
		"Mean_time": "Mean time (ms)",
		"Max_time": "Max time (ms)",
		"Standard_deviation": "Standard deviation",
		"cumulative_cpu_time": "% of cumulative cpu time",
		"Mean_cpu_time": "Mean cpu time (ms)",
		"Mean_allocated_Kb": "Mean allocated Kb",
		"system_error": "% of system error",
		"Mean_size": "Mean size (Kb)",
		"No_requests": "No requests",
		"No_errors": "No errors",
		"No_jobs": "No jobs",
		"Summary_per_class": "Summary per class",
		"Details": "Details",
		"Last_errors": "Last errors",
		"Reset": "Reset",
	}

	def __init__(self, messages: typing.Optional[dict] = None):
		self.Messages = dict(self.Messages)
		if messages is not None:
			self.Messages.update(messages)


	def get_string(self, key: str) -> str:
		return self.Messages.get(key, key)


	def get_formatted_string(self, key: str, *args) -> str:
		return self.get_string(key).format(*args)


	def translate(self, html: str) -> str:
		"""
		Replace every `#key#` placeholder that has a message, unknown placeholders are kept.
		"""
		def replace(match):
			return self.Messages.get(match.group(1), match.group(0))
		return PLACEHOLDER_RE.sub(replace, html)
