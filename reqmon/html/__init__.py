import io

from .abstract import HtmlAbstractReport, HtmlTable
from .counter_report import HtmlCounterReport, percentage, sla_html_class, html_encode_request_name
from .error_report import HtmlCounterErrorReport


def render_counter_report(counter, range, **kwargs) -> str:
	"""
	Render the report of `counter` over `range` and return the HTML fragment.
	Keyword arguments are passed to `HtmlCounterReport`.
	"""
	output = io.StringIO()
	HtmlCounterReport(counter, range, output, **kwargs).to_html()
	return output.getvalue()


__all__ = (
	'HtmlAbstractReport',
	'HtmlTable',
	'HtmlCounterReport',
	'HtmlCounterErrorReport',
	'render_counter_report',
	'percentage',
	'sla_html_class',
	'html_encode_request_name',
)
