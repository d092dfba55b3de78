from ..counter import Counter
from .abstract import HtmlAbstractReport, HtmlTable


class HtmlCounterErrorReport(HtmlAbstractReport):
	"""
	The log of the last errors of an error-type counter, most recent first.
	"""

	DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

	def __init__(self, counter: Counter, writer, **kwargs):
		super().__init__(writer, **kwargs)
		assert counter.is_error_counter()
		self.Counter = counter


	def to_html(self):
		errors = self.Counter.get_errors()
		if len(errors) == 0:
			self.writeln("#No_errors#")
			return

		display_http_request = any(error.HttpRequest is not None for error in errors)
		display_user = any(error.RemoteUser is not None for error in errors)

		table = HtmlTable(self)
		table.begin_table("#Errors#")
		self.write("<th>#Date#</th>")
		if display_http_request:
			self.write("<th>#Request#</th>")
		if display_user:
			self.write("<th>#User#</th>")
		self.write("<th>#Error#</th>")

		for error in reversed(errors):
			table.next_row()
			self._write_error(error, display_http_request, display_user)

		table.end_table()


	def _write_error(self, error, display_http_request, display_user):
		self.write("<td align='right'>")
		self.write(error.Time.strftime(self.DATE_FORMAT))
		if display_http_request:
			self.write("</td><td class='wrappedText'>")
			if error.HttpRequest is not None:
				self.write_directly(self.html_encode_but_not_space(error.HttpRequest))
		if display_user:
			self.write("</td><td class='wrappedText'>")
			if error.RemoteUser is not None:
				self.write_directly(self.html_encode_but_not_space(error.RemoteUser))
		self.write("</td><td class='wrappedText'>")
		if error.StackTrace is not None:
			self.write("<a class='tooltip'><em><pre>")
			self.write_directly(self.html_encode_but_not_space_and_newline(error.StackTrace))
			self.write("</pre></em>")
			self.write_directly(self.html_encode_but_not_space(error.Message))
			self.write("</a>")
		else:
			self.write_directly(self.html_encode_but_not_space(error.Message))
		self.write("</td>")
