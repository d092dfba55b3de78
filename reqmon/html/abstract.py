import abc
import html
import typing

from ..i18n import I18N


class HtmlAbstractReport(abc.ABC):
	"""
	Base of HTML report parts written into a text sink (anything with a `write(str)` method, e.g. `io.StringIO`).

	`write()` emits `#key#` placeholders untouched unless the report was created with `translate=True`,
	`write_directly()` never translates, it is used for user data such as request names.
	"""

	def __init__(self, writer, i18n: typing.Optional[I18N] = None, translate: bool = False, csrf_token: typing.Optional[str] = None):
		self.Writer = writer
		self.I18N = i18n if i18n is not None else I18N()
		self.Translate = translate
		self.CsrfToken = csrf_token


	@abc.abstractmethod
	def to_html(self):
		pass


	def write(self, html_text: str):
		if self.Translate:
			html_text = self.I18N.translate(html_text)
		self.Writer.write(html_text)


	def writeln(self, html_text: str):
		self.write(html_text)
		self.Writer.write("\n")


	def write_directly(self, html_text: str):
		self.Writer.write(html_text)


	def get_formatted_string(self, key: str, *args) -> str:
		return self.I18N.get_formatted_string(key, *args)


	def get_csrf_token_url_part(self) -> str:
		if self.CsrfToken is None:
			return ""
		return "&amp;token=" + html.escape(self.CsrfToken, quote=True)


	def write_show_hide_link(self, id_to_show: str, label: str):
		self.writeln(
			"<a href='javascript:showHide(\"" + id_to_show + "\");' class='noPrint'><img id='" + id_to_show
			+ "Img' src='?resource=bullets/plus.png' alt=''/> " + label + "</a>"
		)


	@staticmethod
	def html_encode(text: str) -> str:
		"""
		Escape for HTML, spaces become non-breaking and newlines become line breaks.
		"""
		return html.escape(text, quote=True).replace(" ", "&nbsp;").replace("\n", "<br/>")


	@staticmethod
	def html_encode_but_not_space(text: str) -> str:
		"""
		Escape for HTML keeping spaces, newlines become line breaks.
		"""
		return html.escape(text, quote=True).replace("\n", "<br/>")


	@staticmethod
	def html_encode_but_not_space_and_newline(text: str) -> str:
		return html.escape(text, quote=True)


class HtmlTable(object):
	"""
	Sortable table with alternating `odd` / `even` rows.
	"""

	def __init__(self, report: HtmlAbstractReport):
		self.Report = report
		self.FirstRow = True
		self.OddRow = False


	def begin_table(self, summary: str):
		self.FirstRow = True
		self.OddRow = False
		self.Report.writeln(
			"<table class='sortable' width='100%' border='1' summary='"
			+ HtmlAbstractReport.html_encode_but_not_space_and_newline(summary) + "'>"
		)
		self.Report.write("<thead><tr>")


	def next_row(self):
		if self.FirstRow:
			self.FirstRow = False
			self.Report.writeln("</tr></thead><tbody>")
		else:
			self.Report.writeln("</tr>")
		self.OddRow = not self.OddRow
		if self.OddRow:
			self.Report.write("<tr class='odd' onmouseover=\"this.className='highlight'\" onmouseout=\"this.className='odd'\">")
		else:
			self.Report.write("<tr onmouseover=\"this.className='highlight'\" onmouseout=\"this.className=''\">")


	def end_table(self):
		if self.FirstRow:
			# No row at all
			self.Report.writeln("</tr></thead><tbody>")
		else:
			self.Report.writeln("</tr>")
		self.Report.writeln("</tbody></table>")
