import io
import logging

import aiohttp.web

from ..counter import Range
from ..exceptions import UnknownCounterError
from ..html import HtmlCounterReport
from ..i18n import I18N

#

L = logging.getLogger(__name__)

#


class MonitoringWebHandler(object):
	"""
	Serves the HTML report fragments of the counters.

	Query parameters of the monitoring URL:
	* `counter`: name of a single counter, all displayed counters otherwise
	* `period`: period code (`day`, `week`, `month`, `year`, `all`) or `YYYY-MM-DD|YYYY-MM-DD`, default `day`
	* `part=counterSummaryPerClass`: summary per class of a business facade counter, `graph` selects one class
	* `action=clear_counter`: clear the `counter` and redirect back to the page
	"""

	def __init__(self, monitoring_service, webapp):
		self.MonitoringService = monitoring_service
		self.URL = monitoring_service.MonitoringConfig.URL
		self.I18N = I18N()

		webapp.router.add_get(self.URL, self.monitoring)


	async def monitoring(self, request):
		action = request.query.get("action")
		if action is not None:
			return self.do_action(request, action)

		try:
			report_range = Range.parse(request.query.get("period", "day"))
		except ValueError as e:
			raise aiohttp.web.HTTPBadRequest(reason=str(e))

		counter_name = request.query.get("counter")
		part = request.query.get("part")
		output = io.StringIO()

		if part == "counterSummaryPerClass":
			counter = self._get_counter(counter_name)
			report = self._create_report(counter, report_range, output)
			report.write_requests_aggregated_or_filtered_by_class_name(request.query.get("graph"))

		elif part is not None:
			raise aiohttp.web.HTTPBadRequest(reason="Unknown part '{}'".format(part))

		else:
			if counter_name is not None:
				counters = [self._get_counter(counter_name)]
			else:
				counters = self.MonitoringService.get_displayed_counters()

			for counter in counters:
				output.write("<h3 class='chapterTitle'><img src='?resource={}' alt='{}'/> {}</h3>\n".format(
					counter.IconName, counter.Name, counter.Name
				))
				self._create_report(counter, report_range, output).to_html()

		return aiohttp.web.Response(
			text=output.getvalue(),
			content_type="text/html",
			charset="utf-8",
		)


	def do_action(self, request, action):
		if action != "clear_counter":
			raise aiohttp.web.HTTPBadRequest(reason="Unknown action '{}'".format(action))

		counter_name = request.query.get("counter")
		if counter_name is None:
			raise aiohttp.web.HTTPBadRequest(reason="Missing counter")

		counter = self._get_counter(counter_name)
		counter.clear()
		L.info("Counter cleared from the monitoring page", struct_data={'counter': counter.Name, 'remote': request.remote})
		raise aiohttp.web.HTTPFound(location=self.URL)


	def _get_counter(self, counter_name):
		if counter_name is None:
			raise aiohttp.web.HTTPBadRequest(reason="Missing counter")
		try:
			return self.MonitoringService.get_counter(counter_name)
		except UnknownCounterError:
			raise aiohttp.web.HTTPNotFound(reason="Unknown counter '{}'".format(counter_name))


	def _create_report(self, counter, report_range, output):
		return HtmlCounterReport(counter, report_range, output, i18n=self.I18N, translate=True)
