#!/usr/bin/env python3
import asyncio
import logging

import aiohttp.web

import reqmon

#

L = logging.getLogger(__name__)

#


class MyApplication(object):

	'''
	Run by:
	`$ PYTHONPATH=.. ./webserver.py`

	The application will be available at http://localhost:8080/
	and its monitoring page at http://localhost:8080/reqmon/v1/monitoring
	'''

	def __init__(self):
		reqmon.Config.read_string(
			"""
[reqmon]
displayed_counters=http sql error
warning_threshold_millis=50
severe_threshold_millis=200
			"""
		)
		self.Logging = reqmon.Logging()
		self.Monitoring = reqmon.MonitoringService()

		self.WebApp = aiohttp.web.Application()
		self.WebApp.router.add_get('/', self.hello)
		self.WebApp.router.add_get('/orders', self.orders)
		self.WebApp.router.add_get('/crash', self.crash)
		self.Monitoring.initialize_web(self.WebApp)
		print("Test with curl:\n\t$ curl http://localhost:8080/orders")


	async def hello(self, request):
		return aiohttp.web.Response(text="Hello, world!\n")


	async def orders(self, request):
		# Database calls are recorded in the 'sql' counter, which is the child counter of 'http'
		with self.Monitoring.monitor("sql", "select * from orders where customer=?"):
			await asyncio.sleep(0.03)
		with self.Monitoring.monitor("sql", "select * from customers where id=?"):
			await asyncio.sleep(0.01)
		return aiohttp.web.Response(text="Orders\n")


	async def crash(self, request):
		raise RuntimeError("Crash on purpose")


	def run(self):
		L.log(reqmon.LOG_NOTICE, "Listening", struct_data={'port': 8080})
		aiohttp.web.run_app(self.WebApp, port=8080, print=None)


if __name__ == '__main__':
	app = MyApplication()
	app.run()
