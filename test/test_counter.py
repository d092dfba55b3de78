import contextvars
import threading
import unittest

from reqmon.counter import Counter, CounterError


class TestCounter(unittest.TestCase):

	def setUp(self):
		super().setUp()
		# Request contexts are kept in a context variable, isolate every test
		self.Context = contextvars.copy_context()


	def test_hits_and_system_errors(self):
		counter = Counter("http")
		samples = [False, True, False, False, True, False, True]
		for system_error in samples:
			counter.add_request("/index.html GET", 10, system_error=system_error)

		requests = counter.get_requests()
		self.assertEqual(1, len(requests))
		self.assertEqual(len(samples), requests[0].Hits)
		self.assertEqual(3, requests[0].SystemErrors)


	def test_statistics(self):
		counter = Counter("http")
		counter.add_request("/a", 10, cpu_time=4)
		counter.add_request("/a", 20, cpu_time=6)
		counter.add_request("/a", 30, cpu_time=8)

		request = counter.get_requests()[0]
		self.assertEqual(20, request.mean)
		self.assertEqual(30, request.Maximum)
		self.assertEqual(10, request.standard_deviation)
		self.assertEqual(6, request.cpu_time_mean)
		self.assertEqual(-1, request.allocated_kbytes_mean)
		self.assertEqual(0.0, request.system_error_percentage)


	def test_request_id_prefix(self):
		counter = Counter("sql")
		counter.add_request("select 1", 1)
		self.assertTrue(counter.get_requests()[0].Id.startswith("sql"))


	def test_snapshot(self):
		counter = Counter("http")
		counter.add_request("/a", 10)
		snapshot = counter.get_requests()
		counter.add_request("/a", 10)
		self.assertEqual(1, snapshot[0].Hits)
		self.assertEqual(2, counter.get_requests()[0].Hits)


	def test_current_context(self):
		counter = Counter("jsp")

		def work():
			counter.bind_context("/page.jsp", cpu=True)
			counter.add_request_for_current_context(system_error=True)

		self.Context.run(work)

		request = counter.get_requests()[0]
		self.assertEqual("/page.jsp", request.Name)
		self.assertEqual(1, request.Hits)
		self.assertEqual(1, request.SystemErrors)
		self.assertGreaterEqual(request.cpu_time_mean, 0)


	def test_unbound_context_is_not_recorded(self):
		counter = Counter("jsp")
		self.Context.run(counter.add_request_for_current_context, False)
		self.assertEqual(0, counter.get_requests_count())


	def test_child_hits(self):
		sql = Counter("sql")
		http = Counter("http", child_counter_name="sql")

		def work():
			http.bind_context("/orders GET")
			sql.bind_context("select * from orders")
			sql.add_request_for_current_context(False)
			sql.bind_context("select * from customers")
			sql.add_request_for_current_context(False)
			http.add_request_for_current_context(False)

		self.Context.run(work)

		self.assertEqual(2, sql.get_requests_count())
		request = http.get_requests()[0]
		self.assertEqual(2, request.ChildHits)
		self.assertEqual(2, request.child_hits_mean)


	def test_concurrent_hits(self):
		counter = Counter("http")
		threads_count, calls = 8, 500

		def work():
			for i in range(calls):
				counter.add_request("/index.html GET", i % 7, cpu_time=1, system_error=(i % 5 == 0))

		threads = [threading.Thread(target=work) for _ in range(threads_count)]
		for thread in threads:
			thread.start()
		for thread in threads:
			thread.join()

		request = counter.get_requests()[0]
		self.assertEqual(threads_count * calls, request.Hits)
		self.assertEqual(threads_count * len(range(0, calls, 5)), request.SystemErrors)
		self.assertEqual(threads_count * calls, request.CpuTimeSum)


	def test_concurrent_child_hits(self):
		sql = Counter("sql")
		http = Counter("http", child_counter_name="sql")
		threads_count, calls = 8, 200

		def child_work():
			for i in range(calls):
				sql.bind_context("select {}".format(i % 3))
				sql.add_request_for_current_context(False)

		def work():
			http.bind_context("/report GET")
			# Every thread continues in its own copy of the context holding the http request
			threads = [
				threading.Thread(target=contextvars.copy_context().run, args=(child_work,))
				for _ in range(threads_count)
			]
			for thread in threads:
				thread.start()
			for thread in threads:
				thread.join()
			http.add_request_for_current_context(False)

		self.Context.run(work)

		self.assertEqual(threads_count * calls, sum(request.Hits for request in sql.get_requests()))
		request = http.get_requests()[0]
		self.assertEqual(1, request.Hits)
		self.assertEqual(threads_count * calls, request.ChildHits)


	def test_error_log_is_bounded(self):
		counter = Counter("error", max_errors=3)
		for i in range(5):
			counter.add_error(str(i))

		errors = counter.get_errors()
		self.assertEqual(["2", "3", "4"], [error.Message for error in errors])


	def test_system_error_request(self):
		counter = Counter("error")
		counter.add_request_for_system_error("Error 404", http_request="/missing GET")
		counter.add_request_for_system_error("Error 404", http_request="/missing GET")

		request = counter.get_requests()[0]
		self.assertEqual(2, request.Hits)
		self.assertEqual(2, request.SystemErrors)
		self.assertEqual(2, len(counter.get_errors()))
		self.assertEqual("/missing GET", counter.get_errors()[0].HttpRequest)


	def test_clear(self):
		counter = Counter("error")
		start_date = counter.StartDate
		counter.add_request_for_system_error("boom")
		counter.clear()
		self.assertEqual(0, counter.get_requests_count())
		self.assertEqual([], counter.get_errors())
		self.assertGreaterEqual(counter.StartDate, start_date)


	def test_counter_kinds(self):
		self.assertTrue(Counter("error").is_error_counter())
		self.assertFalse(Counter("error").is_job_counter())
		self.assertTrue(Counter("job").is_error_counter())
		self.assertTrue(Counter("job").is_job_counter())
		self.assertTrue(Counter("services").is_business_facade_counter())
		self.assertTrue(Counter("jsp").is_jsp_or_struts_counter())
		self.assertFalse(Counter("http").is_error_counter())


	def test_error_message_is_capped(self):
		error = CounterError("x" * 2000)
		self.assertEqual(CounterError.MESSAGE_MAX_LENGTH, len(error.Message))
