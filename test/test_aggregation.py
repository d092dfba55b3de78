import unittest

from reqmon.counter import Counter, CounterRequestAggregation


class TestAggregation(unittest.TestCase):

	def test_sorted_by_cumulative_time(self):
		counter = Counter("http")
		counter.add_request("/fast", 10)
		counter.add_request("/slow", 500)
		counter.add_request("/many", 100)
		counter.add_request("/many", 100)
		counter.add_request("/many", 100)

		aggregation = CounterRequestAggregation(counter)
		names = [request.Name for request in aggregation.get_requests()]
		self.assertEqual(["/slow", "/many", "/fast"], names)


	def test_errors_sorted_by_hits(self):
		counter = Counter("error")
		counter.add_request_for_system_error("rare", duration=1000)
		counter.add_request_for_system_error("frequent")
		counter.add_request_for_system_error("frequent")

		aggregation = CounterRequestAggregation(counter)
		names = [request.Name for request in aggregation.get_requests()]
		self.assertEqual(["frequent", "rare"], names)


	def test_global_request(self):
		counter = Counter("sql")
		counter.add_request("select 1", 10)
		counter.add_request("select 2", 30)

		global_request = CounterRequestAggregation(counter).get_global_request()
		self.assertEqual("sql global", global_request.Name)
		self.assertEqual(2, global_request.Hits)
		self.assertEqual(40, global_request.DurationsSum)
		self.assertEqual(30, global_request.Maximum)


	def test_configured_thresholds(self):
		counter = Counter("http", warning_threshold=100, severe_threshold=200)
		counter.add_request("/fast", 50)
		counter.add_request("/medium", 150)
		counter.add_request("/slow", 250)

		aggregation = CounterRequestAggregation(counter)
		self.assertEqual(100, aggregation.get_warning_threshold())
		self.assertEqual(200, aggregation.get_severe_threshold())

		self.assertEqual(1, aggregation.get_warning_request().Hits)
		self.assertEqual(150, aggregation.get_warning_request().DurationsSum)
		self.assertEqual(1, aggregation.get_severe_request().Hits)
		self.assertEqual(250, aggregation.get_severe_request().DurationsSum)


	def test_computed_thresholds(self):
		counter = Counter("http")
		counter.add_request("/a", 10)
		counter.add_request("/b", 20)
		counter.add_request("/c", 30)

		# Global mean 20 ms, standard deviation 10 ms
		aggregation = CounterRequestAggregation(counter)
		self.assertEqual(30, aggregation.get_warning_threshold())
		self.assertEqual(40, aggregation.get_severe_threshold())
		self.assertEqual(1, aggregation.get_warning_request().Hits)
		self.assertEqual(0, aggregation.get_severe_request().Hits)


	def test_untracked_statistics_are_hidden(self):
		counter = Counter("http")
		counter.add_request("/a", 10, cpu_time=-1, allocated_kbytes=10)

		aggregation = CounterRequestAggregation(counter)
		self.assertTrue(aggregation.is_times_displayed())
		self.assertFalse(aggregation.is_cpu_times_displayed())
		self.assertTrue(aggregation.is_allocated_kbytes_displayed())
		self.assertFalse(aggregation.is_response_size_displayed())
		self.assertFalse(aggregation.is_child_hits_displayed())


	def test_zero_statistics_are_displayed(self):
		counter = Counter("http")
		counter.add_request("/a", 10, cpu_time=0, allocated_kbytes=0, response_size=0)

		aggregation = CounterRequestAggregation(counter)
		self.assertTrue(aggregation.is_cpu_times_displayed())
		self.assertTrue(aggregation.is_allocated_kbytes_displayed())
		self.assertTrue(aggregation.is_response_size_displayed())


	def test_error_counter_flags(self):
		counter = Counter("error")
		counter.add_request_for_system_error("boom")
		self.assertFalse(CounterRequestAggregation(counter).is_times_displayed())

		counter = Counter("job")
		counter.add_request("nightly", 1000)
		self.assertTrue(CounterRequestAggregation(counter).is_times_displayed())


	def test_child_hits_flag(self):
		counter = Counter("http", child_counter_name="sql")
		counter.add_request("/a", 10, child_hits=3, child_durations=6)
		self.assertTrue(CounterRequestAggregation(counter).is_child_hits_displayed())


	def test_summary_per_class(self):
		counter = Counter("services")
		counter.add_request("OrderService.create", 100)
		counter.add_request("OrderService.delete", 50)
		counter.add_request("UserService.get", 10)

		aggregation = CounterRequestAggregation(counter)
		per_class = aggregation.get_requests_aggregated_or_filtered_by_class_name(None)
		self.assertEqual(["OrderService", "UserService"], [request.Name for request in per_class])
		self.assertEqual(2, per_class[0].Hits)
		self.assertEqual(150, per_class[0].DurationsSum)

		methods = aggregation.get_requests_aggregated_or_filtered_by_class_name(per_class[0].Id)
		self.assertEqual(["OrderService.create", "OrderService.delete"], [request.Name for request in methods])

		self.assertEqual([], aggregation.get_requests_aggregated_or_filtered_by_class_name("unknown"))
