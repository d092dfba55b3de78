#!/usr/bin/env python3
import random

import reqmon


def main():
	'''
	Record a few statistics without any web server and print the HTML report of the counter.
	'''
	counter = reqmon.Counter("services", child_counter_name="sql", warning_threshold=100, severe_threshold=300)

	for _ in range(50):
		counter.add_request("OrderService.create", random.randint(20, 400), cpu_time=random.randint(1, 10))
		counter.add_request("OrderService.cancel", random.randint(5, 50), cpu_time=random.randint(1, 5))
		counter.add_request("CustomerService.find", random.randint(1, 20), cpu_time=0, system_error=random.random() < 0.1)

	print(reqmon.render_counter_report(counter, reqmon.Range.parse("all"), translate=True))


if __name__ == '__main__':
	main()
