import logging
import unittest

import reqmon
from reqmon.log import StructuredDataFormatter


class TestStructuredDataFormatter(unittest.TestCase):

	def create_record(self, level=logging.INFO, struct_data=None):
		record = logging.LogRecord("reqmon.test", level, __file__, 1, "Counter cleared", None, None)
		if struct_data is not None:
			record._struct_data = struct_data
		return record


	def test_struct_data(self):
		formatter = StructuredDataFormatter(fmt="%(levelname)s %(struct_data)s%(message)s")
		record = self.create_record(struct_data={'counter': 'sql', 'hits': 3})
		self.assertEqual('INFO [sd counter="sql" hits="3"] Counter cleared', formatter.format(record))


	def test_without_struct_data(self):
		formatter = StructuredDataFormatter(fmt="%(levelname)s %(struct_data)s%(message)s", sd_id="reqmon")
		self.assertEqual("INFO Counter cleared", formatter.format(self.create_record()))


	def test_priority(self):
		formatter = StructuredDataFormatter(fmt="<%(priority)s>%(message)s")
		self.assertEqual("<134>Counter cleared", formatter.format(self.create_record()))
		self.assertEqual("<133>Counter cleared", formatter.format(self.create_record(level=reqmon.LOG_NOTICE)))
		self.assertEqual("<131>Counter cleared", formatter.format(self.create_record(level=logging.ERROR)))


	def test_logger_struct_data(self):
		logger = logging.getLogger("reqmon.test.structured")
		with self.assertLogs("reqmon.test.structured", level="INFO") as cm:
			logger.info("Counter cleared", struct_data={'counter': 'http'})
		self.assertEqual({'counter': 'http'}, cm.records[0]._struct_data)


	def test_notice_level(self):
		self.assertEqual("NOTICE", logging.getLevelName(reqmon.LOG_NOTICE))
