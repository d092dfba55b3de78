import os
import tempfile
import unittest

import reqmon
from reqmon.config import ConfigParser, _Interpolation


class TestConfigParser(unittest.TestCase):

	def setUp(self):
		super().setUp()
		self.TempDir = tempfile.TemporaryDirectory()
		self.Parser = ConfigParser(interpolation=_Interpolation())


	def tearDown(self):
		self.TempDir.cleanup()
		super().tearDown()


	def write(self, name, content):
		path = os.path.join(self.TempDir.name, name)
		with open(path, "w") as f:
			f.write(content)
		return path


	def test_load_with_include(self):
		self.write("extra.yaml", "reqmon:\n  max_errors: 7\n  displayed_counters: http sql\n")
		path = self.write("reqmon.conf", "\n".join([
			"[general]",
			"include=${THIS_DIR}/extra.yaml",
			"",
			"[reqmon]",
			"disabled=true",
			"url=/monitoring",
			"",
		]))

		self.Parser.load(path)
		self.assertEqual("true", self.Parser.get("reqmon", "disabled"))
		self.assertEqual("7", self.Parser.get("reqmon", "max_errors"))
		self.assertEqual("http sql", self.Parser.get("reqmon", "displayed_counters"))
		# Defaults are added
		self.assertEqual("NOTICE", self.Parser.get("logging", "level"))


	def test_missing_file(self):
		with self.assertRaises(FileNotFoundError):
			self.Parser.load(os.path.join(self.TempDir.name, "missing.conf"))


	def test_add_defaults_keeps_values(self):
		self.Parser.read_dict({"reqmon": {"url": "/custom"}})
		self.Parser.add_defaults({"reqmon": {"url": "/default", "cpu_time": True}})
		self.assertEqual("/custom", self.Parser.get("reqmon", "url"))
		self.assertEqual("True", self.Parser.get("reqmon", "cpu_time"))


class TestConfigurable(unittest.TestCase):

	def test_merge(self):

		class Base(reqmon.Configurable):
			ConfigDefaults = {
				"foo": "base",
				"bar": "base",
			}

		class Derived(Base):
			ConfigDefaults = {
				"foo": "derived",
			}

		configurable = Derived("test_configurable_merge", config={"bar": "explicit", "enabled": "yes"})
		self.assertEqual("derived", configurable.Config["foo"])
		self.assertEqual("explicit", configurable.Config["bar"])
		self.assertTrue(configurable.Config.getboolean("enabled"))


	def test_global_section(self):
		reqmon.Config.read_dict({"test_configurable_section": {"max_errors": "42"}})
		try:
			config = reqmon.MonitoringConfig("test_configurable_section")
			self.assertEqual(42, config.MaxErrors)
		finally:
			reqmon.Config.remove_section("test_configurable_section")


	def test_none_default(self):

		class Invalid(reqmon.Configurable):
			ConfigDefaults = {
				"foo": None,
			}

		with self.assertRaises(ValueError):
			Invalid("test_configurable_invalid")


	def test_getmultiline(self):
		config = reqmon.MonitoringConfig(
			"test_configurable_multiline",
			config={"displayed_counters": "http, sql\n\tjsp\n"},
		)
		self.assertEqual(["http", "sql", "jsp"], config.Config.getmultiline("displayed_counters"))
		self.assertEqual(frozenset(["http", "sql", "jsp"]), config.DisplayedCounters)
		self.assertTrue(config.is_counter_hidden("error"))
