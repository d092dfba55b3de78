import os
import sys
import re
import glob
import logging
import inspect
import configparser
import collections.abc
import typing

import yaml

from . import utils

#

L = logging.getLogger(__name__)

#


class ConfigParser(configparser.ConfigParser):
	"""
	The configuration of reqmon and of the application that embeds it.

	On top of `configparser.ConfigParser` it adds built-in defaults, `[general] include`
	of further INI or YAML files (globs, nested) and getters for durations and lists.
	"""

	_default_values = {

		'general': {
			'config_file': os.environ.get('REQMON_CONFIG', ''),
			'include': '',
		},

		'logging': {
			'verbose': os.environ.get('REQMON_VERBOSE', 'false'),
			'app_name': os.path.basename(sys.argv[0]),
			'sd_id': 'sd',  # Structured data id, see RFC5424
			'level': 'NOTICE',
		},

		'logging:console': {
			'format': '%(asctime)s %(levelname)s %(name)s %(struct_data)s%(message)s',
			'datefmt': '%d-%b-%Y %H:%M:%S.%f',
		},

		'logging:file': {
			'path': '',
			'format': '%(asctime)s %(levelname)s %(name)s %(struct_data)s%(message)s',
			'datefmt': '%d-%b-%Y %H:%M:%S.%f',
			'backup_count': 3,
			'backup_max_bytes': 0,
		},

	}


	def add_defaults(self, dictionary: dict) -> None:
		"""
		Set the values of `dictionary` ({section: {key: value}}) that are not configured yet.
		"""
		for section, values in dictionary.items():
			section = str(section)
			if not self.has_section(section):
				self.add_section(section)

			for key, value in values.items():
				key = self.optionxform(str(key))
				if self.has_option(section, key):
					continue
				if value is not None:
					value = os.path.expandvars(str(value))
				self.set(section, key, value)


	def load(self, config_fname: typing.Optional[str] = None) -> None:
		"""
		Read the configuration file, then the included files, then fill in the defaults.

		Without `config_fname`, the file named by the `REQMON_CONFIG` environment variable is read (if any).
		"""
		if config_fname is None:
			config_fname = self._default_values['general']['config_file']

		self._included = set()
		if len(config_fname) > 0:
			if not os.path.isfile(config_fname):
				raise FileNotFoundError("Config file '{}' not found".format(config_fname))
			self._read_file(os.path.abspath(config_fname))

		self.add_defaults(self._default_values)


	def _read_file(self, fname: str) -> None:
		self._included.add(fname)
		# Value of ${THIS_DIR} while the file is read
		self._this_dir = os.path.dirname(fname)
		try:
			if fname.endswith(".yaml") or fname.endswith(".yml"):
				with open(fname, "r") as f:
					content = yaml.safe_load(f)
				if content is None:
					content = {}
				if not isinstance(content, dict):
					raise ValueError("Config file '{}' must contain a mapping of sections".format(fname))
				self.read_dict(content)
			else:
				self.read(fname)
		finally:
			self._this_dir = None

		# Includes of this file are read right after it, a later file overrides an earlier one
		includes = self.get('general', 'include', fallback='')
		if self.has_section('general'):
			self.remove_option('general', 'include')

		for pattern in re.split(r"\s+", includes):
			if len(pattern) == 0:
				continue
			for include in sorted(glob.glob(os.path.expandvars(pattern))):
				include = os.path.abspath(include)
				if include in self._included:
					L.warning("Config file '{}' can be included only once, skipping".format(include))
					continue
				self._read_file(include)


class _Interpolation(configparser.ExtendedInterpolation):
	"""
	`${section:option}` references plus environment variables;
	`${THIS_DIR}` is the directory of the file being read.
	"""

	def before_read(self, parser, section, option, value):
		if '$' in value:
			this_dir = getattr(parser, "_this_dir", None)
			if this_dir is not None:
				value = value.replace("${THIS_DIR}", this_dir)
			value = os.path.expandvars(value)
		return super().before_read(parser, section, option, value)


Config = ConfigParser(interpolation=_Interpolation())
Config.add_defaults(ConfigParser._default_values)
"""
The global configuration.

```python
level = reqmon.Config['logging']['level']
```
"""


class Configurable(object):
	"""
	Object configured from `ConfigDefaults`, a section of the global `Config`
	and an explicit dictionary, later sources override earlier ones.

	```python
	class MonitoringConfig(reqmon.Configurable):

		ConfigDefaults = {
			'cpu_time': 'true',
		}

	config = MonitoringConfig("reqmon", config={'cpu_time': 'false'})
	config.Config.getboolean('cpu_time')
	```

	`ConfigDefaults` of base classes are merged, a subclass overrides its bases.
	"""

	ConfigDefaults: dict = {}


	def __init__(self, config_section_name: str, config: typing.Optional[dict] = None):
		self.Config = ConfigurableDict()

		for klass in reversed(inspect.getmro(self.__class__)):
			for key, value in klass.__dict__.get('ConfigDefaults', {}).items():
				if value is None:
					raise ValueError("None value not allowed in ConfigDefaults, found in '{}' '{}'".format(
						config_section_name, key
					))
				self.Config[key] = value

		if Config.has_section(config_section_name):
			self.Config.update(Config.items(config_section_name))

		if config is not None:
			self.Config.update(config)


class ConfigurableDict(collections.abc.MutableMapping):
	"""
	Configuration values of a `Configurable` with typed getters.
	"""

	def __init__(self):
		self._data = {}

	def __getitem__(self, key):
		return self._data[key]

	def __setitem__(self, key, value):
		self._data[key] = value

	def __delitem__(self, key):
		del self._data[key]

	def __iter__(self):
		return iter(self._data)

	def __len__(self):
		return len(self._data)


	def getboolean(self, key) -> bool:
		return utils.string_to_boolean(self._data[key])


	def getint(self, key) -> int:
		return int(self._data[key])


	def getmultiline(self, key) -> typing.List[str]:
		"""
		Values separated by commas, whitespace or put on separate lines.

		```ini
		[reqmon]
		displayed_counters:
			http
			sql
		```
		"""
		return [item for item in re.split(r"[\s,]+", self._data[key]) if len(item) > 0]


	def __repr__(self):
		return "<%s %r>" % (self.__class__.__name__, self._data)
