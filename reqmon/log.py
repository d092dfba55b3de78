import datetime
import logging
import logging.handlers
import sys

from .config import Config

# Non-error/warning type of message that is visible without -v flag
LOG_NOTICE = 25
logging.addLevelName(LOG_NOTICE, "NOTICE")


class Logging(object):
	"""
	Root logger set up from the `[logging]`, `[logging:console]` and `[logging:file]` sections.

	An application that configures logging itself does not need it,
	reqmon only emits records through standard loggers.
	"""

	def __init__(self, stream=None):
		self.RootLogger = logging.getLogger()
		self.ConsoleHandler = None
		self.FileHandler = None

		if self.RootLogger.hasHandlers():
			self.RootLogger.warning("Logging seems to be already configured, reqmon does not add its handlers")
		else:
			self.ConsoleHandler = self._create_handler(
				"logging:console",
				logging.StreamHandler(stream=stream if stream is not None else sys.stderr)
			)

			path = Config.get("logging:file", "path")
			if len(path) > 0:
				self.FileHandler = self._create_handler("logging:file", logging.handlers.RotatingFileHandler(
					path,
					maxBytes=Config.getint("logging:file", "backup_max_bytes"),
					backupCount=Config.getint("logging:file", "backup_count"),
				))

		if Config.getboolean("logging", "verbose"):
			self.RootLogger.setLevel(logging.DEBUG)
		else:
			self.RootLogger.setLevel(Config.get("logging", "level"))


	def _create_handler(self, section, handler):
		handler.setLevel(logging.DEBUG)
		handler.setFormatter(StructuredDataFormatter(
			fmt=Config.get(section, "format", raw=True),
			datefmt=Config.get(section, "datefmt", raw=True),
			sd_id=Config.get("logging", "sd_id"),
		))
		self.RootLogger.addHandler(handler)
		return handler


	def rotate(self):
		if self.FileHandler is None:
			return
		self.RootLogger.log(LOG_NOTICE, "Rotating logs")
		self.FileHandler.doRollover()


	def close(self):
		for handler in (self.ConsoleHandler, self.FileHandler):
			if handler is not None:
				self.RootLogger.removeHandler(handler)
				handler.close()


class _StructuredDataLogger(logging.Logger):
	'''
	Logger accepting a `struct_data` dictionary, e.g. `L.info("Counter cleared", struct_data={'counter': 'sql'})`.
	'''

	def _log(self, level, msg, args, exc_info=None, struct_data=None, extra=None, stack_info=False, stacklevel=1):
		if struct_data is not None:
			extra = dict(extra) if extra is not None else {}
			extra['_struct_data'] = struct_data
		super()._log(level, msg, args, exc_info=exc_info, extra=extra, stack_info=stack_info, stacklevel=stacklevel)


logging.setLoggerClass(_StructuredDataLogger)


class StructuredDataFormatter(logging.Formatter):
	'''
	Formatter providing `%(struct_data)s` (RFC 5424 structured data element, empty without data)
	and `%(priority)s` (syslog priority of the record).
	'''

	# (highest level, syslog severity)
	Severities = (
		(logging.INFO, 6),  # Informational
		(LOG_NOTICE, 5),  # Notice
		(logging.WARNING, 4),  # Warning
		(logging.ERROR, 3),  # Error
		(logging.CRITICAL, 2),  # Critical
	)

	def __init__(self, facility=16, fmt=None, datefmt=None, style='%', sd_id='sd'):
		super().__init__(fmt, datefmt, style)
		self.SD_id = sd_id
		self.Facility = facility


	def format(self, record):
		record.struct_data = self.render_struct_data(getattr(record, "_struct_data", None))
		record.priority = (self.Facility << 3) + self.get_severity(record.levelno)
		return super().format(record)


	def get_severity(self, levelno):
		for level, severity in self.Severities:
			if levelno <= level:
				return severity
		return 1  # Alert


	def formatTime(self, record, datefmt=None):
		created = datetime.datetime.fromtimestamp(record.created)
		if datefmt is not None:
			return created.strftime(datefmt)
		return "{}.{:03d}".format(created.strftime("%Y-%m-%d %H:%M:%S"), int(record.msecs))


	def render_struct_data(self, struct_data):
		if struct_data is None:
			return ""
		params = " ".join('{}="{}"'.format(key, value) for key, value in struct_data.items())
		return "[{} {}] ".format(self.SD_id, params)
