import datetime
import enum
import typing


class Period(enum.Enum):
	"""
	Named reporting periods, valued by their URL code and duration in seconds (None for the whole life of a counter).
	"""

	DAY = ("day", 86400)
	WEEK = ("week", 7 * 86400)
	MONTH = ("month", 31 * 86400)
	YEAR = ("year", 366 * 86400)
	ALL = ("all", None)

	def __init__(self, code, duration):
		self.Code = code
		self.Duration = duration


	@classmethod
	def from_code(cls, code: str) -> "Period":
		code = code.strip().lower()
		for period in cls:
			if period.Code == code:
				return period
		raise ValueError("Unknown period '{}'".format(code))


class Range(object):
	"""
	A reporting time window: a named period or a custom window between two dates.
	"""

	CUSTOM_PERIOD_SEPARATOR = '|'
	DATE_FORMAT = "%Y-%m-%d"

	def __init__(
		self, period: typing.Optional[Period] = None,
		start_date: typing.Optional[datetime.datetime] = None, end_date: typing.Optional[datetime.datetime] = None
	):
		if period is None and (start_date is None or end_date is None):
			raise ValueError("Range needs a period or both start and end dates")
		if period is not None and (start_date is not None or end_date is not None):
			raise ValueError("Range cannot have both a period and custom dates")
		if start_date is not None and start_date > end_date:
			raise ValueError("Range start '{}' is after its end '{}'".format(start_date, end_date))

		self.Period = period
		self.StartDate = start_date
		self.EndDate = end_date


	@classmethod
	def create_period_range(cls, period: Period) -> "Range":
		return cls(period=period)


	@classmethod
	def create_custom_range(cls, start_date: datetime.datetime, end_date: datetime.datetime) -> "Range":
		return cls(start_date=start_date, end_date=end_date)


	@classmethod
	def parse(cls, value: str) -> "Range":
		"""
		Parse a period code (e.g. `day`) or a custom range `YYYY-MM-DD|YYYY-MM-DD`.
		The custom end date is inclusive, it covers the whole day.
		"""
		if cls.CUSTOM_PERIOD_SEPARATOR not in value:
			return cls.create_period_range(Period.from_code(value))

		start, end = value.split(cls.CUSTOM_PERIOD_SEPARATOR, 1)
		try:
			start_date = datetime.datetime.strptime(start.strip(), cls.DATE_FORMAT)
			end_date = datetime.datetime.strptime(end.strip(), cls.DATE_FORMAT)
		except ValueError as e:
			raise ValueError("Invalid custom range '{}': {}".format(value, e))

		end_date = end_date + datetime.timedelta(days=1) - datetime.timedelta(microseconds=1)
		return cls.create_custom_range(start_date, end_date)


	def get_period(self) -> typing.Optional[Period]:
		return self.Period


	def get_start_date(self, now: typing.Optional[datetime.datetime] = None) -> typing.Optional[datetime.datetime]:
		if self.Period is None:
			return self.StartDate
		if self.Period.Duration is None:
			return None
		if now is None:
			now = datetime.datetime.now()
		return now - datetime.timedelta(seconds=self.Period.Duration)


	def get_end_date(self) -> typing.Optional[datetime.datetime]:
		"""
		The end of a custom window, None for a period, which ends now.
		"""
		return self.EndDate


	def get_value(self) -> str:
		if self.Period is not None:
			return self.Period.Code
		return "{}{}{}".format(
			self.StartDate.strftime(self.DATE_FORMAT),
			self.CUSTOM_PERIOD_SEPARATOR,
			self.EndDate.strftime(self.DATE_FORMAT),
		)


	def __repr__(self):
		return "<{} {}>".format(self.__class__.__name__, self.get_value())
