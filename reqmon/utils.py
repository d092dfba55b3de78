import configparser


def string_to_boolean(value) -> bool:
	"""
	Convert "true"/"false", "yes"/"no", "on"/"off" or "1"/"0" into bool.
	"""
	if isinstance(value, bool):
		return value
	try:
		return configparser.ConfigParser.BOOLEAN_STATES[value.lower()]
	except KeyError:
		raise ValueError("Not a boolean: {}".format(value))


def strip_query_string(path: str) -> str:
	"""
	Return the `path` without the query string part (everything from the first `?`).
	"""
	return path.split('?', 1)[0]
