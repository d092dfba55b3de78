from .counter import Counter
from .request import CounterRequest, CounterRequestContext, CounterError, build_request_id
from .aggregation import CounterRequestAggregation
from .range import Period, Range

__all__ = (
	'Counter',
	'CounterRequest',
	'CounterRequestContext',
	'CounterError',
	'CounterRequestAggregation',
	'Period',
	'Range',
	'build_request_id',
)
