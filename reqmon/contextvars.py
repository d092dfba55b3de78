import contextvars

# Contains the innermost reqmon.counter.CounterRequestContext of the current task or thread
CounterContext = contextvars.ContextVar("CounterContext", default=None)
