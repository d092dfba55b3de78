from .middleware import monitoring_middleware_factory
from .handler import MonitoringWebHandler

__all__ = (
	'monitoring_middleware_factory',
	'MonitoringWebHandler',
)
