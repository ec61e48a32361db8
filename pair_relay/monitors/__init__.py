from .status import StatusReporter, server_status, log_server_status
from .janitor import SessionJanitor
from .liveness import LivenessMonitor

__all__ = ["LivenessMonitor", "SessionJanitor", "StatusReporter", "log_server_status", "server_status"]
