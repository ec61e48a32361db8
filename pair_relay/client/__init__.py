from .backoff import backoff_delay
from .orchestrator import RelayClient, open_relay_connection

__all__ = ["RelayClient", "backoff_delay", "open_relay_connection"]
