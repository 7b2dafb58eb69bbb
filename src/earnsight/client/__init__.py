"""Client side of the API gateway: resilient JSON client."""

from earnsight.client.api_client import ApiClient

__all__ = ["ApiClient"]
