from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from client.api import APIClient


class ServiceBase:
    def __init__(self, api_client: "APIClient") -> None:
        self.api_client = api_client
