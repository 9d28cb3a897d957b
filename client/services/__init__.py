from client.services.auth import AuthService

__all__ = ["AuthService"]
