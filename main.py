import argparse
import json

from icecream import ic

from core.abstract import App
from core.config import get_settings
from core.constants import USERS_ME


def main() -> None:
    ic.configureOutput(prefix="🍦 DEBUG | ")
    parser = argparse.ArgumentParser(description="Mathematico - API client / sandbox server")

    parser.add_argument(
        "--mode",
        "-m",
        choices=["client", "server"],
        default="client",
        help="Execution mode: 'client' or 'server' (default: client)",
    )
    parser.add_argument(
        "--method",
        choices=["GET", "POST", "PUT", "PATCH", "DELETE"],
        default="GET",
        help="HTTP method for client mode (default: GET)",
    )
    parser.add_argument("--path", default=USERS_ME, help=f"API path for client mode (default: {USERS_ME})")
    parser.add_argument("--data", help="JSON request body for client mode")
    parser.add_argument("--email", help="Log in with this email before the request")
    parser.add_argument("--password", help="Password used with --email")
    parser.add_argument("--debug", action="store_true", help="Print debug dumps")
    args = parser.parse_args()

    if not args.debug:
        ic.disable()

    settings = get_settings()
    app: App | None = None
    if args.mode == "client":
        from client.app import ClientApp

        app = ClientApp(
            settings,
            method=args.method,
            path=args.path,
            body=json.loads(args.data) if args.data else None,
            email=args.email,
            password=args.password,
        )
    elif args.mode == "server":
        from server.app import ServerApp

        app = ServerApp(settings)

    if app is not None:
        app.configure_logging()
        app.run()
        raise SystemExit(getattr(app, "exit_code", 0))


if __name__ == "__main__":
    main()
