"""
dashboard_report.py: print a dashboard view as JSON

Usage:
  python dashboard_report.py --base http://127.0.0.1:8080 --token "$TOKEN" dashboard
  python dashboard_report.py --email ana@example.com --password "$PASSWORD" dashboard
  python dashboard_report.py --signup ana --email ana@example.com --password "$PASSWORD" dashboard
  python dashboard_report.py --token "$TOKEN" links --search docs --filter active --sort clicks
  python dashboard_report.py --token "$TOKEN" analytics --link promo --limit 20
  python dashboard_report.py --token "$TOKEN" analytics --link-id 7
"""
import argparse
import logging
import sys

from link_dashboard.auth.session import Session
from link_dashboard.config import settings
from link_dashboard.manager.dashboard_manager import DashboardManager
from link_dashboard.services.base import ServiceError
from link_dashboard.services.http_client import HTTPAuthService
from link_dashboard.services.service_factory import close_services, get_services


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Short-link dashboard reports")
    ap.add_argument("--base", default=settings.API_URL, help="link/log service base URL")
    ap.add_argument("--backend", default=None, help='"http" (default) or "memory"')
    ap.add_argument("--token", default=None, help="bearer token")
    ap.add_argument("--email", default=None, help="log in at --base instead of passing --token")
    ap.add_argument("--password", default="")
    ap.add_argument("--signup", metavar="USERNAME", default=None,
                    help="register USERNAME with --email/--password instead of logging in")
    ap.add_argument("--timeout", type=float, default=settings.TIMEOUT)
    ap.add_argument("-v", "--verbose", action="store_true")

    views = ap.add_subparsers(dest="view", required=True)
    views.add_parser("dashboard", help="summary cards")

    links = views.add_parser("links", help="links list")
    links.add_argument("--search", default="")
    links.add_argument("--filter", choices=("all", "active"), default="all")
    links.add_argument("--sort", choices=("recent", "clicks"), default="recent")

    analytics = views.add_parser("analytics", help="access-log analytics")
    analytics.add_argument("--link", default="", help="slug substring")
    analytics.add_argument("--link-id", type=int, default=None, help="only this link's logs")
    analytics.add_argument("--limit", type=int, default=settings.LOG_LIMIT)
    return ap


def _authenticate(args, session: Session) -> None:
    with HTTPAuthService(base_url=args.base, timeout=args.timeout) as auth:
        if args.signup:
            auth.signup(session, args.signup, args.email, args.password)
        else:
            auth.login(session, args.email, args.password)


def main(argv=None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)

    session = Session(args.token)
    if args.email:
        try:
            _authenticate(args, session)
        except ServiceError as exc:
            print(f"Authentication failed: {exc.message}", file=sys.stderr)
            return 1

    backend = (args.backend or settings.BACKEND).lower()
    kwargs = {"base_url": args.base, "timeout": args.timeout} if backend == "http" else {}
    link_service, log_service = get_services(backend, **kwargs)
    manager = DashboardManager(link_service, log_service, session)

    try:
        if args.view == "dashboard":
            report = manager.dashboard_report()
        elif args.view == "links":
            report = manager.links_report(args.search, args.filter, args.sort)
        else:
            report = manager.analytics_report(args.link, args.limit, args.link_id)
    finally:
        close_services(link_service, log_service)

    print(report.model_dump_json(indent=2))
    return 1 if report.errors else 0


if __name__ == "__main__":
    sys.exit(main())
