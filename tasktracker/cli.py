"""
Operational commands: ``tasktracker serve|init-db|seed-admin|reap-sessions``.
"""

import argparse
import sys

import uvicorn
from sqlmodel import Session

from .core.config import settings
from .core.logger import setup_logger
from .db.session import create_db_engine, init_db
from .services.bootstrap import ensure_seed_admin, run_bootstrap
from .services.sessions import SessionManager

logger = setup_logger("cli")


def serve(args: argparse.Namespace) -> int:
    host = args.host or settings.HOST
    port = args.port or settings.PORT
    logger.info(f"Starting {settings.PROJECT_NAME} on {host}:{port}")
    uvicorn.run("tasktracker.main:app", host=host, port=port, reload=args.reload)
    return 0


def init_database(args: argparse.Namespace) -> int:
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    try:
        init_db(engine)
        run_bootstrap(engine, settings)
    finally:
        engine.dispose()
    print("Database initialized.")
    return 0


def seed_admin(args: argparse.Namespace) -> int:
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    try:
        with Session(engine, expire_on_commit=False) as session:
            admin = ensure_seed_admin(session, settings)
    finally:
        engine.dispose()
    print(f"Active admin: {admin.email} (id {admin.id})")
    return 0


def reap_sessions(args: argparse.Namespace) -> int:
    engine = create_db_engine(settings.DATABASE_URL, echo=settings.DB_ECHO)
    try:
        with Session(engine) as session:
            reaped = SessionManager(session, ttl_days=settings.AUTH_SESSION_DAYS).reap_expired_sessions()
    finally:
        engine.dispose()
    print(f"Removed {reaped} expired sessions.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tasktracker", description=f"{settings.PROJECT_NAME} management utility"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the API server with uvicorn")
    serve_parser.add_argument("--host", type=str, default=None, help=f"Defaults to {settings.HOST}")
    serve_parser.add_argument("--port", type=int, default=None, help=f"Defaults to {settings.PORT}")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")
    serve_parser.set_defaults(handler=serve)

    subparsers.add_parser(
        "init-db", help="Create tables, seed default statuses and the admin account"
    ).set_defaults(handler=init_database)
    subparsers.add_parser(
        "seed-admin", help="Ensure at least one active admin exists"
    ).set_defaults(handler=seed_admin)
    subparsers.add_parser(
        "reap-sessions", help="Delete expired session tokens"
    ).set_defaults(handler=reap_sessions)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    return args.handler(args)


if __name__ == "__main__":
    sys.exit(main())
