import argparse
import logging
import sys
from datetime import timedelta
from pathlib import Path

from postlab.adapters.auth.jwt_identity import JWTIdentityResolver
from postlab.adapters.sqlite.migrator import SQLiteMigrator
from postlab.adapters.sqlite.repos import SQLitePostRepo
from postlab.api.deps import Settings
from postlab.components.posts import SearchPostsInput, run_search
from postlab.domain.entities import Identity
from postlab.domain.errors import PostError
from postlab.rules.loader import load_rules

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("cli")


def handle_migrate(settings: Settings, args: argparse.Namespace) -> None:
    migrator = SQLiteMigrator(settings.db_path)
    if args.dry_run:
        for migration in migrator.pending():
            print(f"Pending: {migration.filename}")
        return
    applied = migrator.run_migrations()
    print(f"Applied {len(applied)} migration(s) to {settings.db_path}.")


def handle_issue_token(settings: Settings, args: argparse.Namespace) -> None:
    identity = Identity(id=args.id, email=args.email, fullname=args.fullname)
    resolver = JWTIdentityResolver(secret_key=settings.secret_key)
    print(resolver.issue(identity, ttl=timedelta(minutes=args.ttl)))


def handle_list(settings: Settings, args: argparse.Namespace) -> None:
    posts = run_search(SearchPostsInput(filter=args.filter), repo=SQLitePostRepo(settings.db_path))
    for post in posts:
        print(f"{post.created_at:%Y-%m-%d}  {post.slug}  ({len(post.likes)} likes)  {post.email}")
    print(f"{len(posts)} post(s).")


def handle_check_rules(settings: Settings, args: argparse.Namespace) -> None:
    path = Path(args.path) if args.path else settings.rules_path
    rules = load_rules(path)
    print(f"Rules OK: {rules.project.slug} v{rules.project.rules_version}")


def handle_serve(settings: Settings, args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("postlab.api.main:app", host=args.host, port=args.port, reload=args.reload)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Postlab CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    migrate_parser.add_argument("--dry-run", action="store_true", help="Only list pending files")

    token_parser = subparsers.add_parser("issue-token", help="Print a bearer token for an identity")
    token_parser.add_argument("--id", required=True, help="User id (token subject)")
    token_parser.add_argument("--email", required=True)
    token_parser.add_argument("--fullname", default="")
    token_parser.add_argument("--ttl", type=int, default=60 * 24, help="Lifetime in minutes")

    list_parser = subparsers.add_parser("list", help="List posts, newest first")
    list_parser.add_argument("--filter", default=None, help="Title/description substring")

    rules_parser = subparsers.add_parser("check-rules", help="Validate a rules file")
    rules_parser.add_argument("path", nargs="?", default=None)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument("--host", default="127.0.0.1")
    serve_parser.add_argument("--port", type=int, default=8000)
    serve_parser.add_argument("--reload", action="store_true")

    args = parser.parse_args(argv)
    settings = Settings()

    handlers = {
        "migrate": handle_migrate,
        "issue-token": handle_issue_token,
        "list": handle_list,
        "check-rules": handle_check_rules,
        "serve": handle_serve,
    }

    try:
        handlers[args.command](settings, args)
    except (PostError, FileNotFoundError, ValueError, RuntimeError) as e:
        logger.error(f"{args.command} failed: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
