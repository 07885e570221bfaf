"""Command line entry point: ``python -m aliases``.

Flags override the environment before the application and its Redis pool
are imported.
"""
import argparse
import os
import sys

from aliases import __version__


def _host_port(value: str):
    host, sep, port = value.rpartition(":")
    if not sep or not port.isdigit():
        raise argparse.ArgumentTypeError(f"expected host:port, got '{value}'")
    return host or "0.0.0.0", int(port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="aliases", description="Alias generation service.")
    parser.add_argument("--http", type=_host_port, help="HTTP bind address (host:port).")
    parser.add_argument("--http.tls.key", dest="tls_key", help="TLS key file.")
    parser.add_argument("--http.tls.cert", dest="tls_cert", help="TLS certificate file.")
    parser.add_argument("--redis", type=_host_port, help="Redis address (host:port).")
    parser.add_argument("--redis.db", dest="redis_db", type=int, help="Redis database.")
    parser.add_argument("--redis.pass", dest="redis_pass", help="Redis password.")
    parser.add_argument("--log-level", dest="log_level", help="Logging level.")
    parser.add_argument("--version", action="store_true", help="Print the program version.")
    return parser


def apply_args(args: argparse.Namespace):
    overrides = {}
    if args.http:
        overrides["HTTP_HOST"], overrides["HTTP_PORT"] = args.http[0], str(args.http[1])
    if args.redis:
        overrides["REDIS_HOST"], overrides["REDIS_PORT"] = args.redis[0], str(args.redis[1])
    if args.redis_db is not None:
        overrides["REDIS_DB"] = str(args.redis_db)
    if args.redis_pass is not None:
        overrides["REDIS_PASSWORD"] = args.redis_pass
    if args.tls_key:
        overrides["TLS_KEY_FILE"] = args.tls_key
    if args.tls_cert:
        overrides["TLS_CERT_FILE"] = args.tls_cert
    if args.log_level:
        overrides["LOG_LEVEL"] = args.log_level
    os.environ.update(overrides)
    return overrides


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(__version__)
        return 0

    apply_args(args)

    import uvicorn
    from aliases.core.config import settings
    from aliases.main import app, logger

    tls = bool(settings.TLS_KEY_FILE and settings.TLS_CERT_FILE)
    logger.info(f"HTTP{'S' if tls else ''} listening on {settings.HTTP_HOST}:{settings.HTTP_PORT}")

    uvicorn.run(
        app,
        host=settings.HTTP_HOST,
        port=settings.HTTP_PORT,
        ssl_keyfile=settings.TLS_KEY_FILE if tls else None,
        ssl_certfile=settings.TLS_CERT_FILE if tls else None,
        log_config=None,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
