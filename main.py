"""Hairstyle Tasks - Entry Point.

Запускает FastAPI приложение через uvicorn.

Usage:
    python main.py                                  # сервер
    python main.py grant-credits <user_id> <amount> [note]
"""

import argparse
import asyncio
import sys

import uvicorn
from redis.asyncio import Redis

from hairstyle_tasks.core.config import settings
from hairstyle_tasks.services import RedisCreditLedger
from hairstyle_tasks.shared.logging import get_logger, setup_logging

logger = get_logger()


def serve() -> None:
    """Запустить HTTP сервер."""
    uvicorn.run(
        "hairstyle_tasks.app:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.server.reload,
        log_level=settings.log.level.lower(),
        access_log=settings.debug,
    )


async def grant_credits(user_id: str, amount: int, note: str | None = None) -> int:
    """Начислить кредиты пользователю напрямую в Redis.

    Returns:
        Баланс после начисления

    """
    redis_client = Redis.from_url(settings.redis.url, decode_responses=False)
    try:
        receipt = await RedisCreditLedger(redis_client).grant(user_id, amount, note)
    finally:
        await redis_client.aclose()
    return receipt.balance_after


def build_parser() -> argparse.ArgumentParser:
    """CLI аргументы."""
    parser = argparse.ArgumentParser(prog="hairstyle-tasks", description=settings.app_name)
    commands = parser.add_subparsers(dest="command")

    commands.add_parser("serve", help="Запустить HTTP сервер (по умолчанию)")

    grant = commands.add_parser("grant-credits", help="Начислить кредиты пользователю")
    grant.add_argument("user_id")
    grant.add_argument("amount", type=int)
    grant.add_argument("note", nargs="?", default=None)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Точка входа CLI."""
    args = build_parser().parse_args(argv)

    if args.command == "grant-credits":
        setup_logging(settings.log, debug=settings.debug)
        if args.amount <= 0:
            logger.error("Количество кредитов должно быть положительным", amount=args.amount)
            return 2

        balance = asyncio.run(grant_credits(args.user_id, args.amount, args.note))
        print(f"{args.user_id}: +{args.amount}, баланс {balance}")
        return 0

    serve()
    return 0


if __name__ == "__main__":
    sys.exit(main())
