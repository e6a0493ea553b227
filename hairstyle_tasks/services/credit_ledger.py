"""Credit Ledger - баланс кредитов пользователей.

Redis Schema:
    credits:{user_id}        -> String (integer balance)
    credits:log:{user_id}    -> List (receipts, orjson)

Возвратов за неуспешные задачи нет: кредиты списываются при создании пакета.
"""

import asyncio
from typing import Protocol

import orjson
from redis.asyncio import Redis
from redis.exceptions import WatchError

from hairstyle_tasks.models import Receipt
from hairstyle_tasks.shared.errors import InsufficientCreditsError, LedgerConflictError
from hairstyle_tasks.shared.logging import get_logger

logger = get_logger()

MAX_TRANSACTION_ATTEMPTS = 5


class CreditLedger(Protocol):
    """Контракт учёта кредитов."""

    async def debit(self, user_id: str, amount: int) -> Receipt:
        """Списать кредиты.

        Raises:
            InsufficientCreditsError: Баланс меньше amount, ничего не списано

        """
        ...

    async def grant(self, user_id: str, amount: int, note: str | None = None) -> Receipt:
        """Начислить кредиты."""
        ...

    async def balance(self, user_id: str) -> int:
        """Текущий баланс."""
        ...


def _check_amount(amount: int) -> None:
    if amount <= 0:
        msg = f"Сумма должна быть положительной, получено: {amount}"
        raise ValueError(msg)


class RedisCreditLedger:
    """Ledger на Redis с optimistic locking (WATCH/MULTI)."""

    def __init__(self, redis_client: Redis) -> None:
        """Инициализировать ledger.

        Args:
            redis_client: Async Redis client

        """
        self.redis = redis_client

    @staticmethod
    def _balance_key(user_id: str) -> str:
        return f"credits:{user_id}"

    @staticmethod
    def _log_key(user_id: str) -> str:
        return f"credits:log:{user_id}"

    async def balance(self, user_id: str) -> int:
        """Текущий баланс (0 для неизвестного пользователя)."""
        value = await self.redis.get(self._balance_key(user_id))
        return int(value) if value else 0

    async def debit(self, user_id: str, amount: int) -> Receipt:
        """Атомарно списать кредиты, если баланса хватает.

        Args:
            user_id: ID пользователя
            amount: Сколько списать

        Returns:
            Receipt списания

        Raises:
            InsufficientCreditsError: Баланса не хватает
            LedgerConflictError: Баланс менялся параллельно все попытки подряд

        """
        _check_amount(amount)
        key = self._balance_key(user_id)

        async with self.redis.pipeline(transaction=True) as pipe:
            for _ in range(MAX_TRANSACTION_ATTEMPTS):
                try:
                    await pipe.watch(key)
                    raw = await pipe.get(key)
                    balance = int(raw) if raw else 0

                    if balance < amount:
                        await pipe.unwatch()
                        logger.info("Недостаточно кредитов", user_id=user_id, required=amount, balance=balance)
                        raise InsufficientCreditsError(user_id, amount, balance)

                    receipt = Receipt(user_id=user_id, kind="debit", amount=amount, balance_after=balance - amount)
                    pipe.multi()
                    pipe.decrby(key, amount)
                    pipe.rpush(self._log_key(user_id), orjson.dumps(receipt.model_dump(mode="json")))
                    await pipe.execute()

                    logger.info("Кредиты списаны", user_id=user_id, amount=amount, balance_after=receipt.balance_after)
                    return receipt
                except WatchError:
                    logger.debug("Баланс изменился во время списания, повтор", user_id=user_id)
                    continue

        raise LedgerConflictError(details={"context": {"user_id": user_id}})

    async def grant(self, user_id: str, amount: int, note: str | None = None) -> Receipt:
        """Начислить кредиты (ручное пополнение)."""
        _check_amount(amount)

        balance_after = await self.redis.incrby(self._balance_key(user_id), amount)
        receipt = Receipt(user_id=user_id, kind="grant", amount=amount, balance_after=balance_after, note=note)
        await self.redis.rpush(self._log_key(user_id), orjson.dumps(receipt.model_dump(mode="json")))

        logger.info("Кредиты начислены", user_id=user_id, amount=amount, balance_after=balance_after, note=note)
        return receipt


class InMemoryCreditLedger:
    """Ledger в памяти процесса (тесты, локальный запуск)."""

    def __init__(self, balances: dict[str, int] | None = None) -> None:
        self._balances: dict[str, int] = dict(balances or {})
        self._lock = asyncio.Lock()
        self.receipts: list[Receipt] = []

    async def balance(self, user_id: str) -> int:
        return self._balances.get(user_id, 0)

    async def debit(self, user_id: str, amount: int) -> Receipt:
        _check_amount(amount)
        async with self._lock:
            balance = self._balances.get(user_id, 0)
            if balance < amount:
                raise InsufficientCreditsError(user_id, amount, balance)

            self._balances[user_id] = balance - amount
            receipt = Receipt(user_id=user_id, kind="debit", amount=amount, balance_after=balance - amount)
            self.receipts.append(receipt)
            return receipt

    async def grant(self, user_id: str, amount: int, note: str | None = None) -> Receipt:
        _check_amount(amount)
        async with self._lock:
            balance_after = self._balances.get(user_id, 0) + amount
            self._balances[user_id] = balance_after
            receipt = Receipt(user_id=user_id, kind="grant", amount=amount, balance_after=balance_after, note=note)
            self.receipts.append(receipt)
            return receipt
