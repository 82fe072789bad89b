"""
Ledger Repository

잔고 변경 프리미티브입니다.
모든 변경은 F() 표현식을 사용한 UPDATE로 처리하며, 애플리케이션 레벨의 읽기-수정-쓰기를 하지 않습니다.
변경마다 사유(reason)가 LedgerTransaction으로 같은 트랜잭션 안에서 기록됩니다.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable

from tortoise.expressions import F
from tortoise.transactions import in_transaction

from models.balance import Balance, LedgerTransaction

logger = logging.getLogger(__name__)

CASH = "cash"
BANK = "bank"


@dataclass(frozen=True)
class LedgerBalance:
    """잔고 스냅샷"""
    cash: int
    bank: int

    @property
    def total(self) -> int:
        return self.cash + self.bank


class Ledger:
    """
    길드 단위 잔고 관리

    강도/해킹 엔진은 이 인터페이스만 사용합니다.
    force_debit/apply_fine은 잔고를 음수로 만들 수 있습니다.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock

    async def get_balance(self, guild_id: int, user_id: int) -> LedgerBalance:
        row = await Balance.get_or_none(guild_id=guild_id, user_id=user_id)
        if row is None:
            return LedgerBalance(cash=0, bank=0)
        return LedgerBalance(cash=row.cash, bank=row.bank)

    async def credit(
        self, guild_id: int, user_id: int, amount: int, reason: str, account: str = CASH
    ) -> None:
        """
        입금

        Args:
            guild_id: 길드 ID
            user_id: 유저 ID
            amount: 금액 (0 이하이면 무시)
            reason: 감사용 사유
            account: cash 또는 bank
        """
        if amount <= 0:
            return
        async with in_transaction() as conn:
            await self._ensure_row(guild_id, user_id, conn)
            await Balance.filter(guild_id=guild_id, user_id=user_id).using_db(conn).update(
                **{account: F(account) + amount}
            )
            await self._record(conn, guild_id, user_id, account, amount, reason)

    async def debit(
        self, guild_id: int, user_id: int, amount: int, reason: str, account: str = CASH
    ) -> bool:
        """
        잔액이 충분할 때만 출금 (자발적 지출용)

        Returns:
            출금 성공 여부
        """
        if amount <= 0:
            return True
        async with in_transaction() as conn:
            updated = await Balance.filter(
                guild_id=guild_id, user_id=user_id, **{f"{account}__gte": amount}
            ).using_db(conn).update(**{account: F(account) - amount})
            if not updated:
                return False
            await self._record(conn, guild_id, user_id, account, -amount, reason)
        return True

    async def force_debit(
        self, guild_id: int, user_id: int, amount: int, reason: str, account: str = CASH
    ) -> None:
        """잔액과 관계없이 출금 (음수 잔고 허용)"""
        if amount <= 0:
            return
        async with in_transaction() as conn:
            await self._ensure_row(guild_id, user_id, conn)
            await Balance.filter(guild_id=guild_id, user_id=user_id).using_db(conn).update(
                **{account: F(account) - amount}
            )
            await self._record(conn, guild_id, user_id, account, -amount, reason)

    async def apply_fine(self, guild_id: int, user_id: int, amount: int, reason: str) -> None:
        """벌금 부과 (현금에서 차감, 음수 허용)"""
        await self.force_debit(guild_id, user_id, amount, reason, account=CASH)

    async def debit_from_total(self, guild_id: int, user_id: int, amount: int, reason: str) -> bool:
        """
        현금 우선, 부족분은 은행에서 출금

        음수 현금은 0으로 간주합니다.

        Returns:
            총자산이 충분해 출금했는지 여부
        """
        if amount <= 0:
            return True
        async with in_transaction() as conn:
            row = await Balance.get_or_none(guild_id=guild_id, user_id=user_id, using_db=conn)
            if row is None:
                return False

            from_cash = min(max(0, row.cash), amount)
            from_bank = amount - from_cash
            if from_bank > row.bank:
                return False

            guards = {"bank__gte": from_bank}
            if from_cash:
                guards["cash__gte"] = from_cash
            updated = await Balance.filter(
                guild_id=guild_id, user_id=user_id, **guards
            ).using_db(conn).update(cash=F("cash") - from_cash, bank=F("bank") - from_bank)
            if not updated:
                return False

            if from_cash:
                await self._record(conn, guild_id, user_id, CASH, -from_cash, reason)
            if from_bank:
                await self._record(conn, guild_id, user_id, BANK, -from_bank, reason)
        return True

    # =========================================================================
    # 내부
    # =========================================================================

    @staticmethod
    async def _ensure_row(guild_id: int, user_id: int, conn) -> None:
        await Balance.get_or_create(guild_id=guild_id, user_id=user_id, using_db=conn)

    async def _record(self, conn, guild_id: int, user_id: int, account: str, delta: int, reason: str) -> None:
        await LedgerTransaction.create(
            guild_id=guild_id,
            user_id=user_id,
            account=account,
            delta=delta,
            reason=reason,
            created_at=self._clock(),
            using_db=conn,
        )
        logger.debug(f"Ledger {account} {delta:+d} for user {user_id} in guild {guild_id} ({reason})")
