"""잔고 및 거래 기록 모델"""
from tortoise import fields
from tortoise.models import Model


class Balance(Model):
    """
    유저 잔고 (길드 단위)

    현금(cash)은 강도의 대상, 은행(bank)은 해킹의 대상입니다.
    벌금으로 인해 현금은 음수가 될 수 있습니다.
    """

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    """길드 ID"""

    user_id = fields.BigIntField()
    """Discord 유저 ID"""

    cash = fields.BigIntField(default=0)
    """보유 현금 (음수 가능)"""

    bank = fields.BigIntField(default=0)
    """은행 잔고"""

    @property
    def total(self) -> int:
        return self.cash + self.bank

    class Meta:
        table = "balance"
        unique_together = (("guild_id", "user_id"),)


class LedgerTransaction(Model):
    """
    잔고 변경 감사 기록

    모든 잔고 변경은 사유(reason)와 함께 같은 트랜잭션 안에서 기록됩니다.
    """

    id = fields.IntField(pk=True)

    guild_id = fields.BigIntField()
    user_id = fields.BigIntField()

    account = fields.CharField(max_length=8)
    """변경된 계좌: cash, bank"""

    delta = fields.BigIntField()
    """변경량 (증가는 양수, 감소는 음수)"""

    reason = fields.CharField(max_length=100)
    """변경 사유 (예: rob_success, hack_fine)"""

    created_at = fields.FloatField()
    """기록 시각 (epoch 초)"""

    class Meta:
        table = "ledger_transaction"
        indexes = [("guild_id", "user_id")]
