"""Tests for ChallengeService"""

import threading
from decimal import Decimal

import pytest

from src.business.challenge.config.challenge_config import ChallengeConfig
from src.business.challenge.models.account import AccountStatus
from src.business.challenge.models.errors import (
    AccountBreached,
    AccountExists,
    AccountNotFound,
    BelowMinimumWithdrawal,
    InvalidRequest,
    InvalidTradeInput,
    KycRequired,
    NotEligible,
    ProfitTargetNotMet,
)
from src.business.challenge.models.rules import ChallengeSettings, Phase
from src.business.challenge.models.withdrawal import BankDetails
from src.business.challenge.service import ChallengeService
from src.business.challenge.settings_store import SettingsStore
from src.business.challenge.store import AccountStore


@pytest.fixture
def service(tmp_path, catalog) -> ChallengeService:
    settings = SettingsStore(ChallengeSettings(catalog=catalog))
    return ChallengeService(AccountStore(tmp_path), settings)


@pytest.fixture
def active(service) -> str:
    """已注册并付款的交易员"""
    service.register("T001", name="Alice", email="alice@example.com")
    service.confirm_payment("T001")
    return "T001"


class TestRegistration:
    """Tests for register / confirm_payment / set_kyc_status"""

    def test_register(self, service):
        account = service.register("T001", name="Alice", email="alice@example.com")

        assert account.phase == Phase.EVAL1
        assert account.status == AccountStatus.ACTIVE
        assert account.initial_amount == Decimal("0")
        assert service.get_account("T001").email == "alice@example.com"

    def test_register_duplicate(self, service):
        service.register("T001", name="Alice", email="alice@example.com")

        with pytest.raises(AccountExists):
            service.register("T001", name="Other", email="other@example.com")

    def test_register_missing_fields(self, service):
        with pytest.raises(InvalidRequest):
            service.register("T001", name="", email="alice@example.com")

    def test_payment_activates_eval1(self, service, active):
        account = service.get_account(active)

        assert account.initial_amount == Decimal("50000")
        assert account.account_balance == Decimal("50000")

    def test_payment_custom_amount(self, service):
        service.register("T002", name="Bob", email="bob@example.com")

        account = service.confirm_payment("T002", amount="25000")

        assert account.initial_amount == Decimal("25000")

    def test_payment_rejects_non_positive_amount(self, service):
        service.register("T002", name="Bob", email="bob@example.com")

        with pytest.raises(InvalidRequest):
            service.confirm_payment("T002", amount="0")

    def test_payment_restarts_breached_challenge(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=-6000))
        assert service.get_account(active).is_breached

        account = service.confirm_payment(active)

        assert account.status == AccountStatus.ACTIVE
        assert account.breach_reason is None
        assert account.trades == []
        assert account.peak_drawdown == Decimal("0")

    def test_unknown_trader(self, service, make_trade):
        with pytest.raises(AccountNotFound):
            service.record_trade("ghost", make_trade(pnl=100))
        with pytest.raises(AccountNotFound):
            service.summary("ghost")

    def test_kyc_status(self, service, active):
        assert service.set_kyc_status(active, True).kyc_verified
        assert service.get_account(active).kyc_verified


class TestTradingFlow:
    """Tests for record_trade / advance_phase through the service"""

    def test_trade_before_payment_rejected(self, service, make_trade):
        service.register("T002", name="Bob", email="bob@example.com")

        with pytest.raises(NotEligible):
            service.record_trade("T002", make_trade(pnl=100))

    def test_trade_is_persisted(self, service, active, make_trade):
        trade = service.record_trade(active, make_trade(pnl=750))

        account = service.get_account(active)
        assert account.trades == [trade]
        assert account.cumulative_pnl == Decimal("750")

    def test_breach_is_persisted(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=-5001))

        account = service.get_account(active)
        assert account.status == AccountStatus.BREACHED
        assert account.breach_reason == "Loss limit exceeded"

        with pytest.raises(AccountBreached):
            service.record_trade(active, make_trade(pnl=100))

    def test_failed_trade_leaves_store_unchanged(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=300))
        before = service.get_account(active).to_dict()

        with pytest.raises(InvalidTradeInput):
            service.record_trade(active, make_trade(pnl=100, symbol=""))

        assert service.get_account(active).to_dict() == before

    def test_failed_advance_leaves_store_unchanged(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=1000))
        before = service.get_account(active).to_dict()

        with pytest.raises(ProfitTargetNotMet):
            service.advance_phase(active)

        assert service.get_account(active).to_dict() == before

    def test_check_breach(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=-1000))

        result = service.check_breach(active)

        assert not result.breached
        assert result.limit == Decimal("5000")

    def test_full_journey_to_withdrawal(self, service, active, make_trade):
        for _ in range(5):
            service.record_trade(active, make_trade(pnl=1000))
        assert service.advance_phase(active).new_phase == Phase.EVAL2

        for _ in range(5):
            service.record_trade(active, make_trade(pnl=1000))
        with pytest.raises(KycRequired):
            service.advance_phase(active)

        service.set_kyc_status(active, True)
        result = service.advance_phase(active)
        assert result.new_phase == Phase.FUNDED
        assert result.initial_amount == Decimal("100000")

        service.record_trade(active, make_trade(pnl=10000))
        withdrawal = service.request_withdrawal(
            active, BankDetails(bank_holder="Alice", bank_account="987654")
        )

        assert withdrawal.amount == Decimal("8000")
        account = service.get_account(active)
        assert account.withdrawal_status == "processing"
        assert account.last_withdrawal == withdrawal
        assert account.cumulative_pnl == Decimal("10000")


class TestWithdrawalThroughService:
    """Tests for request_withdrawal through the service"""

    def test_not_funded(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=8000))

        with pytest.raises(NotEligible):
            service.request_withdrawal(active)

    def test_below_minimum_not_recorded(self, service, funded_account):
        funded_account.cumulative_pnl = Decimal("1000")
        service._store.save(funded_account)

        with pytest.raises(BelowMinimumWithdrawal):
            service.request_withdrawal("T100")

        assert service.get_account("T100").withdrawal_status == "none"

    def test_uses_current_admin_settings(self, service, funded_account):
        funded_account.cumulative_pnl = Decimal("10000")
        service._store.save(funded_account)

        service.settings.update_admin({"commission_pct": "30"})

        assert service.request_withdrawal("T100").amount == Decimal("7000")


class TestSummary:
    """Tests for summary"""

    def test_summary_fields(self, service, active, make_trade):
        service.record_trade(active, make_trade(pnl=-1500))
        service.record_trade(active, make_trade(pnl=2500))

        summary = service.summary(active)

        assert summary["phase"] == "eval1"
        assert summary["phase_name"] == "Evaluation Phase 1"
        assert summary["status"] == "active"
        assert summary["account_balance"] == "51000"
        assert summary["profit_percent"] == "2.00"
        assert summary["peak_drawdown"] == "-1500"
        assert summary["loss_limit"] == "5000.00"
        assert summary["loss_remaining"] == "3500.00"
        assert summary["trades"] == 2
        assert summary["min_trades"] == 5

    def test_list_accounts(self, service, active):
        service.register("T002", name="Bob", email="bob@example.com")

        assert {a.trader_id for a in service.list_accounts()} == {"T001", "T002"}


class TestConcurrency:
    """Operations on the same account are serialized"""

    def test_concurrent_trades_are_all_recorded(self, service, active, make_trade):
        errors: list[Exception] = []

        def worker():
            try:
                for _ in range(10):
                    service.record_trade(active, make_trade(pnl=10))
            except Exception as e:  # noqa: BLE001
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        account = service.get_account(active)
        assert account.trade_count == 40
        assert account.cumulative_pnl == Decimal("400")

    def test_reads_during_writes_see_complete_documents(
        self, service, active, make_trade, tmp_path
    ):
        errors: list[Exception] = []
        done = threading.Event()

        def writer():
            try:
                for _ in range(100):
                    service.record_trade(active, make_trade(pnl=1))
            finally:
                done.set()

        def reader():
            while not done.is_set():
                try:
                    service.get_account(active)
                    service.summary(active)
                    service.list_accounts()
                except Exception as e:  # noqa: BLE001
                    errors.append(e)

        threads = [threading.Thread(target=writer)] + [
            threading.Thread(target=reader) for _ in range(2)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert service.get_account(active).trade_count == 100
        assert list(tmp_path.rglob("*.tmp")) == []

    def test_store_reader_without_service_lock(self, tmp_path, account):
        store = AccountStore(tmp_path)
        store.save(account)
        errors: list[Exception] = []
        done = threading.Event()

        def writer():
            try:
                for i in range(200):
                    account.name = f"Alice {i}"
                    store.save(account)
            finally:
                done.set()

        def reader():
            while not done.is_set():
                try:
                    store.get(account.trader_id)
                except Exception as e:  # noqa: BLE001
                    errors.append(e)

        threads = [threading.Thread(target=writer), threading.Thread(target=reader)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert store.get(account.trader_id).name == "Alice 199"

    def test_from_config(self, tmp_path):
        config = ChallengeConfig(storage_path=str(tmp_path))

        service = ChallengeService.from_config(config)
        service.register("T009", name="Eve", email="eve@example.com")

        assert (tmp_path / "accounts" / "T009.json").exists()
