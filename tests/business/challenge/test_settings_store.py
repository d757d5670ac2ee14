"""Tests for SettingsStore"""

from decimal import Decimal

import pytest

from src.business.challenge.models.errors import ConfigError
from src.business.challenge.models.rules import (
    ChallengeSettings,
    FundedCapitalPolicy,
    Phase,
)
from src.business.challenge.settings_store import SettingsStore


class TestSettingsStore:
    """Tests for copy-and-swap settings updates"""

    def test_default_snapshot(self):
        store = SettingsStore()
        assert store.snapshot() == ChallengeSettings()

    def test_update_admin_creates_new_snapshot(self):
        store = SettingsStore()
        before = store.snapshot()

        after = store.update_admin({"commission_pct": "25", "company_name": None})

        assert after.admin.commission_pct == Decimal("25")
        assert after.admin.company_name == "Instafund"
        assert before.admin.commission_pct == Decimal("20")
        assert store.snapshot() is after

    def test_update_rules_single_phase(self):
        store = SettingsStore()

        snapshot = store.update_rules("eval2", {"min_trades": "3"})

        assert snapshot.catalog.for_phase(Phase.EVAL2).min_trades == 3
        assert snapshot.catalog.for_phase(Phase.EVAL1).min_trades == 5

    def test_update_rules_accepts_task_alias(self):
        store = SettingsStore()

        snapshot = store.update_rules("task1", {"profit_target_pct": "0.08"})

        assert snapshot.catalog.eval1.profit_target_pct == Decimal("0.08")

    def test_update_policy(self):
        store = SettingsStore()

        snapshot = store.update_policy({"funded_capital": "carry"})

        assert snapshot.policy.funded_capital == FundedCapitalPolicy.CARRY

    @pytest.mark.parametrize(
        "raw, expected",
        [("false", False), ("False", False), ("0", False), ("no", False),
         ("true", True), ("YES", True), ("on", True), (True, True)],
    )
    def test_update_policy_parses_boolean_strings(self, raw, expected):
        store = SettingsStore()

        snapshot = store.update_policy({"enforce_daily_drawdown": raw})

        assert snapshot.policy.enforce_daily_drawdown is expected

    def test_update_policy_string_false_disables_kyc(self):
        store = SettingsStore()

        snapshot = store.update_policy({"require_kyc_for_funding": "false"})

        assert snapshot.policy.require_kyc_for_funding is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"enforce_daily_drawdown": "maybe"},
            {"enforce_min_trading_days": 2},
            {"funded_capital": "sometimes"},
        ],
    )
    def test_invalid_policy_keeps_previous_snapshot(self, overrides):
        store = SettingsStore()
        before = store.snapshot()

        with pytest.raises(ConfigError):
            store.update_policy(overrides)

        assert store.snapshot() is before

    @pytest.mark.parametrize(
        "section, overrides",
        [
            ("eval1", {"min_trades": "abc"}),
            ("eval2", {"min_trading_days": "1.5"}),
            ("admin", {"processing_days": "soon"}),
        ],
    )
    def test_non_integer_counts_raise_config_error(self, section, overrides):
        store = SettingsStore()
        before = store.snapshot()

        with pytest.raises(ConfigError):
            if section == "admin":
                store.update_admin(overrides)
            else:
                store.update_rules(section, overrides)

        assert store.snapshot() is before

    def test_invalid_update_keeps_previous_snapshot(self):
        store = SettingsStore()
        before = store.snapshot()

        with pytest.raises(ConfigError):
            store.update_rules(Phase.EVAL1, {"account_size": "-1"})

        assert store.snapshot() is before

    def test_replace(self):
        store = SettingsStore()
        settings = ChallengeSettings.from_dict({"admin": {"min_withdrawal": 500}})

        store.replace(settings)

        assert store.snapshot().admin.min_withdrawal == Decimal("500")
