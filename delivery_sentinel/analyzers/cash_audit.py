"""
DeliverySentinel Cash Auditor

Reconciles collected vs. remitted cash-on-delivery funds for a driver over
a reporting period. All amounts are integer centimes.

Discrepancy sign convention:
    discrepancy = collected - remitted
    > 0: driver still holds cash (shortage risk)
    < 0: driver remitted more than collected (overage)
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..config import CashAuditConfig
from ..core.geo import round_half_up
from ..models import CashAuditResult, CashData


logger = logging.getLogger(__name__)


class CashAuditor:
    """Audits a driver's COD cash handling."""

    def __init__(self, config: Optional[CashAuditConfig] = None):
        self._config = config or CashAuditConfig()

    @property
    def config(self) -> CashAuditConfig:
        return self._config

    def audit(
        self,
        expected_centimes: int,
        collected_centimes: int,
        remitted_centimes: int,
        total_transactions: int,
        shortage_count: int,
    ) -> CashAuditResult:
        """
        Audit a driver's cash handling for COD deliveries.

        Args:
            expected_centimes: Amount the orders say should be collected
            collected_centimes: Amount the driver reports collecting
            remitted_centimes: Amount the driver handed back
            total_transactions: COD transactions in the period
            shortage_count: Transactions already flagged as short

        Returns:
            CashAuditResult; alerts are independent and can stack
        """
        config = self._config
        alerts: List[str] = []
        discrepancy = collected_centimes - remitted_centimes

        if abs(discrepancy) > config.max_discrepancy_centimes:
            kind = "shortage" if discrepancy > 0 else "overage"
            alerts.append(f"Cash discrepancy: {abs(discrepancy)} centimes ({kind})")

        if shortage_count > config.max_shortages:
            alerts.append(f"{shortage_count} cash shortages (max {config.max_shortages})")

        if total_transactions > 0:
            reconciliation_rate = (
                (total_transactions - shortage_count) / total_transactions * 100
            )
        else:
            reconciliation_rate = 100.0

        # Compared before rounding; only the reported figure is rounded
        if reconciliation_rate < config.min_reconciliation_rate:
            alerts.append(
                f"Reconciliation rate {reconciliation_rate:.1f}% "
                f"below {config.min_reconciliation_rate:g}%"
            )

        over_expected = collected_centimes - expected_centimes
        if over_expected > config.max_discrepancy_centimes:
            alerts.append(f"Collected {over_expected} centimes more than expected")

        if alerts:
            logger.info(
                f"Cash audit flagged: discrepancy={discrepancy} centimes, "
                f"alerts={len(alerts)}"
            )

        return CashAuditResult(
            is_clean=not alerts,
            discrepancy_centimes=discrepancy,
            alerts=alerts,
            shortages=shortage_count,
            overages=max(0, -discrepancy),
            reconciliation_rate_percent=round_half_up(reconciliation_rate, 2),
        )

    def audit_data(self, data: CashData) -> CashAuditResult:
        """Audit from a `CashData` ledger bundle."""
        return self.audit(
            data.expected_centimes,
            data.collected_centimes,
            data.remitted_centimes,
            data.total_transactions,
            data.shortage_count,
        )


def audit_cash_handling(
    expected_centimes: int,
    collected_centimes: int,
    remitted_centimes: int,
    total_transactions: int,
    shortage_count: int,
    config: Optional[CashAuditConfig] = None,
) -> CashAuditResult:
    """Convenience wrapper around `CashAuditor.audit`."""
    return CashAuditor(config).audit(
        expected_centimes,
        collected_centimes,
        remitted_centimes,
        total_transactions,
        shortage_count,
    )
