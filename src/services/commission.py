"""
Commission calculation for openers.

Rules (whole SEK):
- Base bonus: 100, paid once per deal with at least one assigned company
- Offert lead: 100 per company
- Platsbesök lead: 300 per company
- A credited company keeps its commission row (for audit) but its fee
  is excluded from the total. The base bonus is never credited.

Only APPROVED deals earn commission. The calculator is a pure function
of the deal, a snapshot of the rule amounts and the set of credited
companies, so recalculating after every credit is always safe.
"""

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.models.commission import Commission, CommissionStatus
from src.models.commission_rule import CommissionRule, RuleName
from src.models.deal import AdminApproval, Deal, LeadType

logger = logging.getLogger(__name__)

# Default rule amounts (SEK)
BASE_BONUS = 100
OFFERT_RATE = 100
PLATSBESOK_RATE = 300


class CommissionDataError(ValueError):
    """Deal data cannot be turned into a commission without guessing."""


@dataclass(frozen=True)
class CommissionRates:
    """Rule amounts read once per calculation."""

    base_bonus: int = BASE_BONUS
    offert_rate: int = OFFERT_RATE
    platsbesok_rate: int = PLATSBESOK_RATE

    def fee_for(self, lead_type: LeadType) -> int:
        if lead_type == LeadType.OFFERT:
            return self.offert_rate
        return self.platsbesok_rate


DEFAULT_RATES = CommissionRates()


@dataclass(frozen=True)
class CompanyAssignment:
    company_name: str
    lead_type: LeadType


@dataclass(frozen=True)
class CommissionLine:
    """Calculated content of one Commission row."""

    company_name: str
    lead_type: LeadType
    lead_type_amount: int
    credited_back: bool

    @property
    def status(self) -> CommissionStatus:
        return CommissionStatus.CREDITED if self.credited_back else CommissionStatus.APPROVED

    @property
    def paid_amount(self) -> int:
        return 0 if self.credited_back else self.lead_type_amount


@dataclass(frozen=True)
class BreakdownItem:
    type: str
    amount: int
    description: str
    company_name: Optional[str] = None


@dataclass(frozen=True)
class CommissionResult:
    """
    Outcome of a calculation.

    base_bonus and total_commission are None for pending deals and 0
    for rejected ones; lines is empty unless the deal is approved.
    """

    base_bonus: Optional[int]
    total_commission: Optional[int]
    lines: tuple[CommissionLine, ...] = ()

    @property
    def credited_companies(self) -> frozenset[str]:
        return frozenset(line.company_name for line in self.lines if line.credited_back)

    @property
    def breakdown(self) -> list[BreakdownItem]:
        """Paid items only, in slot order, base bonus first."""
        items = []
        if self.base_bonus:
            items.append(BreakdownItem(
                type="base_bonus",
                amount=self.base_bonus,
                description="Grundbonus (en gång per affär)",
            ))
        for line in self.lines:
            if line.credited_back:
                continue
            if line.lead_type == LeadType.OFFERT:
                item_type, description = "offert", "Offert provision"
            else:
                item_type, description = "platsbesok", "Platsbesök provision"
            items.append(BreakdownItem(
                type=item_type,
                amount=line.lead_type_amount,
                description=description,
                company_name=line.company_name,
            ))
        return items


def get_assignments(deal: Deal) -> list[CompanyAssignment]:
    """
    Validated (company, lead type) pairs from the deal's slots.

    Raises:
        CommissionDataError: a company has no lead type, or the same
            company occupies two slots.
    """
    assignments = []
    seen = set()
    for slot, (name, lead_type) in enumerate(deal.company_slots(), start=1):
        if not name:
            if lead_type is not None:
                logger.warning(f"Deal {deal.id}: slot {slot} has lead type {lead_type} but no company, ignoring")
            continue
        if lead_type is None:
            raise CommissionDataError(
                f"Deal {deal.id}: company '{name}' in slot {slot} has no lead type"
            )
        if name in seen:
            raise CommissionDataError(
                f"Deal {deal.id}: company '{name}' is assigned more than once"
            )
        seen.add(name)
        assignments.append(CompanyAssignment(company_name=name, lead_type=LeadType(lead_type)))
    return assignments


def validate_deal_for_commission(deal: Deal) -> list[str]:
    """Reasons the deal cannot earn commission right now (empty if eligible)."""
    reasons = []
    approval = AdminApproval(deal.admin_approval)
    if approval != AdminApproval.APPROVED:
        reasons.append(f"Deal is not approved (status: {approval.value})")
    try:
        assignments = get_assignments(deal)
    except CommissionDataError as e:
        reasons.append(str(e))
    else:
        if not assignments and deal.total_commission:
            reasons.append(
                f"Deal {deal.id} has no assigned companies but a stored commission of {deal.total_commission}"
            )
    return reasons


def calculate_commission(
    deal: Deal,
    rates: CommissionRates = DEFAULT_RATES,
    credited_companies: Iterable[str] = (),
) -> CommissionResult:
    """Calculate the opener's commission for a deal.

    Args:
        deal: Deal with admin_approval and the four company slots
        rates: Rule amounts snapshot
        credited_companies: Companies whose fee was credited back.
            Names not assigned to the deal are ignored.

    Returns:
        CommissionResult with one line per assigned company

    Raises:
        CommissionDataError: invalid slots on an approved deal, or a
            stored non-zero commission on a deal with no companies.
    """
    approval = AdminApproval(deal.admin_approval)
    if approval == AdminApproval.PENDING:
        return CommissionResult(base_bonus=None, total_commission=None)
    if approval == AdminApproval.REJECTED:
        return CommissionResult(base_bonus=0, total_commission=0)

    assignments = get_assignments(deal)
    if not assignments:
        if deal.total_commission:
            raise CommissionDataError(
                f"Deal {deal.id} has no assigned companies but a stored commission of {deal.total_commission}"
            )
        return CommissionResult(base_bonus=0, total_commission=0)

    credited = set(credited_companies)
    lines = tuple(
        CommissionLine(
            company_name=a.company_name,
            lead_type=a.lead_type,
            lead_type_amount=rates.fee_for(a.lead_type),
            credited_back=a.company_name in credited,
        )
        for a in assignments
    )

    # Base bonus stays even if every company is credited
    base_bonus = rates.base_bonus
    total = base_bonus + sum(line.paid_amount for line in lines)

    return CommissionResult(base_bonus=base_bonus, total_commission=total, lines=lines)


def total_from_rows(base_bonus: int, commissions: Iterable[Commission]) -> int:
    """Deal total from stored rows, using the amounts frozen on each row."""
    return base_bonus + sum(c.lead_type_amount for c in commissions if not c.credited_back)


async def load_commission_rates(db: AsyncSession) -> CommissionRates:
    """Read all rules in one query so a calculation never mixes versions."""
    result = await db.execute(select(CommissionRule))
    rules = {rule.name: rule.value for rule in result.scalars().all()}

    missing = [name.value for name in RuleName if name not in rules]
    if missing:
        raise CommissionDataError(f"Missing commission rules: {', '.join(missing)}")

    return CommissionRates(
        base_bonus=rules[RuleName.BASE_BONUS],
        offert_rate=rules[RuleName.OFFERT_RATE],
        platsbesok_rate=rules[RuleName.PLATSBESOK_RATE],
    )


async def get_commission_rows(db: AsyncSession, deal_id: int) -> list[Commission]:
    result = await db.execute(
        select(Commission)
        .where(Commission.deal_id == deal_id)
        .order_by(Commission.id)
    )
    return list(result.scalars().all())


async def get_credited_companies(db: AsyncSession, deal_id: int) -> set[str]:
    """Companies credited on a deal, derived from the commission rows."""
    result = await db.execute(
        select(Commission.company_name).where(
            Commission.deal_id == deal_id,
            Commission.credited_back.is_(True),
        )
    )
    return set(result.scalars().all())


async def calculate_for_deal(db: AsyncSession, deal: Deal) -> CommissionResult:
    """
    Calculate with the current rules and the deal's recorded credits.

    Companies that already have a Commission row keep the amount frozen
    on that row (and the deal keeps its base bonus), so a rule change
    only affects deals approved after it.
    """
    rates = await load_commission_rates(db)
    credited = await get_credited_companies(db, deal.id)
    result = calculate_commission(deal, rates, credited)
    if not result.lines:
        return result

    frozen = {c.company_name: c.lead_type_amount for c in await get_commission_rows(db, deal.id)}
    lines = tuple(
        replace(line, lead_type_amount=frozen.get(line.company_name, line.lead_type_amount))
        for line in result.lines
    )
    base_bonus = deal.base_bonus if frozen and deal.base_bonus is not None else result.base_bonus
    return CommissionResult(
        base_bonus=base_bonus,
        total_commission=base_bonus + sum(line.paid_amount for line in lines),
        lines=lines,
    )


async def store_commission(db: AsyncSession, deal: Deal, result: CommissionResult) -> list[Commission]:
    """
    Cache totals on the deal and create any missing Commission rows.

    Existing rows are left as they are: their amounts are frozen and
    their credit state is owned by the credit-back flow. The cached
    total is summed from the rows so a rule change made after approval
    does not alter it.
    """
    deal.base_bonus = result.base_bonus
    deal.total_commission = result.total_commission
    if not result.lines:
        await db.flush()
        return []

    existing = {c.company_name: c for c in await get_commission_rows(db, deal.id)}
    rows = []
    created = []
    for line in result.lines:
        commission = existing.get(line.company_name)
        if commission is None:
            commission = Commission(
                deal_id=deal.id,
                company_name=line.company_name,
                lead_type=line.lead_type,
                lead_type_amount=line.lead_type_amount,
                is_base_included=False,
                credited_back=line.credited_back,
                status=line.status,
            )
            db.add(commission)
            created.append(commission)
        rows.append(commission)

    deal.total_commission = total_from_rows(result.base_bonus, rows)
    await db.flush()
    if created:
        logger.info(f"Created {len(created)} commission rows for deal {deal.id}")
    return created


def format_sek(amount: int) -> str:
    """Format whole kronor the Swedish way, e.g. 1500 -> '1 500 kr'."""
    return f"{amount:,}".replace(",", " ") + " kr"
