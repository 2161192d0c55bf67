"""
API Services Module

Data access and side effects shared by the routes and background jobs:
loading budgets and transactions, savings contributions, recomputing
recommendations, budget alerts and recurring transaction catch-up.
"""

import logging
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import case, func, insert, or_, select, update

from budget import BudgetAlertChecker, Recommendation, RecommendationEngine, load_pacing_config
from budget.alert_checker import BudgetAlert
from categorization import KeywordCategorizer
from notifications import EmailSender
from recurring import RecurringProcessor, RecurringRunResult

from .auth import User, auth_config
from .database import execute_insert, execute_query, get_db_context
from .history_repository import SqlRecommendationHistoryRepository
from .tables import budget_alerts, budgets, monthly_budgets, transactions

logger = logging.getLogger(__name__)

SAVINGS_CATEGORY = "Savings"
CONTRIBUTION_CATEGORY = "Contribution"

_pacing_config = load_pacing_config()

history_repository = SqlRecommendationHistoryRepository(
    retention_days=int(_pacing_config.get("history", {}).get("retention_days", 30))
)
recommendation_engine = RecommendationEngine(history=history_repository)
alert_checker = BudgetAlertChecker()
email_sender = EmailSender(formatter=recommendation_engine.formatter)
categorizer = KeywordCategorizer()
recurring_processor = RecurringProcessor()


def month_bounds(year: int, month: int) -> tuple[datetime, datetime]:
    """First instant of the month and first instant of the next month."""
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


# =============================================================================
# Loading
# =============================================================================

def load_budgets(user_id: str, month: int | None = None, year: int | None = None) -> list[dict]:
    """Load category budgets for a user, optionally for one month."""
    statement = select(budgets).where(budgets.c.user_id == user_id)
    if month is not None:
        statement = statement.where(budgets.c.month == month)
    if year is not None:
        statement = statement.where(budgets.c.year == year)

    return execute_query(statement.order_by(budgets.c.category))


def get_budget(user_id: str, budget_id: int) -> dict | None:
    rows = execute_query(
        select(budgets).where(budgets.c.id == budget_id).where(budgets.c.user_id == user_id)
    )
    return rows[0] if rows else None


def get_monthly_budget(user_id: str, month: int, year: int) -> dict | None:
    rows = execute_query(
        select(monthly_budgets)
        .where(monthly_budgets.c.user_id == user_id)
        .where(monthly_budgets.c.month == month)
        .where(monthly_budgets.c.year == year)
    )
    return rows[0] if rows else None


def load_transactions(
    user_id: str,
    start: datetime | None = None,
    end: datetime | None = None,
    txn_type: str | None = None,
    category: str | None = None,
    search: str | None = None,
) -> list[dict]:
    """Load a user's transactions, newest first.

    Args:
        user_id: Owner
        start: Inclusive lower date bound
        end: Exclusive upper date bound
        txn_type: Filter by type
        category: Filter by category
        search: Case-insensitive match on category or description

    Returns:
        List of transaction rows
    """
    statement = select(transactions).where(transactions.c.user_id == user_id)

    if start is not None:
        statement = statement.where(transactions.c.date >= start)
    if end is not None:
        statement = statement.where(transactions.c.date < end)
    if txn_type:
        statement = statement.where(transactions.c.type == txn_type)
    if category:
        statement = statement.where(transactions.c.category == category)
    if search:
        pattern = f"%{search.lower()}%"
        statement = statement.where(or_(
            func.lower(transactions.c.category).like(pattern),
            func.lower(transactions.c.description).like(pattern),
        ))

    return execute_query(
        statement.order_by(transactions.c.date.desc(), transactions.c.id.desc())
    )


def get_transaction(user_id: str, transaction_id: int) -> dict | None:
    rows = execute_query(
        select(transactions)
        .where(transactions.c.id == transaction_id)
        .where(transactions.c.user_id == user_id)
    )
    return rows[0] if rows else None


def sum_transactions(
    user_id: str,
    year: int,
    month: int,
    txn_type: str = "expense",
    category: str | None = None,
) -> Decimal:
    """Total amount of a transaction type within a month."""
    start, end = month_bounds(year, month)
    statement = (
        select(func.coalesce(func.sum(transactions.c.amount), 0).label("total"))
        .where(transactions.c.user_id == user_id)
        .where(transactions.c.type == txn_type)
        .where(transactions.c.date >= start)
        .where(transactions.c.date < end)
    )
    if category is not None:
        statement = statement.where(transactions.c.category == category)

    rows = execute_query(statement)
    return Decimal(str(rows[0]["total"])) if rows else Decimal("0")


def available_balance(user_id: str) -> Decimal:
    """All-time income minus all-time expenses."""
    signed_amount = case(
        (transactions.c.type == "income", transactions.c.amount),
        (transactions.c.type == "expense", -transactions.c.amount),
        else_=0,
    )
    rows = execute_query(
        select(func.coalesce(func.sum(signed_amount), 0).label("balance"))
        .where(transactions.c.user_id == user_id)
    )
    return Decimal(str(rows[0]["balance"])) if rows else Decimal("0")


# =============================================================================
# Savings
# =============================================================================

class InsufficientFundsError(Exception):
    """Contribution is larger than the available balance."""

    def __init__(self, available: Decimal):
        self.available = available
        super().__init__(f"Insufficient funds. Your available balance is {available:.2f}.")


def contribute_to_savings(
    user_id: str,
    amount: Decimal | float,
    description: str | None = None,
    when: datetime | None = None,
) -> tuple[int, int]:
    """Move money from the available balance into savings.

    Records an expense in the Savings category and a matching saving
    transaction, both in one database transaction.

    Args:
        user_id: Owner
        amount: Contribution (must be positive)
        description: Optional note for both transactions
        when: Transaction time (defaults to now)

    Returns:
        (expense id, saving id)

    Raises:
        InsufficientFundsError: If the amount exceeds the available balance
    """
    amount = Decimal(str(amount))
    balance = available_balance(user_id)
    if amount > balance:
        raise InsufficientFundsError(balance)

    when = when or datetime.now()
    note = description or "Contribution to savings"
    common = {"user_id": user_id, "amount": amount, "description": note, "date": when}

    with get_db_context() as db:
        expense_id = db.execute(
            insert(transactions)
            .values(type="expense", category=SAVINGS_CATEGORY, **common)
            .returning(transactions.c.id)
        ).scalar_one()
        saving_id = db.execute(
            insert(transactions)
            .values(type="saving", category=CONTRIBUTION_CATEGORY, **common)
            .returning(transactions.c.id)
        ).scalar_one()
        db.commit()

    logger.info(f"User {user_id} contributed {amount} to savings")
    return expense_id, saving_id


# =============================================================================
# Recommendations
# =============================================================================

def refresh_recommendations(user_id: str, today: date | None = None) -> list[Recommendation]:
    """Recompute a user's recommendations from current data and store the batch."""
    today = today or date.today()
    current_budgets = load_budgets(user_id, month=today.month, year=today.year)
    user_transactions = load_transactions(user_id)

    return recommendation_engine.generate(
        current_budgets, user_transactions, today=today, user_id=user_id
    )


def refresh_recommendations_quietly(user_id: str) -> None:
    """Recompute after a data change without failing the caller."""
    try:
        refresh_recommendations(user_id)
    except Exception as e:
        logger.error(f"Error updating recommendations for user {user_id}: {e}")


# =============================================================================
# Alerts
# =============================================================================

def check_budget_alert(user: User, category: str, when: date | None = None) -> BudgetAlert | None:
    """Alert the user when a category reaches the alert threshold this month.

    Args:
        user: Budget owner
        category: Category that changed
        when: Any date in the month to check (defaults to today)

    Returns:
        The BudgetAlert raised, or None
    """
    when = when or date.today()
    rows = execute_query(
        select(budgets)
        .where(budgets.c.user_id == user.user_id)
        .where(budgets.c.category == category)
        .where(budgets.c.month == when.month)
        .where(budgets.c.year == when.year)
    )
    if not rows:
        return None

    budget = rows[0]
    last_sent = budget.get("last_alert_sent")
    if isinstance(last_sent, datetime) and (last_sent.year, last_sent.month) == (when.year, when.month):
        alert_checker.mark_sent(user.user_id, category, when.year, when.month)

    spent = sum_transactions(user.user_id, when.year, when.month, "expense", category)
    alert = alert_checker.check(user.user_id, category, spent, budget["amount"], period=when)
    if alert is None:
        return None

    sent = email_sender.send_budget_alert(alert, user.email or "", user.name)

    try:
        execute_insert(budget_alerts, {
            "user_id": alert.user_id,
            "category": alert.category,
            "month": alert.month,
            "year": alert.year,
            "spent": alert.spent,
            "budget_amount": alert.budget_amount,
            "percent_spent": alert.percent_spent,
            "email_sent": sent,
            "sent_at": alert.triggered_at,
        })
        execute_query(
            update(budgets)
            .where(budgets.c.id == budget["id"])
            .values(last_alert_sent=alert.triggered_at)
        )
    except Exception as e:
        logger.error(f"Failed to record budget alert for user {user.user_id}: {e}")

    return alert


# =============================================================================
# Recurring transactions
# =============================================================================

def run_recurring_transactions(now: datetime | None = None) -> RecurringRunResult:
    """Create all due recurring transaction instances and advance their templates."""
    now = now or datetime.now()

    templates = execute_query(
        select(transactions)
        .where(transactions.c.is_recurring.is_(True))
        .where(transactions.c.next_recurring_date <= now)
    )
    result = recurring_processor.process(templates, now)

    for instance in result.created:
        row = {k: v for k, v in instance.items() if k != "template_id"}
        execute_insert(transactions, row)

    for template_id, next_date in result.next_dates.items():
        execute_query(
            update(transactions)
            .where(transactions.c.id == template_id)
            .values(next_recurring_date=next_date, updated_at=now)
        )

    affected_users = {instance["user_id"] for instance in result.created}

    for instance in result.created:
        if instance["type"] != "expense":
            continue
        user = auth_config.get_user(instance["user_id"]) or User(
            user_id=instance["user_id"], name=instance["user_id"]
        )
        check_budget_alert(user, instance["category"], now.date())

    for user_id in affected_users:
        refresh_recommendations_quietly(user_id)

    logger.info(
        f"Recurring run created {result.created_count} transactions for {len(affected_users)} users"
    )
    return result
