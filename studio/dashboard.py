"""
Dashboard metrics: counts, revenue and status distributions.

Works on plain record dicts (the shape the API returns), so the same function
serves the /dashboard endpoint and the workspace collections.
"""

from collections import Counter
from typing import Iterable, List

from .schemas import DashboardMetrics, StatusCount

OUTSTANDING_INVOICE_STATUSES = ("Draft", "Sent")


def _status_data(records: Iterable[dict]) -> List[StatusCount]:
    counts = Counter(str(r.get("status") or "Unknown") for r in records)
    return [StatusCount(name=name, value=value) for name, value in counts.items()]


def _invoice_total(invoices: List[dict], statuses) -> float:
    return sum(i.get("amount") or 0.0 for i in invoices if i.get("status") in statuses)


def compute_dashboard_metrics(
    clients: List[dict],
    projects: List[dict],
    quotes: List[dict],
    invoices: List[dict],
) -> DashboardMetrics:
    approved = [q for q in quotes if q.get("status") == "Approved"]
    # Final figures: a manual override is what the client actually agreed to
    approved_calcs = [q.get("calculations") or {} for q in approved]

    return DashboardMetrics(
        total_clients=len(clients),
        total_projects=len(projects),
        total_quotes=len(quotes),
        total_invoices=len(invoices),
        total_approved_quotes=len(approved),
        approved_revenue=sum(c.get("total_price", 0.0) for c in approved_calcs),
        approval_rate=(len(approved) / len(quotes) * 100.0) if quotes else 0.0,
        total_outstanding_amount=_invoice_total(invoices, OUTSTANDING_INVOICE_STATUSES),
        total_overdue_amount=_invoice_total(invoices, ("Overdue",)),
        total_paid_amount=_invoice_total(invoices, ("Paid",)),
        total_profit=sum(c.get("profit_amount", 0.0) for c in approved_calcs),
        effective_work_hours=sum(c.get("effective_labor_hours", 0.0) for c in approved_calcs),
        client_status_data=_status_data(clients),
        project_status_data=_status_data(projects),
        quote_status_data=_status_data(quotes),
    )
