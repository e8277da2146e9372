from .schemas import Allocation, ProfitAllocation


def allocate_profit(profit_amount: float, allocation: Allocation) -> ProfitAllocation:
    """
    Split profit across savings / future development / CSR.

    An allocation that doesn't add up to 100% is still applied; whatever is
    left over (or overspent, as a negative) is reported as `unallocated`.
    """
    return ProfitAllocation(
        profit_amount=profit_amount,
        savings=profit_amount * allocation.savings / 100.0,
        future_dev=profit_amount * allocation.future_dev / 100.0,
        csr=profit_amount * allocation.csr / 100.0,
        unallocated=profit_amount * (100.0 - allocation.total) / 100.0,
        is_balanced=allocation.is_balanced,
    )
