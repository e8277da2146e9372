"""
Cost Engine: quote totals from the costing form.

Pure math, no I/O. Takes a validated FormValues and derives every money
figure shown on the costing screen and frozen into a published quote.

Order of stages is fixed and each stage only reads earlier ones:

    direct cost base   materials + labor + fixed operations
    statutory          NSSF 6% / SHIF 2.75% of gross salaries
    salary pool        salary % of base + gross salaries + NSSF + SHIF
    affiliates         percentage (of base) or units x rate
    subtotal           base + salary pool + affiliates
    misc               misc % of subtotal
    tax                VAT (tax_rate) | TOT 3% | none
    total cost         subtotal with misc + tax
    profit             profit_margin % of total cost (markup on cost)
    total price        total cost + profit

Values are not rounded here: formatting.py and the PDF round for display.
"""

from typing import List, Optional

from .schemas import (
    AffiliateItem,
    Calculations,
    FormValues,
    LaborItem,
    MaterialItem,
    OperationItem,
    SalaryItem,
)


class CostEngine:
    """
    Derives Calculations from FormValues.
    Stateless apart from the optional NSSF ceiling.
    """

    NSSF_RATE = 6.0
    SHIF_RATE = 2.75
    TURNOVER_TAX_RATE = 3.0  # statutory, not user-editable
    HOURS_PER_DAY = 8.0  # daily labor lines, for the hours display only

    def __init__(self, nssf_cap: Optional[float] = None):
        self.nssf_cap = nssf_cap

    def calculate(self, form: FormValues) -> Calculations:
        material_cost = self._calculate_material_cost(form.materials)
        labor_cost = self._calculate_labor_cost(form.labor)
        operation_cost = self._calculate_operation_cost(form.operations)
        direct_cost_base = material_cost + labor_cost + operation_cost

        # --- Salaries + statutory deductions ---
        gross_salary = sum(s.gross_salary for s in form.salaries)
        nssf_amount = self._calculate_nssf(form.salaries) if form.enable_nssf else 0.0
        shif_amount = gross_salary * self.SHIF_RATE / 100.0 if form.enable_shif else 0.0
        salary_allocation = direct_cost_base * form.salary_percentage / 100.0
        salary_amount = salary_allocation + gross_salary + nssf_amount + shif_amount

        affiliate_cost = self._calculate_affiliate_cost(form.affiliates, direct_cost_base)

        subtotal = direct_cost_base + salary_amount + affiliate_cost
        misc_amount = subtotal * form.misc_percentage / 100.0
        subtotal_with_misc = subtotal + misc_amount

        tax_type, tax_rate = self._tax_rule(form)
        tax_amount = subtotal_with_misc * tax_rate / 100.0
        total_cost = subtotal_with_misc + tax_amount

        profit_amount = total_cost * form.profit_margin / 100.0
        total_price = total_cost + profit_amount

        total_hours = self._calculate_labor_hours(form.labor)
        effective_hours = total_hours * (1 - form.labor_concurrency_percentage / 100.0)

        return Calculations(
            total_material_cost=material_cost,
            total_labor_cost=labor_cost,
            total_operation_cost=operation_cost,
            direct_cost_base=direct_cost_base,
            total_gross_salary=gross_salary,
            salary_allocation=salary_allocation,
            nssf_amount=nssf_amount,
            shif_amount=shif_amount,
            salary_amount=salary_amount,
            total_affiliate_cost=affiliate_cost,
            subtotal=subtotal,
            misc_amount=misc_amount,
            subtotal_with_misc=subtotal_with_misc,
            tax_type=tax_type,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            total_cost=total_cost,
            profit_margin=form.profit_margin,
            profit_amount=profit_amount,
            total_price=total_price,
            total_labor_hours=total_hours,
            effective_labor_hours=effective_hours,
            business_type=form.business_type,
        )

    def _calculate_material_cost(self, materials: List[MaterialItem]) -> float:
        """Sum of quantity × unit cost."""
        return sum(m.quantity * m.unit_cost for m in materials)

    def _calculate_labor_cost(self, labor: List[LaborItem]) -> float:
        """Sum of rate × hours (hourly) or rate × days (daily)."""
        return sum(
            item.rate * (item.hours if item.rate_type == "hourly" else item.days)
            for item in labor
        )

    def _calculate_operation_cost(self, operations: List[OperationItem]) -> float:
        return sum(op.cost for op in operations)

    def _calculate_nssf(self, salaries: List[SalaryItem]) -> float:
        """6% per person, each contribution capped when a ceiling is configured."""
        total = 0.0
        for salary in salaries:
            contribution = salary.gross_salary * self.NSSF_RATE / 100.0
            if self.nssf_cap is not None:
                contribution = min(contribution, self.nssf_cap)
            total += contribution
        return total

    def _calculate_affiliate_cost(self, affiliates: List[AffiliateItem], base: float) -> float:
        total = 0.0
        for affiliate in affiliates:
            if affiliate.rate_type == "percentage":
                total += base * affiliate.rate / 100.0
            else:
                total += affiliate.units * affiliate.rate
        return total

    def _tax_rule(self, form: FormValues) -> tuple[str, float]:
        """Exactly one rule per business type: (tax_type, rate %)."""
        if form.business_type == "vat_registered":
            return "VAT", form.tax_rate
        if form.business_type == "sole_proprietor":
            return "TOT", self.TURNOVER_TAX_RATE
        return "NONE", 0.0

    def _calculate_labor_hours(self, labor: List[LaborItem]) -> float:
        return sum(
            item.hours if item.rate_type == "hourly" else item.days * self.HOURS_PER_DAY
            for item in labor
        )


def calculate(form: FormValues, nssf_cap: Optional[float] = None) -> Calculations:
    """Module-level shortcut: CostEngine(nssf_cap).calculate(form)."""
    return CostEngine(nssf_cap=nssf_cap).calculate(form)
