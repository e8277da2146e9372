from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Literal
from datetime import datetime
from .config import settings
from .models import QuoteStatus, InvoiceStatus, InteractionType


BusinessType = Literal["vat_registered", "sole_proprietor", "no_tax"]


# --- Costing form ---

class MaterialItem(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    quantity: float = Field(0.0, ge=0)
    unit_cost: float = Field(0.0, ge=0)


class LaborItem(BaseModel):
    vendor: str = Field(min_length=1)
    rate_type: Literal["hourly", "daily"] = "hourly"
    rate: float = Field(0.0, ge=0)
    hours: float = Field(0.0, ge=0)
    days: float = Field(0.0, ge=0)


class SalaryItem(BaseModel):
    role: str = Field(min_length=1)
    gross_salary: float = Field(0.0, ge=0)


class OperationItem(BaseModel):
    name: str = Field(min_length=1)
    cost: float = Field(0.0, ge=0)


class AffiliateItem(BaseModel):
    name: str = Field(min_length=1)
    rate_type: Literal["percentage", "fixed"] = "fixed"
    rate: float = Field(0.0, ge=0)
    units: float = Field(0.0, ge=0)


class FormValues(BaseModel):
    """One quote-in-progress, as edited on the costing screen.

    Everything the engine reads is validated here: negative amounts and
    percentages outside 0-100 never reach cost_engine.calculate().
    """
    client_id: Optional[int] = None
    project_id: Optional[int] = None

    materials: List[MaterialItem] = []
    labor: List[LaborItem] = []
    salaries: List[SalaryItem] = []
    operations: List[OperationItem] = []
    affiliates: List[AffiliateItem] = []

    business_type: BusinessType = "vat_registered"
    tax_rate: float = Field(default_factory=lambda: settings.DEFAULT_TAX_RATE, ge=0, le=100)
    profit_margin: float = Field(default_factory=lambda: settings.DEFAULT_PROFIT_MARGIN, ge=0, le=100)
    misc_percentage: float = Field(0.0, ge=0, le=100)
    salary_percentage: float = Field(0.0, ge=0, le=100)
    labor_concurrency_percentage: float = Field(0.0, ge=0, le=100)
    enable_nssf: bool = False
    enable_shif: bool = False

    @field_validator("materials", "labor", "salaries", "operations", "affiliates", mode="before")
    @classmethod
    def _none_is_empty(cls, value):
        return [] if value is None else value


class Allocation(BaseModel):
    """Profit distribution: percentages that should add up to 100."""
    savings: float = Field(40.0, ge=0, le=100)
    future_dev: float = Field(30.0, ge=0, le=100)
    csr: float = Field(30.0, ge=0, le=100)

    @property
    def total(self) -> float:
        return self.savings + self.future_dev + self.csr

    @property
    def is_balanced(self) -> bool:
        return abs(self.total - 100.0) < 1e-9


class Calculations(BaseModel):
    total_material_cost: float = 0.0
    total_labor_cost: float = 0.0
    total_operation_cost: float = 0.0
    direct_cost_base: float = 0.0
    total_gross_salary: float = 0.0
    salary_allocation: float = 0.0
    nssf_amount: float = 0.0
    shif_amount: float = 0.0
    salary_amount: float = 0.0
    total_affiliate_cost: float = 0.0
    subtotal: float = 0.0
    misc_amount: float = 0.0
    subtotal_with_misc: float = 0.0
    tax_type: Literal["VAT", "TOT", "NONE"] = "VAT"
    tax_rate: float = 0.0
    tax_amount: float = 0.0
    total_cost: float = 0.0
    profit_margin: float = 0.0
    profit_amount: float = 0.0
    total_price: float = 0.0
    total_labor_hours: float = 0.0
    effective_labor_hours: float = 0.0
    business_type: BusinessType = "vat_registered"


class QuoteVariance(BaseModel):
    total: float
    profit: float
    total_percent: float


class ProfitAllocation(BaseModel):
    profit_amount: float
    savings: float
    future_dev: float
    csr: float
    unallocated: float
    is_balanced: bool


# --- CRM ---

class InteractionCreate(BaseModel):
    type: InteractionType
    notes: str = Field(min_length=1)


class Interaction(InteractionCreate):
    id: int
    client_id: int
    timestamp: datetime
    class Config:
        from_attributes = True


class ClientBase(BaseModel):
    name: str = Field(min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None


class ClientCreate(ClientBase):
    pass


class ClientUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[str] = None
    responsiveness: Optional[str] = None


class Client(ClientBase):
    id: int
    status: str
    responsiveness: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


class PropertyBase(BaseModel):
    name: str = Field(min_length=1)
    client_id: int
    address: Optional[str] = None
    property_type: Optional[str] = None
    notes: Optional[str] = None


class PropertyCreate(PropertyBase):
    pass


class PropertyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    client_id: Optional[int] = None
    address: Optional[str] = None
    property_type: Optional[str] = None
    notes: Optional[str] = None


class Property(PropertyBase):
    id: int
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


class ProjectBase(BaseModel):
    name: str = Field(min_length=1)
    client_id: int
    property_id: Optional[int] = None
    scope: Optional[str] = None
    timeline: Optional[str] = None
    status: str = "Planning"
    project_type: Optional[str] = None
    services: Optional[str] = None
    room_count: Optional[int] = Field(None, ge=0)
    other_spaces: Optional[str] = None


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    client_id: Optional[int] = None
    property_id: Optional[int] = None
    scope: Optional[str] = None
    timeline: Optional[str] = None
    status: Optional[str] = None
    project_type: Optional[str] = None
    services: Optional[str] = None
    room_count: Optional[int] = Field(None, ge=0)
    other_spaces: Optional[str] = None


class Project(ProjectBase):
    id: int
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


# --- Quotes ---

class PublishRequest(BaseModel):
    form_values: FormValues
    allocations: Allocation = Allocation()
    override_price: Optional[float] = Field(None, ge=0)
    quote_id: Optional[int] = None  # set to re-publish an existing quote


class QuoteStatusUpdate(BaseModel):
    status: QuoteStatus


class QuoteProjectAssignment(BaseModel):
    project_id: int


class Quote(BaseModel):
    id: int
    quote_number: str
    client_id: int
    project_id: Optional[int] = None
    status: QuoteStatus
    form_values: FormValues
    allocations: Allocation
    calculations: Calculations
    suggested_calculations: Calculations
    timestamp: datetime
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


class PublishResponse(BaseModel):
    quote_id: int
    was_existing: bool
    quote: Quote


# --- Invoices ---

class InvoiceBase(BaseModel):
    client_id: int
    project_id: Optional[int] = None
    quote_id: Optional[int] = None
    status: InvoiceStatus = InvoiceStatus.DRAFT
    due_date: datetime


class InvoiceCreate(InvoiceBase):
    invoice_number: Optional[str] = None  # generated when omitted
    amount: Optional[float] = Field(None, ge=0)  # defaults to the quote's final price


class InvoiceUpdate(BaseModel):
    invoice_number: Optional[str] = None
    amount: Optional[float] = Field(None, ge=0)
    status: Optional[InvoiceStatus] = None
    due_date: Optional[datetime] = None
    project_id: Optional[int] = None
    quote_id: Optional[int] = None


class InvoiceStatusUpdate(BaseModel):
    status: InvoiceStatus


class Invoice(InvoiceBase):
    id: int
    invoice_number: str
    amount: float
    created_at: datetime
    updated_at: datetime
    class Config:
        from_attributes = True


class InvoiceSummary(BaseModel):
    total_outstanding: float
    total_overdue: float
    total_paid: float


# --- Dashboard ---

class StatusCount(BaseModel):
    name: str
    value: int


class DashboardMetrics(BaseModel):
    total_clients: int
    total_projects: int
    total_quotes: int
    total_invoices: int
    total_approved_quotes: int
    approved_revenue: float
    approval_rate: float
    total_outstanding_amount: float
    total_overdue_amount: float
    total_paid_amount: float
    total_profit: float
    effective_work_hours: float
    client_status_data: List[StatusCount]
    project_status_data: List[StatusCount]
    quote_status_data: List[StatusCount]


# --- AI advisory ---

class InsightsRequest(BaseModel):
    """Either a form to calculate, or calculations already on screen."""
    form_values: Optional[FormValues] = None
    calculations: Optional[Calculations] = None


class QuoteInsights(BaseModel):
    quote_insight: str
    business_strategy: str


class MaterialSuggestionRequest(BaseModel):
    budget: float = Field(ge=0)
    material_type: str = Field(min_length=1)
    quantity: float = Field(ge=0)
    location: str = Field(min_length=1)


class MaterialSuggestion(BaseModel):
    material_name: str
    price: float
    availability: str
    pros: str
    cons: str
