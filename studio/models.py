from sqlalchemy import Column, Integer, String, Float, DateTime, Text, ForeignKey, Enum, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
from .database import Base
import enum


# --- Enums ---

class QuoteStatus(str, enum.Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    ARCHIVED = "Archived"


class InvoiceStatus(str, enum.Enum):
    DRAFT = "Draft"
    SENT = "Sent"
    PAID = "Paid"
    OVERDUE = "Overdue"
    CANCELLED = "Cancelled"


class InteractionType(str, enum.Enum):
    CALL = "Call"
    EMAIL = "Email"
    MEETING = "Meeting"
    MESSAGE = "Message"


# DECISION: client/project status are VARCHAR, not enums: studios rename their
# pipeline stages often. These lists are the values the UI offers.
CLIENT_STATUSES = ["Lead", "Active", "Inactive", "Archived"]
CLIENT_RESPONSIVENESS = ["Hot", "Warm", "Cold"]
PROJECT_STATUSES = ["Planning", "In Progress", "On Hold", "Completed", "Cancelled"]


# --- CRM ---

class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    status = Column(String, default="Lead")
    responsiveness = Column(String, default="Warm")
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Deleting a client removes everything hanging off it
    interactions = relationship(
        "Interaction", back_populates="client", cascade="all, delete-orphan",
        order_by="Interaction.timestamp.desc()",
    )
    properties = relationship("Property", back_populates="client", cascade="all, delete-orphan")
    projects = relationship("Project", back_populates="client", cascade="all, delete-orphan")
    quotes = relationship("Quote", back_populates="client", cascade="all, delete-orphan")
    invoices = relationship("Invoice", back_populates="client", cascade="all, delete-orphan")


class Interaction(Base):
    """Follow-up log entry: calls, emails, meetings."""
    __tablename__ = "interactions"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    type = Column(Enum(InteractionType), nullable=False)
    notes = Column(Text, nullable=False)
    timestamp = Column(DateTime, default=datetime.utcnow)

    client = relationship("Client", back_populates="interactions")


class Property(Base):
    __tablename__ = "properties"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    address = Column(Text, nullable=True)
    property_type = Column(String, nullable=True)  # 'apartment' | 'house' | 'office' | etc.
    notes = Column(Text, nullable=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="properties")
    projects = relationship("Project", back_populates="property")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="SET NULL"), nullable=True)
    scope = Column(Text, nullable=True)
    timeline = Column(String, nullable=True)
    status = Column(String, default="Planning")
    project_type = Column(String, nullable=True)  # 'Renovation' | 'Remodel' | 'New Build' | etc.
    services = Column(Text, nullable=True)
    room_count = Column(Integer, nullable=True)
    other_spaces = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="projects")
    property = relationship("Property", back_populates="projects")
    quotes = relationship("Quote", back_populates="project")
    invoices = relationship("Invoice", back_populates="project")


# --- Quoting / billing ---

class Quote(Base):
    """Published quote: an immutable snapshot of the costing form."""
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True, index=True)
    quote_number = Column(String, unique=True, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    status = Column(Enum(QuoteStatus), default=QuoteStatus.DRAFT)

    # Snapshots
    form_values = Column(JSON, nullable=False)  # FormValues
    allocations = Column(JSON, nullable=False)  # Allocation
    calculations = Column(JSON, nullable=False)  # final: total_price may be overridden
    suggested_calculations = Column(JSON, nullable=False)  # engine output, untouched

    timestamp = Column(DateTime, default=datetime.utcnow)  # last publish
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="quotes")
    project = relationship("Project", back_populates="quotes")
    invoices = relationship("Invoice", back_populates="quote")


class Invoice(Base):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False)
    amount = Column(Float, default=0.0)
    status = Column(Enum(InvoiceStatus), default=InvoiceStatus.DRAFT)
    due_date = Column(DateTime, nullable=False)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="SET NULL"), nullable=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("Client", back_populates="invoices")
    project = relationship("Project", back_populates="invoices")
    quote = relationship("Quote", back_populates="invoices")
