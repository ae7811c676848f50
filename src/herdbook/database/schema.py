from sqlalchemy import (
    Boolean,
    Column,
    Float,
    ForeignKey,
    Index,
    String,
    Text,
    create_engine,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Bovine(Base):
    __tablename__ = "bovines"

    id = Column(String, primary_key=True)
    ear_tag = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    type = Column(String, nullable=False)  # dairy_cow, beef_cow, bull, calf, heifer, steer
    breed = Column(String, nullable=False)
    gender = Column(String, nullable=False)  # male, female
    birth_date = Column(String, nullable=True)  # ISO 8601 date
    weight = Column(Float, nullable=True)  # kg
    health_status = Column(String, nullable=False, default="healthy")
    mother_ear_tag = Column(String, nullable=True)
    father_ear_tag = Column(String, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    created_at = Column(String, nullable=True)  # ISO 8601 string
    updated_at = Column(String, nullable=True)  # ISO 8601 string


class Vaccination(Base):
    __tablename__ = "vaccinations"

    id = Column(String, primary_key=True)
    bovine_id = Column(String, ForeignKey("bovines.id"), nullable=False, index=True)
    vaccine_name = Column(String, nullable=False)
    vaccine_type = Column(String, nullable=True)
    dose = Column(String, nullable=True)
    application_date = Column(String, nullable=False)  # ISO 8601 date
    next_due_date = Column(String, nullable=True)  # ISO 8601 date
    veterinarian = Column(String, nullable=True)
    batch_number = Column(String, nullable=True)


class HerdEvent(Base):
    __tablename__ = "herd_events"

    id = Column(String, primary_key=True)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    event_type = Column(String, nullable=False)
    status = Column(String, nullable=False, default="scheduled")
    priority = Column(String, nullable=False, default="medium")
    scheduled_date = Column(String, nullable=False)  # ISO 8601 date or datetime
    bovine_id = Column(String, nullable=True, index=True)
    bovine_name = Column(String, nullable=True)
    bovine_tag = Column(String, nullable=True)
    veterinarian = Column(String, nullable=True)
    cost = Column(Float, nullable=True)
    tags_json = Column(Text, nullable=True)  # JSON array of strings
    completed_at = Column(String, nullable=True)
    created_at = Column(String, nullable=True)


class DiseaseCase(Base):
    __tablename__ = "disease_cases"

    id = Column(String, primary_key=True)
    animal_id = Column(String, nullable=True, index=True)
    animal_name = Column(String, nullable=True)
    animal_tag = Column(String, nullable=False)
    disease_name = Column(String, nullable=False)
    disease_type = Column(String, nullable=False)  # viral, bacterial, parasitic, metabolic, genetic, injury
    severity = Column(String, nullable=False)  # low, medium, high, critical
    status = Column(String, nullable=False)  # active, treating, recovered, chronic, deceased
    diagnosis_date = Column(String, nullable=False)
    recovery_date = Column(String, nullable=True)
    follow_up_date = Column(String, nullable=True)
    veterinarian = Column(String, nullable=True)
    treatment = Column(Text, nullable=True)
    sector = Column(String, nullable=True)
    is_contagious = Column(Boolean, nullable=False, default=False)
    quarantine_required = Column(Boolean, nullable=False, default=False)
    cost = Column(Float, nullable=True)

    __table_args__ = (
        Index("idx_disease_cases_status_severity", "status", "severity"),
    )


def create_all(engine_url: str) -> None:
    engine = create_engine(engine_url)
    Base.metadata.create_all(engine)
