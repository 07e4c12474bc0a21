from enum import Enum


class Terminal(str, Enum):

    kigali = "Kigali"
    kampala = "Kampala"
    nairobi = "Nairobi"
    juba = "Juba"


class Priority(str, Enum):

    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class WorkOrderStatus(str, Enum):
    pending = "pending"
    in_progress = "in_progress"
    on_hold = "on_hold"
    completed = "completed"
    cancelled = "cancelled"


class WorkType(str, Enum):

    repair = "repair"
    maintenance = "maintenance"
    inspection = "inspection"
    emergency = "emergency"
    preventive = "preventive"
    other = "other"


class MaintenanceType(str, Enum):

    oil_change = "oil_change"
    tire_rotation = "tire_rotation"
    brake_service = "brake_service"
    engine_tune_up = "engine_tune_up"
    transmission_service = "transmission_service"
    air_filter = "air_filter"
    fuel_filter = "fuel_filter"
    spark_plugs = "spark_plugs"
    battery_check = "battery_check"
    coolant_check = "coolant_check"
    general_inspection = "general_inspection"
    other = "other"


class MaintenanceFrequency(str, Enum):

    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    quarterly = "quarterly"
    semi_annually = "semi_annually"
    annually = "annually"
    mileage_based = "mileage_based"
    custom = "custom"


class ScheduleStatus(str, Enum):
    """Statuses a schedule can report.

    Only ``scheduled``, ``in_progress``, ``completed`` and ``cancelled`` are
    ever stored; ``overdue`` is derived from ``next_due`` when read.
    """

    scheduled = "scheduled"
    in_progress = "in_progress"
    overdue = "overdue"
    completed = "completed"
    cancelled = "cancelled"
