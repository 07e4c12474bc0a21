from enum import Enum


class MovementReason(str, Enum):

    maintenance = "maintenance"
    purchase_receipt = "purchase_receipt"
    manual_adjustment = "manual_adjustment"
    loss = "loss"


class StockStatus(str, Enum):

    in_stock = "in_stock"
    low_stock = "low_stock"
    out_of_stock = "out_of_stock"


class InventoryCategory(str, Enum):

    lubricants = "Lubricants"
    brake_system = "Brake System"
    filters = "Filters"
    electrical = "Electrical"
    tires = "Tires"
    tools = "Tools"
    safety_equipment = "Safety Equipment"
    consumables = "Consumables"
    spare_parts = "Spare Parts"
    other = "Other"


class InventoryUnit(str, Enum):

    pieces = "pieces"
    liters = "liters"
    sets = "sets"
    pairs = "pairs"
    boxes = "boxes"
    meters = "meters"
    kg = "kg"
    other = "other"


class MovementDirection(str, Enum):

    incoming = "in"
    outgoing = "out"
