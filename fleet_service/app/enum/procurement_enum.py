from enum import Enum


class PurchaseOrderStatus(str, Enum):

    pending = "pending"
    received = "received"
    cancelled = "cancelled"
