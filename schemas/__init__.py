from .inventory import InventoryItem, InventoryItemCreate, InventoryItemUpdate, StockAddition, PurchaseRecord
from .packing_slip import (
    PackingSlip, PackingSlipCreate, PackingSlipUpdate,
    PackingSlipItem, LineItemRequest, CustomerInfo,
    AllocationPreview, AllocationPreviewRequest
)
