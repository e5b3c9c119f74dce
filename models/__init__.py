from .inventory import InventoryItem, PurchaseRecord
from .packing_slip import PackingSlip, PackingSlipItem, SlipSequence
