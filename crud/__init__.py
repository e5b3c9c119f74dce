from .inventory import (
    create_inventory_item, get_inventory_item, get_inventory_items,
    update_inventory_item, delete_inventory_item, add_stock, get_low_stock_items
)
from .packing_slip import (
    create_packing_slip, get_packing_slip, get_packing_slips,
    update_packing_slip, complete_packing_slip, cancel_packing_slip,
    preview_allocation, generate_slip_number
)
