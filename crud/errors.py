class FulfillmentError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ItemNotFound(FulfillmentError):
    def __init__(self, item_id):
        super().__init__(f"Item not found: {item_id}")
        self.item_id = item_id

class SlipNotFound(FulfillmentError):
    def __init__(self, slip_id):
        super().__init__("Packing slip not found")
        self.slip_id = slip_id

class ValidationError(FulfillmentError):
    pass

class InsufficientStock(FulfillmentError):
    """The conditional decrement matched no row: stock moved under us."""

    def __init__(self, item_id, requested: int):
        super().__init__(f"Stock for item {item_id} changed while allocating {requested} units")
        self.item_id = item_id
        self.requested = requested

class SlipCompleted(FulfillmentError):
    def __init__(self, slip_number: str):
        super().__init__(f"Packing slip {slip_number} is completed and can no longer be edited")
        self.slip_number = slip_number
