# Custom exceptions to be used throughout the project.

class StorageError(Exception):
    """
    To be raised when the booking slot cannot be read from or written to durable storage.
    May be raised under the following circumstances:
        1. The database connection or query failed
        2. The stored slot does not hold a JSON array
        3. A stored record is missing one of the booking fields
    An absent slot is NOT an error, it reads as an empty list.
    """
    def __init__(self, *args):
        super().__init__(*args)
        self.message = args[0] if args else "Booking storage is unavailable."


class BookingValidationError(Exception):
    """
    To be raised when a booking submission does not pass validation.
    The message is safe to show back to the person filling in the form.
    """
    def __init__(self, *args, field=None):
        super().__init__(*args)
        self.message = args[0] if args else "Invalid booking submission."
        self.field = field
