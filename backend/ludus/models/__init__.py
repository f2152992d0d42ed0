from ludus.models.user import User
from ludus.models.vendor import Vendor
from ludus.models.activity import Activity
from ludus.models.booking import Booking

__all__ = ["User", "Vendor", "Activity", "Booking"]
