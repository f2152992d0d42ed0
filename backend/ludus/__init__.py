"""LUDUS marketplace backend: users, vendors, activities and capacity-checked bookings."""
