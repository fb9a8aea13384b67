"""
                Festival Stalls

Ordering API and admin dashboard for a food-stall festival:
stalls publish menus, customers place orders, stall owners
update order status.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
