"""
Use cases for the vacations API.

Each service module orchestrates the JSON store to implement business rules
(create a booking, validate a promotion, assign a role, etc.). Routers call
these services instead of manipulating the store directly.
"""
