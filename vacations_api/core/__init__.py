"""
Core utilities shared across the vacations API.

Configuration, logging, password hashing, the mailer adapter and the rate
limiter live here so routers and services do not depend on each other for
cross-cutting concerns.
"""
