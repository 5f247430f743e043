"""Pure domain rules (status transitions, discounts, roles) and seed data."""
