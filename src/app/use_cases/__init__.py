"""
Use Cases

Organized into domain folders:
- webhooks/: Payment event reconciliation
- founding_members/: Founding-member slot allocation
- tenants/: Tenant registration
- appointments/: Recurring bookings
- billing/: Connectivity fee subscription and outbox dispatch
- emails/: Email dispatch queue
"""
