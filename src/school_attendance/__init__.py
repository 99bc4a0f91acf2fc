"""School Attendance package.

Feature modules (tokens, geofence, settings, roster, attendance, sweeps,
reports) each carry a domain model, a repository interface with a MySQL
implementation, and a service layer; Flask controllers stay thin.
"""
