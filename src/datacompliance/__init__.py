"""datacompliance: erasure and export of users' personal data.

Decides whether a user may be deleted, erases or pseudonymizes their
records across every registered domain in dependency order, records an
append-only audit entry of what was done, and exports everything held
about a user.
"""

__version__ = "0.1.0"
