# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable infrastructure:
# - database.py: SQLAlchemy engine, session scope and schema creation
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================
