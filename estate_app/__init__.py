"""
Estate admin console backend: landlord registry, audit trail and the CSV
bulk importer.
"""
