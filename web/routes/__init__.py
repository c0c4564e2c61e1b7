"""
API route package

Router modules:
- health: health check
- projects: progress billing projects, draws, holdback releases, invoices
"""
