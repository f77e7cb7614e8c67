"""Care portal backend.

Flask + MySQL service for a residential care provider: staff clock-in/out,
resident case logs, ISP publish/acknowledge workflow, kiosk pairing,
audit trail and admin settings.
"""
