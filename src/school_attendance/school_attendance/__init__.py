"""School course scheduling and QR attendance.

This package is organized by feature modules (rooms, courses, attendance, ...)
with service layers that depend on repository protocols, and MySQL
repositories behind them.
"""
