"""School Attendance package.

This package is organized by feature modules (classes, students, attendance,
reports, insights, ...) with a thin Flask controller layer over service and
repository layers.
"""
