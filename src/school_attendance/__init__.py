"""School Attendance package.

Organized by feature modules (catalog, attendance, recap, ...) on top of a
document store seam, with a thin Flask controller layer per feature.
"""
