"""College Attendance package.

This package is organized by feature modules (attendance, timetable, reports, ...)
with a thin Flask controller layer and service/repository layers underneath.
"""
